# Models package (re-export feature modules for stable imports)
from .users.user import User
from .catalog.service_type import ServiceType
from .appointments.appointment import Appointment
from .appointments.history import AppointmentHistory

__all__ = [
    "User",
    "ServiceType",
    "Appointment",
    "AppointmentHistory",
]
