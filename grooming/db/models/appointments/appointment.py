# grooming/db/models/appointments/appointment.py
from decimal import Decimal
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime

from ....application.ports.appointments_repo import AppointmentStatus
from ....utils import utcnow

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    service_type_id: int = Field(foreign_key="service_types.id")
    scheduled_at: datetime = Field(sa_type=DateTime, index=True)
    status: str = Field(default=AppointmentStatus.PENDING.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Frozen at creation (and on full update), never recomputed on read
    base_price: Decimal = Field(max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    final_price: Decimal = Field(max_digits=10, decimal_places=2)

    # Optimistic concurrency token
    version: int = Field(default=1)

    # Relationships
    user: Optional["User"] = Relationship(back_populates="appointments")
    service_type: Optional["ServiceType"] = Relationship(back_populates="appointments")
