# Schemas package (re-export feature modules for stable imports)
from .auth.auth import *
from .appointments.appointment import *
from .catalog.service_type import *
from .history.history import *
from .common.common import *
