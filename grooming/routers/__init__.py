# Routers package
from . import auth_router
from . import service_types_router
from . import appointments_router
from . import history_router

__all__ = [
    "auth_router",
    "service_types_router",
    "appointments_router",
    "history_router",
]
