# Routers package
from . import admin_router
from . import appointments_router
from . import auth_router
from . import billing_router
from . import devices_router
from . import medications_router
from . import messages_router
from . import realtime_router
from . import users_router

__all__ = [
    "admin_router",
    "appointments_router",
    "auth_router",
    "billing_router",
    "devices_router",
    "medications_router",
    "messages_router",
    "realtime_router",
    "users_router",
]
