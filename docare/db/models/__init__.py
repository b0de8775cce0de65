# Import all models so SQLModel.metadata knows every table
from .users import User, UserProfile
from .auth import RefreshToken
from .health import Appointment, Medication, Device
from .messaging import Message
from .billing import Transaction
from .audit import AuditLog

__all__ = [
    "User",
    "UserProfile",
    "RefreshToken",
    "Appointment",
    "Medication",
    "Device",
    "Message",
    "Transaction",
    "AuditLog",
]
