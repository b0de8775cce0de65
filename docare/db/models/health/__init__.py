from .appointment import Appointment, APPOINTMENT_TYPES, APPOINTMENT_STATUSES, ACTIVE_APPOINTMENT_STATUSES
from .medication import Medication, MEDICATION_ROUTES, MEDICATION_STATUSES
from .device import Device, DEVICE_TYPES

__all__ = [
    "Appointment",
    "Medication",
    "Device",
    "APPOINTMENT_TYPES",
    "APPOINTMENT_STATUSES",
    "ACTIVE_APPOINTMENT_STATUSES",
    "MEDICATION_ROUTES",
    "MEDICATION_STATUSES",
    "DEVICE_TYPES",
]
