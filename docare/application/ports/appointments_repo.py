from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...db.models.health import Appointment


@dataclass
class AppointmentQuery:
    patient_id: Optional[str] = None
    provider_id: Optional[str] = None
    status: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None


class AppointmentsRepository:
    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        ...

    def find(self, query: AppointmentQuery) -> List[Appointment]:
        ...

    def find_conflict(self, provider_id: str, start: datetime, end: datetime, exclude_id: Optional[str] = None) -> Optional[Appointment]:
        ...

    def list_active_for_provider(self, provider_id: str, start: datetime, end: datetime) -> List[Appointment]:
        ...

    def add(self, appointment: Appointment) -> Appointment:
        ...

    def save(self, appointment: Appointment) -> Appointment:
        ...

    def count(self, status: Optional[str] = None, start_from: Optional[datetime] = None) -> int:
        ...
