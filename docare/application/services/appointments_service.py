from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional
import uuid

from ...core.config import settings
from ...db.models.health import Appointment
from ...db.models.users import User
from ...exceptions import APIException
from ...utils import to_naive_utc
from ..ports.appointments_repo import AppointmentQuery, AppointmentsRepository
from ..ports.user_repo import UserRepository

ADMIN_ROLES = ("admin", "super_admin")


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    user_repo: UserRepository
    open_hour: int = field(default_factory=lambda: settings.CLINIC_OPEN_HOUR)
    close_hour: int = field(default_factory=lambda: settings.CLINIC_CLOSE_HOUR)
    slot_minutes: int = field(default_factory=lambda: settings.DEFAULT_APPOINTMENT_DURATION_MINUTES)

    def list_for(
        self,
        user: User,
        status: Optional[str] = None,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None,
        provider_id: Optional[str] = None,
    ) -> List[Appointment]:
        query = AppointmentQuery(status=status, start_from=to_naive_utc(start_from), start_to=to_naive_utc(start_to))
        if user.role == "patient":
            query.patient_id = user.id
            query.provider_id = provider_id
        elif user.role == "provider":
            query.provider_id = user.id
        else:
            query.provider_id = provider_id
        return self.repo.find(query)

    def get(self, user: User, appointment_id: str) -> Appointment:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise APIException(404, "Appointment not found")
        if user.id not in (appt.patient_id, appt.provider_id) and user.role not in ADMIN_ROLES:
            raise APIException(403, "Access denied")
        return appt

    def create(
        self,
        user: User,
        provider_id: str,
        appointment_type: str,
        scheduled_start: datetime,
        scheduled_end: datetime,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Appointment:
        start, end = to_naive_utc(scheduled_start), to_naive_utc(scheduled_end)
        self._validate_window(start, end)
        if start < datetime.utcnow():
            raise APIException(400, "Appointment cannot be scheduled in the past")

        provider = self.user_repo.get_by_id(provider_id)
        if not provider or provider.role != "provider" or not provider.is_active:
            raise APIException(400, "Invalid provider")

        if self.repo.find_conflict(provider_id, start, end):
            raise APIException(409, "Provider is not available at this time")

        appt = Appointment(
            patient_id=user.id,
            provider_id=provider_id,
            appointment_type=appointment_type,
            status="scheduled",
            scheduled_start=start,
            scheduled_end=end,
            reason=reason,
            notes=notes,
            location=location,
            video_room_id=str(uuid.uuid4()) if appointment_type == "video" else None,
        )
        return self.repo.add(appt)

    def update(self, user: User, appointment_id: str, changes: Dict[str, Any]) -> Appointment:
        appt = self.get(user, appointment_id)

        new_start = to_naive_utc(changes.get("scheduled_start")) or appt.scheduled_start
        new_end = to_naive_utc(changes.get("scheduled_end")) or appt.scheduled_end
        if (new_start, new_end) != (appt.scheduled_start, appt.scheduled_end):
            self._validate_window(new_start, new_end)
            if self.repo.find_conflict(appt.provider_id, new_start, new_end, exclude_id=appt.id):
                raise APIException(409, "Provider is not available at this time")
            appt.scheduled_start = new_start
            appt.scheduled_end = new_end

        status = changes.get("status")
        if status:
            appt.status = status
            if status == "cancelled":
                self._mark_cancelled(appt, user, changes.get("cancellation_reason"))

        if changes.get("notes") is not None:
            appt.notes = changes["notes"]

        return self.repo.save(appt)

    def cancel(self, user: User, appointment_id: str, reason: Optional[str] = None) -> Appointment:
        appt = self.get(user, appointment_id)
        if appt.status == "cancelled":
            raise APIException(400, "Appointment is already cancelled")
        if appt.status == "completed":
            raise APIException(400, "Cannot cancel completed appointment")
        appt.status = "cancelled"
        self._mark_cancelled(appt, user, reason)
        return self.repo.save(appt)

    def available_slots(self, provider_id: str, day: date) -> List[Dict[str, datetime]]:
        day_start = datetime.combine(day, time(hour=self.open_hour))
        day_end = datetime.combine(day, time(hour=self.close_hour))
        booked = self.repo.list_active_for_provider(provider_id, day_start, day_end)

        slots = []
        step = timedelta(minutes=self.slot_minutes)
        cursor = day_start
        while cursor + step <= day_end:
            slot_end = cursor + step
            if not any(a.scheduled_start < slot_end and a.scheduled_end > cursor for a in booked):
                slots.append({"start": cursor, "end": slot_end})
            cursor = slot_end
        return slots

    @staticmethod
    def _validate_window(start: datetime, end: datetime) -> None:
        if end <= start:
            raise APIException(400, "Appointment end must be after its start")

    @staticmethod
    def _mark_cancelled(appt: Appointment, user: User, reason: Optional[str]) -> None:
        appt.cancellation_reason = reason or appt.cancellation_reason or "Cancelled by user"
        appt.cancelled_by = user.id
        appt.cancelled_at = datetime.utcnow()
