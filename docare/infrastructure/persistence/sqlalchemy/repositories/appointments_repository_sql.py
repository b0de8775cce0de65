from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models.health import Appointment, ACTIVE_APPOINTMENT_STATUSES
from .....application.ports.appointments_repo import AppointmentQuery, AppointmentsRepository


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        return self.session.get(Appointment, appointment_id)

    def find(self, query: AppointmentQuery) -> List[Appointment]:
        stmt = select(Appointment)
        if query.patient_id:
            stmt = stmt.where(Appointment.patient_id == query.patient_id)
        if query.provider_id:
            stmt = stmt.where(Appointment.provider_id == query.provider_id)
        if query.status:
            stmt = stmt.where(Appointment.status == query.status)
        if query.start_from:
            stmt = stmt.where(Appointment.scheduled_start >= query.start_from)
        if query.start_to:
            stmt = stmt.where(Appointment.scheduled_start <= query.start_to)
        return list(self.session.exec(stmt.order_by(Appointment.scheduled_start.asc())).all())

    def find_conflict(self, provider_id: str, start: datetime, end: datetime, exclude_id: Optional[str] = None) -> Optional[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.provider_id == provider_id)
            .where(Appointment.status.in_(ACTIVE_APPOINTMENT_STATUSES))
            .where(Appointment.scheduled_start < end)
            .where(Appointment.scheduled_end > start)
        )
        if exclude_id:
            stmt = stmt.where(Appointment.id != exclude_id)
        return self.session.exec(stmt).first()

    def list_active_for_provider(self, provider_id: str, start: datetime, end: datetime) -> List[Appointment]:
        return list(self.session.exec(
            select(Appointment)
            .where(Appointment.provider_id == provider_id)
            .where(Appointment.status.in_(ACTIVE_APPOINTMENT_STATUSES))
            .where(Appointment.scheduled_start < end)
            .where(Appointment.scheduled_end > start)
            .order_by(Appointment.scheduled_start.asc())
        ).all())

    def add(self, appointment: Appointment) -> Appointment:
        self.session.add(appointment)
        self.session.commit()
        self.session.refresh(appointment)
        return appointment

    def save(self, appointment: Appointment) -> Appointment:
        appointment.updated_at = datetime.utcnow()
        return self.add(appointment)

    def count(self, status: Optional[str] = None, start_from: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(Appointment)
        if status:
            stmt = stmt.where(Appointment.status == status)
        if start_from:
            stmt = stmt.where(Appointment.scheduled_start >= start_from)
        return int(self.session.exec(stmt).one())
