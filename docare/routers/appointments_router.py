from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..application.services.appointments_service import AppointmentsService
from ..db.models.users import User
from ..dependencies import get_appointments_service, get_current_user
from ..exceptions import APIException, create_success_response
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentUpdate,
    TimeSlot,
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _out(appt) -> dict:
    return AppointmentResponse.model_validate(appt).model_dump()


@router.get("/")
def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    start_from: Optional[datetime] = Query(None, alias="from"),
    start_to: Optional[datetime] = Query(None, alias="to"),
    provider_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appts = appt_service.list_for(current_user, status_filter, start_from, start_to, provider_id)
    return create_success_response([_out(a) for a in appts], count=len(appts))


@router.get("/providers/available")
def available_slots(
    provider_id: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    if not provider_id or day is None:
        raise APIException(400, "provider_id and date are required")
    slots = appt_service.available_slots(provider_id, day)
    return create_success_response({
        "provider_id": provider_id,
        "date": day.isoformat(),
        "available_slots": [TimeSlot(**s).model_dump() for s in slots],
    })


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return create_success_response(_out(appt_service.get(current_user, appointment_id)))


@router.post("/", status_code=status.HTTP_201_CREATED)
def book_appointment(
    payload: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.create(
        current_user,
        provider_id=payload.provider_id,
        appointment_type=payload.appointment_type,
        scheduled_start=payload.scheduled_start,
        scheduled_end=payload.scheduled_end,
        reason=payload.reason,
        notes=payload.notes,
        location=payload.location,
    )
    return create_success_response(_out(appt))


@router.patch("/{appointment_id}")
def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.update(current_user, appointment_id, payload.model_dump(exclude_unset=True))
    return create_success_response(_out(appt))


@router.delete("/{appointment_id}")
def cancel_appointment(
    appointment_id: str,
    reason: Optional[str] = Query(None, max_length=2000),
    current_user: User = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.cancel(current_user, appointment_id, reason)
    return create_success_response(_out(appt))
