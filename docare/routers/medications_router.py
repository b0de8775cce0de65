import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..application.services.medications_service import MedicationsService
from ..db.models.users import User
from ..dependencies import get_current_user, get_medications_service
from ..exceptions import APIException, create_success_response
from ..schemas.medications.medication import MedicationCreate, MedicationResponse, MedicationStatus, MedicationUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/medications", tags=["Medications"])


def _out(med) -> dict:
    return MedicationResponse.model_validate(med).model_dump()


@router.get("/")
def list_medications(
    status_filter: Optional[MedicationStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    meds = med_service.list_for_user(current_user, status_filter)
    return create_success_response([_out(m) for m in meds], count=len(meds))


@router.get("/{medication_id}")
def get_medication(
    medication_id: str,
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    return create_success_response(_out(med_service.get(current_user, medication_id)))


@router.post("/", status_code=status.HTTP_201_CREATED)
def add_medication(
    payload: MedicationCreate,
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    try:
        med = med_service.create(current_user, payload.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding medication for user {current_user.id}: {e}")
        raise APIException(500, "Failed to add medication")
    return create_success_response(_out(med))


@router.patch("/{medication_id}")
def update_medication(
    medication_id: str,
    payload: MedicationUpdate,
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    med = med_service.update(current_user, medication_id, payload.model_dump(exclude_unset=True))
    return create_success_response(_out(med))


@router.delete("/{medication_id}")
def discontinue_medication(
    medication_id: str,
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    return create_success_response(_out(med_service.discontinue(current_user, medication_id)))


@router.post("/{medication_id}/refill")
def request_refill(
    medication_id: str,
    current_user: User = Depends(get_current_user),
    med_service: MedicationsService = Depends(get_medications_service),
):
    med = med_service.refill(current_user, medication_id)
    logger.info(f"Refill requested for medication {medication_id}")
    return create_success_response({
        "message": "Refill request submitted",
        "medication": _out(med),
    })
