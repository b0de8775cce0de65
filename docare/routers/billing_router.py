from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..application.services.billing_service import BillingService
from ..db.models.users import User
from ..dependencies import get_billing_service, get_current_user
from ..exceptions import create_success_response
from ..schemas.billing.billing import TransactionCreate, TransactionResponse, TransactionStatus, TransactionType

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.get("/transactions")
def list_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    type_filter: Optional[TransactionType] = Query(None, alias="type"),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    current_user: User = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    txns = billing_service.list_transactions(current_user.id, status_filter, type_filter, created_from, created_to)
    return create_success_response(
        [TransactionResponse.model_validate(t).model_dump() for t in txns],
        count=len(txns),
    )


@router.get("/balance")
def get_balance(
    current_user: User = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    return create_success_response(billing_service.balance(current_user.id))


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    current_user: User = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    txn = billing_service.create_transaction(current_user.id, payload.model_dump())
    return create_success_response(TransactionResponse.model_validate(txn).model_dump())


@router.get("/transactions/{transaction_id}/receipt")
def get_receipt(
    transaction_id: str,
    current_user: User = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    return create_success_response(billing_service.receipt(current_user.id, transaction_id))
