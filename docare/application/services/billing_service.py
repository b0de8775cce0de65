from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...db.models.billing import Transaction
from ...exceptions import APIException
from ...utils import format_cents, to_naive_utc
from ..ports.billing_repo import BillingRepository, TransactionQuery
from ..ports.user_repo import UserRepository


@dataclass
class BillingService:
    repo: BillingRepository
    user_repo: UserRepository

    def list_transactions(
        self,
        user_id: str,
        status: Optional[str] = None,
        type: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> List[Transaction]:
        return self.repo.find(TransactionQuery(
            user_id=user_id,
            status=status,
            type=type,
            created_from=to_naive_utc(created_from),
            created_to=to_naive_utc(created_to),
        ))

    def balance(self, user_id: str) -> Dict[str, Any]:
        pending = self.repo.list_pending(user_id)
        total = sum(t.amount_cents for t in pending)
        return {
            "balance_cents": total,
            "balance_display": format_cents(total),
            "currency": "USD",
            "pending_count": len(pending),
        }

    def create_transaction(self, user_id: str, data: Dict[str, Any]) -> Transaction:
        if data["amount_cents"] < 0:
            raise APIException(400, "Amount cannot be negative")
        txn = Transaction(
            user_id=user_id,
            appointment_id=data.get("appointment_id"),
            amount_cents=data["amount_cents"],
            currency=data.get("currency") or "USD",
            type=data["type"],
            payment_method=data["payment_method"],
            description=data.get("description"),
            meta=dict(data.get("metadata") or {}),
            status="pending",
        )
        return self.repo.add(txn)

    def receipt(self, user_id: str, transaction_id: str) -> Dict[str, Any]:
        txn = self.repo.get_by_id(transaction_id)
        if not txn or txn.user_id != user_id:
            raise APIException(404, "Transaction not found")
        user = self.user_repo.get_by_id(user_id)
        return {
            "transaction_id": txn.id,
            "date": txn.created_at,
            "amount": format_cents(txn.amount_cents),
            "currency": txn.currency,
            "type": txn.type,
            "payment_method": txn.payment_method,
            "status": txn.status,
            "description": txn.description,
            "patient_name": user.name if user else None,
        }
