from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...db.models.billing import Transaction


@dataclass
class TransactionQuery:
    user_id: str
    status: Optional[str] = None
    type: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


class BillingRepository:
    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        ...

    def find(self, query: TransactionQuery) -> List[Transaction]:
        ...

    def list_pending(self, user_id: str) -> List[Transaction]:
        ...

    def add(self, transaction: Transaction) -> Transaction:
        ...

    def total_completed_cents(self) -> int:
        ...
