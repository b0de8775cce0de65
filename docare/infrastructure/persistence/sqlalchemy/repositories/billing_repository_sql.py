from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models.billing import Transaction
from .....application.ports.billing_repo import BillingRepository, TransactionQuery


class SqlBillingRepository(BillingRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        return self.session.get(Transaction, transaction_id)

    def find(self, query: TransactionQuery) -> List[Transaction]:
        stmt = select(Transaction).where(Transaction.user_id == query.user_id)
        if query.status:
            stmt = stmt.where(Transaction.status == query.status)
        if query.type:
            stmt = stmt.where(Transaction.type == query.type)
        if query.created_from:
            stmt = stmt.where(Transaction.created_at >= query.created_from)
        if query.created_to:
            stmt = stmt.where(Transaction.created_at <= query.created_to)
        return list(self.session.exec(stmt.order_by(Transaction.created_at.desc())).all())

    def list_pending(self, user_id: str) -> List[Transaction]:
        return self.find(TransactionQuery(user_id=user_id, status="pending"))

    def add(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        self.session.commit()
        self.session.refresh(transaction)
        return transaction

    def total_completed_cents(self) -> int:
        total = self.session.exec(
            select(func.coalesce(func.sum(Transaction.amount_cents), 0)).where(Transaction.status == "completed")
        ).one()
        return int(total)
