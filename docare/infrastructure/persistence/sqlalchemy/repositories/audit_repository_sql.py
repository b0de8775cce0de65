from typing import List, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models.audit import AuditLog
from .....application.ports.audit_repo import AuditLogRepository, AuditQuery


class SqlAuditLogRepository(AuditLogRepository):
    def __init__(self, session: Session):
        self.session = session

    def search(self, query: AuditQuery) -> Tuple[List[AuditLog], int]:
        stmt = select(AuditLog)
        if query.user_id:
            stmt = stmt.where(AuditLog.user_id == query.user_id)
        if query.action:
            stmt = stmt.where(AuditLog.action.ilike(f"%{query.action}%"))
        if query.created_from:
            stmt = stmt.where(AuditLog.created_at >= query.created_from)
        if query.created_to:
            stmt = stmt.where(AuditLog.created_at <= query.created_to)
        total = self.session.exec(select(func.count()).select_from(stmt.subquery())).one()
        rows = self.session.exec(
            stmt.order_by(AuditLog.created_at.desc()).offset(query.offset).limit(query.limit)
        ).all()
        return list(rows), int(total)

    def recent(self, limit: int = 10) -> List[AuditLog]:
        return list(self.session.exec(select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)).all())
