from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from ...db.models.audit import AuditLog


@dataclass
class AuditQuery:
    user_id: Optional[str] = None
    action: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    offset: int = 0
    limit: int = 50


class AuditLogRepository:
    """Read side of the audit trail. Entries are never updated or deleted."""

    def search(self, query: AuditQuery) -> Tuple[List[AuditLog], int]:
        ...

    def recent(self, limit: int = 10) -> List[AuditLog]:
        ...
