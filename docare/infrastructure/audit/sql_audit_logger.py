import logging
from typing import Any, Dict, Optional

from sqlmodel import Session

from ...application.ports.audit_logger import AuditLogger
from ...db.models.audit import AuditLog
from .std_logger import StdAuditLogger

logger = logging.getLogger(__name__)


class SqlAuditLogger(AuditLogger):
    """Persists audit entries and mirrors them to the application log.

    A failed write is logged and swallowed so auditing never breaks the
    request that triggered it.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._mirror = StdAuditLogger()

    def log(
        self,
        action: str,
        user_id: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
        status: str = "success",
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._mirror.log(
            action,
            user_id=user_id,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            status=status,
            error_message=error_message,
            metadata=metadata,
        )
        entry = AuditLog(
            action=action,
            user_id=user_id,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            status=status,
            error_message=error_message,
            meta=metadata or {},
        )
        try:
            self.session.add(entry)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(f"Failed to write audit log {action}: {e}")
