import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ...application.ports.audit_logger import AuditLogger


class StdAuditLogger(AuditLogger):
    """Writes audit entries to the application log only."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

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
        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "action": action,
            "user_id": user_id,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "request_id": request_id,
            "ip_address": ip_address,
            "status": status,
            "error_message": error_message,
            "metadata": metadata or {},
        }
        self._logger.info(f"AUDIT: {json.dumps(entry, default=str)}")
