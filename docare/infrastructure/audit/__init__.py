from .std_logger import StdAuditLogger
from .sql_audit_logger import SqlAuditLogger

__all__ = ["StdAuditLogger", "SqlAuditLogger"]
