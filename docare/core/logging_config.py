# docare/core/logging_config.py
"""
Logging setup: text console output, optional rotating JSON files, and
redaction of sensitive values before anything is emitted.
"""

import logging
import logging.config
import re
from typing import Any, Dict

from .config import Settings, settings

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = ("password", "token", "ssn", "credit_card", "api_key", "secret")

# key=value, key: value and "key": "value" forms
_SENSITIVE_PATTERN = re.compile(
    r"""(?P<key>["']?[\w-]*(?:%s)[\w-]*["']?\s*[:=]\s*)(?P<quote>["']?)(?P<value>[^"',\s}&]+)"""
    % "|".join(SENSITIVE_KEYS),
    re.IGNORECASE,
)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive mapping entries masked."""
    if isinstance(value, dict):
        return {
            k: (REDACTED if isinstance(k, str) and is_sensitive_key(k) else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(v) for v in value)
    if isinstance(value, str):
        return _SENSITIVE_PATTERN.sub(lambda m: f"{m.group('key')}{m.group('quote')}{REDACTED}", value)
    return value


class SensitiveDataFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, dict):
            record.args = redact(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(redact(a) for a in record.args)
        return True


def build_logging_config(cfg: Settings) -> Dict[str, Any]:
    level = cfg.LOG_LEVEL.upper()
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "structured",
            "filters": ["redact"],
            "stream": "ext://sys.stdout",
        }
    }
    if cfg.LOG_FILE:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "json",
            "filters": ["redact"],
            "filename": cfg.LOG_FILE,
            "maxBytes": cfg.LOG_MAX_BYTES,
            "backupCount": cfg.LOG_BACKUP_COUNT,
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "json",
            "filters": ["redact"],
            "filename": f"{cfg.LOG_FILE}.error",
            "maxBytes": cfg.LOG_MAX_BYTES,
            "backupCount": cfg.LOG_BACKUP_COUNT,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact": {"()": SensitiveDataFilter},
        },
        "formatters": {
            "structured": {
                "format": cfg.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "level": level,
                "handlers": list(handlers),
            },
            "uvicorn.access": {
                "level": "WARNING",
                "propagate": True,
            },
            "sqlalchemy.engine": {
                "level": "INFO" if cfg.DATABASE_ECHO else "WARNING",
                "propagate": True,
            },
        },
    }


def configure_logging(cfg: Settings = settings) -> None:
    logging.config.dictConfig(build_logging_config(cfg))
