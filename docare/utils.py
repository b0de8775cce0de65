import time
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import Request


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store every timestamp as naive UTC; aware inputs are converted first."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_cents(amount_cents: int) -> str:
    return f"${amount_cents / 100:.2f}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_client_info(request: Request) -> Dict[str, Optional[str]]:
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent"),
        "request_id": getattr(request.state, "request_id", None),
    }


PROCESS_STARTED_AT = time.time()


def uptime_seconds() -> float:
    return round(time.time() - PROCESS_STARTED_AT, 3)
