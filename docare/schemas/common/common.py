# docare/schemas/common/common.py
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?\d{7,15}$")


def validate_email_address(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


def validate_phone_number(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    cleaned = re.sub(r"[\s\-().]", "", value)
    if not PHONE_PATTERN.match(cleaned):
        raise ValueError("Invalid phone number")
    return cleaned


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def paginate(page: int, limit: int, total: int) -> Dict[str, Any]:
    return Pagination(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit if limit else 0).model_dump()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str
    uptime_seconds: float
    database: str
    realtime_connections: int = 0
