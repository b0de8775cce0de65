import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ...core.config import settings


class TokenVerificationError(Exception):
    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.message = message
        self.expired = expired


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user_id: str, email: str, role: str) -> str:
    """Short-lived token sent with every API call."""
    now = _now()
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "type": "access",
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(user_id: str) -> str:
    """Long-lived token, signed with its own secret and unique per issue."""
    now = _now()
    payload = {
        "sub": user_id,
        "type": "refresh",
        "jti": str(uuid.uuid4()),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.REFRESH_SECRET_KEY, algorithm=settings.ALGORITHM)


def _verify(token: str, secret: str, expected_type: str, label: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.ALGORITHM],
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenVerificationError(f"{label} token expired", expired=True)
    except jwt.InvalidTokenError:
        raise TokenVerificationError(f"Invalid {label.lower()} token")
    if payload.get("type") != expected_type:
        raise TokenVerificationError(f"Invalid {label.lower()} token")
    return payload


def verify_access_token(token: str) -> Dict[str, Any]:
    return _verify(token, settings.SECRET_KEY, "access", "Access")


def verify_refresh_token(token: str) -> Dict[str, Any]:
    return _verify(token, settings.REFRESH_SECRET_KEY, "refresh", "Refresh")


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Read claims without checking the signature. Never use for authorization."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None


def get_token_expiration(token: str) -> Optional[datetime]:
    payload = decode_token(token)
    if not payload or "exp" not in payload:
        return None
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
