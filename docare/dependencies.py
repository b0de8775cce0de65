import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from .application.ports.rate_limiter import RateLimiter
from .application.services.admin_service import AdminService
from .application.services.appointments_service import AppointmentsService
from .application.services.auth_service import AuthService
from .application.services.billing_service import BillingService
from .application.services.devices_service import DevicesService
from .application.services.medications_service import MedicationsService
from .application.services.messaging_service import MessagingService
from .application.services.profile_service import ProfileService
from .core.config import settings
from .db.models.users import User
from .db.session import get_session
from .exceptions import APIException
from .infrastructure.audit import SqlAuditLogger
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from .infrastructure.persistence.sqlalchemy.repositories.audit_repository_sql import SqlAuditLogRepository
from .infrastructure.persistence.sqlalchemy.repositories.billing_repository_sql import SqlBillingRepository
from .infrastructure.persistence.sqlalchemy.repositories.devices_repository_sql import SqlDevicesRepository
from .infrastructure.persistence.sqlalchemy.repositories.medications_repository_sql import SqlMedicationsRepository
from .infrastructure.persistence.sqlalchemy.repositories.messages_repository_sql import SqlMessagesRepository
from .infrastructure.persistence.sqlalchemy.repositories.token_repository_sql import SqlRefreshTokenRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.rate_limit import get_rate_limiter
from .infrastructure.security import jwt_tokens
from .utils import get_client_ip

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def authenticate_token(token: str, session: Session) -> User:
    """Resolve an access token to an active, unlocked user or raise."""
    try:
        payload = jwt_tokens.verify_access_token(token)
    except jwt_tokens.TokenVerificationError as e:
        if e.expired:
            raise APIException(401, "Token expired", code="TOKEN_EXPIRED")
        raise APIException(401, "Invalid authentication token", code="INVALID_TOKEN")

    user = SqlUserRepository(session).get_by_id(payload["sub"])
    if not user:
        raise APIException(401, "User not found")
    if not user.is_active:
        raise APIException(403, "Account is suspended or deactivated")
    if user.is_locked():
        raise APIException(403, "Account is temporarily locked", locked_until=user.locked_until.isoformat())
    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise APIException(401, "No authentication token provided")
    user = authenticate_token(credentials.credentials, session)
    request.state.user_id = user.id
    return user


def require_roles(*roles: str):
    def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(f"User {user.id} with role {user.role} denied, requires one of {roles}")
            raise APIException(403, "Insufficient permissions")
        return user

    return _checker


def require_mfa(request: Request, user: User = Depends(get_current_user)) -> User:
    if user.mfa_enabled and request.headers.get("x-mfa-verified") != "true":
        raise APIException(403, "MFA verification required", code="MFA_REQUIRED")
    return user


def auth_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    key = f"auth:{get_client_ip(request)}"
    if not limiter.allow(key, settings.AUTH_RATE_LIMIT_MAX_REQUESTS, settings.AUTH_RATE_LIMIT_WINDOW_SEC):
        logger.warning(f"Auth rate limit exceeded for {key}")
        raise APIException(
            429,
            "Too many authentication attempts, please try again later",
            retry_after=settings.AUTH_RATE_LIMIT_WINDOW_SEC,
        )


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        token_repo=SqlRefreshTokenRepository(session),
        audit=SqlAuditLogger(session),
    )


def get_profile_service(session: Session = Depends(get_session)) -> ProfileService:
    return ProfileService(
        user_repo=SqlUserRepository(session),
        token_repo=SqlRefreshTokenRepository(session),
        audit=SqlAuditLogger(session),
    )


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    return AppointmentsService(repo=SqlAppointmentsRepository(session), user_repo=SqlUserRepository(session))


def get_medications_service(session: Session = Depends(get_session)) -> MedicationsService:
    return MedicationsService(repo=SqlMedicationsRepository(session))


def get_messaging_service(session: Session = Depends(get_session)) -> MessagingService:
    return MessagingService(repo=SqlMessagesRepository(session), user_repo=SqlUserRepository(session))


def get_billing_service(session: Session = Depends(get_session)) -> BillingService:
    return BillingService(repo=SqlBillingRepository(session), user_repo=SqlUserRepository(session))


def get_devices_service(session: Session = Depends(get_session)) -> DevicesService:
    return DevicesService(repo=SqlDevicesRepository(session))


def get_admin_service(session: Session = Depends(get_session)) -> AdminService:
    return AdminService(
        user_repo=SqlUserRepository(session),
        appointments_repo=SqlAppointmentsRepository(session),
        billing_repo=SqlBillingRepository(session),
        audit_repo=SqlAuditLogRepository(session),
        token_repo=SqlRefreshTokenRepository(session),
        audit=SqlAuditLogger(session),
    )