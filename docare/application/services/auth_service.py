from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Union
import logging

from ...core.config import settings
from ...db.models.users import User, UserProfile
from ...exceptions import APIException
from ...infrastructure.security import encryption, jwt_tokens, passwords
from ...utils import normalize_email
from ..ports.audit_logger import AuditLogger
from ..ports.token_repo import RefreshTokenRepository
from ..ports.user_repo import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass
class MfaChallenge:
    user_id: str
    mfa_required: bool = True


@dataclass
class AccessGrant:
    access_token: str
    expires_in: int


@dataclass
class AuthService:
    user_repo: UserRepository
    token_repo: RefreshTokenRepository
    audit: AuditLogger
    max_failed_attempts: int = field(default_factory=lambda: settings.MAX_FAILED_LOGIN_ATTEMPTS)
    lockout_minutes: int = field(default_factory=lambda: settings.ACCOUNT_LOCKOUT_MINUTES)

    @property
    def access_ttl_seconds(self) -> int:
        return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def signup(
        self,
        email: str,
        password: str,
        name: str,
        date_of_birth: Optional[Union[date, str]] = None,
        phone: Optional[str] = None,
        gender: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> AuthResult:
        email = normalize_email(email)
        if self.user_repo.get_by_email(email):
            raise APIException(409, "An account with this email already exists")

        now = datetime.utcnow()
        user = User(
            email=email,
            password_hash=passwords.hash_password(password),
            name=name.strip(),
            role="patient",
            status="active",
            password_changed_at=now,
            terms_accepted_at=now,
            privacy_accepted_at=now,
        )
        dob = date_of_birth.isoformat() if isinstance(date_of_birth, date) else date_of_birth
        profile = UserProfile(
            user_id=user.id,
            date_of_birth_encrypted=encryption.encrypt(dob),
            phone_encrypted=encryption.encrypt(phone),
            gender=gender,
        )
        user = self.user_repo.add(user, profile)

        result = self._issue_tokens(user, ip_address, user_agent)
        self.audit.log("SIGNUP", user_id=user.id, resource_type="user", resource_id=user.id,
                       ip_address=ip_address, user_agent=user_agent, request_id=request_id)
        logger.info(f"New patient account created: {user.id}")
        return result

    def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Union[AuthResult, MfaChallenge]:
        user = self.user_repo.get_by_email(normalize_email(email))
        if not user:
            raise APIException(401, "Invalid credentials")

        if not user.is_active:
            raise APIException(403, "Account is suspended or deactivated")

        now = datetime.utcnow()
        if user.is_locked(now):
            raise APIException(403, "Account is temporarily locked. Try again later.", locked_until=user.locked_until.isoformat())

        if not passwords.verify_password(password, user.password_hash):
            self._record_failed_login(user, now, ip_address, user_agent, request_id)

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login_at = now
        user.last_login_ip = ip_address
        user = self.user_repo.save(user)

        if user.mfa_enabled:
            return MfaChallenge(user_id=user.id)

        result = self._issue_tokens(user, ip_address, user_agent)
        self.audit.log("LOGIN", user_id=user.id, resource_type="user", resource_id=user.id,
                       ip_address=ip_address, user_agent=user_agent, request_id=request_id)
        return result

    def _record_failed_login(
        self,
        user: User,
        now: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
        request_id: Optional[str] = None,
    ) -> None:
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        locked = user.failed_login_attempts >= self.max_failed_attempts
        if locked:
            # The counter is kept, so one more failure after expiry locks again
            user.locked_until = now + timedelta(minutes=self.lockout_minutes)
        self.user_repo.save(user)
        self.audit.log("LOGIN", user_id=user.id, resource_type="user", resource_id=user.id,
                       ip_address=ip_address, user_agent=user_agent, request_id=request_id, status="failure",
                       error_message="account locked" if locked else "invalid password")
        if locked:
            logger.warning(f"Account {user.id} locked after repeated failed logins")
            raise APIException(
                403,
                f"Too many failed attempts. Account locked for {self.lockout_minutes} minutes",
                locked_until=user.locked_until.isoformat(),
            )
        raise APIException(401, "Invalid credentials")

    def refresh(self, refresh_token: str) -> AccessGrant:
        try:
            payload = jwt_tokens.verify_refresh_token(refresh_token)
        except jwt_tokens.TokenVerificationError as e:
            raise APIException(401, e.message)

        user_id = payload["sub"]
        record = self.token_repo.get_active(user_id, encryption.hash_value(refresh_token))
        if not record:
            raise APIException(401, "Invalid refresh token")
        if record.expires_at < datetime.utcnow():
            raise APIException(401, "Refresh token expired")

        user = self.user_repo.get_by_id(user_id)
        if not user or not user.is_active:
            raise APIException(401, "User not found or inactive")

        return AccessGrant(
            access_token=jwt_tokens.create_access_token(user.id, user.email, user.role),
            expires_in=self.access_ttl_seconds,
        )

    def logout(
        self,
        user_id: str,
        refresh_token: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        if refresh_token:
            self.token_repo.revoke(user_id, encryption.hash_value(refresh_token))
        self.audit.log("LOGOUT", user_id=user_id, resource_type="user", resource_id=user_id,
                       ip_address=ip_address, user_agent=user_agent, request_id=request_id)

    def _issue_tokens(self, user: User, ip_address: Optional[str], user_agent: Optional[str]) -> AuthResult:
        access_token = jwt_tokens.create_access_token(user.id, user.email, user.role)
        refresh_token = jwt_tokens.create_refresh_token(user.id)
        self.token_repo.create(
            user_id=user.id,
            token_hash=encryption.hash_value(refresh_token),
            expires_at=datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return AuthResult(
            user=user,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.access_ttl_seconds,
        )
