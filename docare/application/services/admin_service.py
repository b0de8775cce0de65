from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import logging
import platform
import sys

from ...core.config import settings
from ...db.models.audit import AuditLog
from ...db.models.health import Appointment
from ...db.models.users import User, UserProfile
from ...exceptions import APIException
from ...infrastructure.security import passwords
from ...utils import normalize_email, to_naive_utc, uptime_seconds
from ..ports.appointments_repo import AppointmentQuery, AppointmentsRepository
from ..ports.audit_logger import AuditLogger
from ..ports.audit_repo import AuditLogRepository, AuditQuery
from ..ports.billing_repo import BillingRepository
from ..ports.token_repo import RefreshTokenRepository
from ..ports.user_repo import UserQuery, UserRepository

logger = logging.getLogger(__name__)

ADMIN_UPDATABLE_FIELDS = ("name", "role", "status", "email_verified", "mfa_enabled")

# Changed in process memory only; a restart goes back to the environment
RUNTIME_SETTINGS = {
    "symptom_checker_emergency_threshold": "SYMPTOM_CHECKER_EMERGENCY_THRESHOLD",
    "default_appointment_duration_minutes": "DEFAULT_APPOINTMENT_DURATION_MINUTES",
    "max_appointments_per_day": "MAX_APPOINTMENTS_PER_DAY",
    "clinic_open_hour": "CLINIC_OPEN_HOUR",
    "clinic_close_hour": "CLINIC_CLOSE_HOUR",
    "require_mfa_for_providers": "REQUIRE_MFA_FOR_PROVIDERS",
    "session_timeout_minutes": "SESSION_TIMEOUT_MINUTES",
}


@dataclass
class AdminService:
    user_repo: UserRepository
    appointments_repo: AppointmentsRepository
    billing_repo: BillingRepository
    audit_repo: AuditLogRepository
    token_repo: RefreshTokenRepository
    audit: AuditLogger

    def dashboard(self) -> Dict[str, Any]:
        now = datetime.utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return {
            "metrics": {
                "total_users": self.user_repo.count(),
                "total_patients": self.user_repo.count(role="patient"),
                "total_providers": self.user_repo.count(role="provider"),
                "new_users_this_week": self.user_repo.count(created_after=now - timedelta(days=7)),
                "scheduled_appointments": self.appointments_repo.count(status="scheduled"),
                "upcoming_appointments": self.appointments_repo.count(status="scheduled", start_from=today),
                "total_revenue_cents": self.billing_repo.total_completed_cents(),
            },
            "recent_users": self.user_repo.recent(5),
            "recent_activity": self.audit_repo.recent(10),
        }

    def list_users(self, query: UserQuery) -> Tuple[List[User], int]:
        return self.user_repo.search(query)

    def _get_user(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise APIException(404, "User not found")
        return user

    def update_user(self, admin: User, user_id: str, changes: Dict[str, Any]) -> User:
        target = self._get_user(user_id)
        if target.role == "super_admin" and target.id != admin.id:
            raise APIException(403, "Cannot modify super admin accounts")
        applied = {}
        for name in ADMIN_UPDATABLE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(target, name, changes[name])
                applied[name] = changes[name]
        if changes.get("unlock"):
            target.locked_until = None
            target.failed_login_attempts = 0
            applied["unlock"] = True
        target = self.user_repo.save(target)
        self.audit.log("ADMIN_USER_UPDATE", user_id=admin.id, resource_type="user", resource_id=user_id, metadata=applied)
        return target

    def delete_user(self, admin: User, user_id: str) -> None:
        target = self._get_user(user_id)
        if target.role == "super_admin":
            raise APIException(403, "Cannot delete super admin accounts")
        target.status = "deleted"
        target.email = f"deleted_{int(datetime.utcnow().timestamp())}_{target.email}"
        self.user_repo.save(target)
        self.token_repo.revoke_all(user_id)
        self.audit.log("ADMIN_USER_DELETE", user_id=admin.id, resource_type="user", resource_id=user_id)

    def create_provider(self, admin: User, data: Dict[str, Any]) -> User:
        email = normalize_email(data["email"])
        if self.user_repo.get_by_email(email):
            raise APIException(409, "An account with this email already exists")
        now = datetime.utcnow()
        provider = User(
            email=email,
            password_hash=passwords.hash_password(data["password"]),
            name=data["name"].strip(),
            role="provider",
            status="active",
            email_verified=True,
            password_changed_at=now,
        )
        profile = UserProfile(
            user_id=provider.id,
            specialty=data.get("specialty"),
            license_number=data.get("license_number"),
            years_experience=data.get("years_experience"),
            bio=data.get("bio"),
        )
        provider = self.user_repo.add(provider, profile)
        self.audit.log("ADMIN_PROVIDER_CREATE", user_id=admin.id, resource_type="user", resource_id=provider.id)
        logger.info(f"Provider account {provider.id} created by {admin.id}")
        return provider

    def provider_schedule(self, provider_id: str, start_from: Optional[datetime] = None, start_to: Optional[datetime] = None) -> List[Appointment]:
        provider = self._get_user(provider_id)
        if provider.role != "provider":
            raise APIException(404, "Provider not found")
        return self.appointments_repo.find(AppointmentQuery(
            provider_id=provider_id,
            start_from=to_naive_utc(start_from),
            start_to=to_naive_utc(start_to),
        ))

    def audit_logs(self, query: AuditQuery) -> Tuple[List[AuditLog], int]:
        query.created_from = to_naive_utc(query.created_from)
        query.created_to = to_naive_utc(query.created_to)
        return self.audit_repo.search(query)

    def platform_settings(self) -> Dict[str, Any]:
        return {
            "symptom_checker_emergency_threshold": settings.SYMPTOM_CHECKER_EMERGENCY_THRESHOLD,
            "default_appointment_duration_minutes": settings.DEFAULT_APPOINTMENT_DURATION_MINUTES,
            "max_appointments_per_day": settings.MAX_APPOINTMENTS_PER_DAY,
            "clinic_hours": {"open": settings.CLINIC_OPEN_HOUR, "close": settings.CLINIC_CLOSE_HOUR},
            "require_mfa_for_providers": settings.REQUIRE_MFA_FOR_PROVIDERS,
            "session_timeout_minutes": settings.SESSION_TIMEOUT_MINUTES,
            "max_failed_login_attempts": settings.MAX_FAILED_LOGIN_ATTEMPTS,
            "account_lockout_minutes": settings.ACCOUNT_LOCKOUT_MINUTES,
        }

    def update_settings(
        self,
        admin: User,
        changes: Dict[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        applied = {k: v for k, v in changes.items() if k in RUNTIME_SETTINGS and v is not None}
        open_hour = applied.get("clinic_open_hour", settings.CLINIC_OPEN_HOUR)
        close_hour = applied.get("clinic_close_hour", settings.CLINIC_CLOSE_HOUR)
        if open_hour >= close_hour:
            raise APIException(400, "Clinic opening hour must be before closing hour")
        for key, value in applied.items():
            setattr(settings, RUNTIME_SETTINGS[key], value)
        self.audit.log(
            "ADMIN_UPDATE_SETTINGS",
            user_id=admin.id,
            resource_type="SystemSettings",
            resource_id="global",
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            metadata={"settings": applied},
        )
        logger.info(f"Platform settings {sorted(applied)} changed by {admin.id}")
        return self.platform_settings()

    def system_health(self, database_ok: bool) -> Dict[str, Any]:
        return {
            "status": "healthy" if database_ok else "degraded",
            "uptime_seconds": uptime_seconds(),
            "database": "connected" if database_ok else "disconnected",
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
            "python_version": platform.python_version(),
            "platform": sys.platform,
        }
