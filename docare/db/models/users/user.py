# docare/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

USER_ROLES = ("patient", "provider", "admin", "super_admin")
USER_STATUSES = ("active", "suspended", "deactivated", "deleted")


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    name: str = Field(max_length=255)
    role: str = Field(default="patient", max_length=20, index=True)
    status: str = Field(default="active", max_length=20, index=True)
    email_verified: bool = Field(default=False)
    mfa_enabled: bool = Field(default=False)
    mfa_secret: Optional[str] = Field(default=None, max_length=255)
    last_login_at: Optional[datetime] = Field(default=None)
    last_login_ip: Optional[str] = Field(default=None, max_length=45)
    failed_login_attempts: int = Field(default=0)
    locked_until: Optional[datetime] = Field(default=None)
    password_changed_at: Optional[datetime] = Field(default=None)
    terms_accepted_at: Optional[datetime] = Field(default=None)
    privacy_accepted_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        return self.locked_until is not None and self.locked_until > (now or datetime.utcnow())
