from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
import json
import logging

from ...db.models.users import User, UserProfile
from ...exceptions import APIException
from ...infrastructure.security import encryption
from ...utils import normalize_email
from ..ports.audit_logger import AuditLogger
from ..ports.token_repo import RefreshTokenRepository
from ..ports.user_repo import UserRepository

logger = logging.getLogger(__name__)

PLAIN_PROFILE_FIELDS = (
    "gender",
    "preferred_language",
    "timezone",
    "avatar_url",
    "bio",
    "insurance_provider",
    "primary_physician",
    "allergies",
    "medical_conditions",
    "blood_type",
    "height_cm",
    "weight_kg",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relationship",
    "data_sharing_consent",
    "marketing_consent",
    "telemetry_consent",
)
ENCRYPTED_PROFILE_FIELDS = ("date_of_birth", "phone", "address", "insurance_policy_number")


def safe_decrypt(value: Optional[str]) -> Optional[str]:
    try:
        return encryption.decrypt(value)
    except encryption.EncryptionError as e:
        logger.error(f"Could not decrypt profile field: {e}")
        return None


def profile_view(profile: Optional[UserProfile]) -> Optional[Dict[str, Any]]:
    """Profile as returned to its owner, with PHI decrypted."""
    if profile is None:
        return None
    data = {name: getattr(profile, name) for name in PLAIN_PROFILE_FIELDS}
    data["specialty"] = profile.specialty
    data["license_number"] = profile.license_number
    data["years_experience"] = profile.years_experience
    data["date_of_birth"] = safe_decrypt(profile.date_of_birth_encrypted)
    data["phone"] = safe_decrypt(profile.phone_encrypted)
    data["insurance_policy_number"] = safe_decrypt(profile.insurance_policy_number_encrypted)
    address = safe_decrypt(profile.address_encrypted)
    if address:
        try:
            address = json.loads(address)
        except ValueError:
            pass
    data["address"] = address
    return data


@dataclass
class ProfileService:
    user_repo: UserRepository
    token_repo: Optional[RefreshTokenRepository] = None
    audit: Optional[AuditLogger] = None

    def _get_user(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise APIException(404, "User not found")
        return user

    def get_me(self, user_id: str) -> Tuple[User, Optional[Dict[str, Any]]]:
        user = self._get_user(user_id)
        return user, profile_view(self.user_repo.get_profile(user_id))

    def update_me(self, user_id: str, changes: Dict[str, Any]) -> Tuple[User, Optional[Dict[str, Any]]]:
        user = self._get_user(user_id)

        user_changed = False
        if changes.get("name") is not None:
            user.name = changes["name"].strip()
            user_changed = True
        if changes.get("email") is not None:
            email = normalize_email(changes["email"])
            if email != user.email:
                existing = self.user_repo.get_by_email(email)
                if existing and existing.id != user.id:
                    raise APIException(409, "Email is already in use")
                user.email = email
                user.email_verified = False
                user_changed = True
        if user_changed:
            user = self.user_repo.save(user)

        profile_changes = {k: v for k, v in changes.items() if k in PLAIN_PROFILE_FIELDS or k in ENCRYPTED_PROFILE_FIELDS}
        if profile_changes:
            profile = self.user_repo.get_profile(user_id) or UserProfile(user_id=user_id)
            for name in PLAIN_PROFILE_FIELDS:
                if name in profile_changes:
                    setattr(profile, name, profile_changes[name])
            for name in ENCRYPTED_PROFILE_FIELDS:
                if name in profile_changes:
                    setattr(profile, f"{name}_encrypted", encryption.encrypt(self._serialize(profile_changes[name])))
            self.user_repo.save_profile(profile)

        return user, profile_view(self.user_repo.get_profile(user_id))

    @staticmethod
    def _serialize(value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        if isinstance(value, dict):
            return json.dumps(value)
        return str(value)

    def delete_me(self, user_id: str) -> None:
        user = self._get_user(user_id)
        stamp = int(datetime.utcnow().timestamp())
        user.status = "deleted"
        user.email = f"deleted_{stamp}_{user.email}"
        self.user_repo.save(user)
        if self.token_repo:
            self.token_repo.revoke_all(user_id)
        if self.audit:
            self.audit.log("ACCOUNT_DELETE", user_id=user_id, resource_type="user", resource_id=user_id)

    def list_providers(self, specialty: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "specialty": profile.specialty if profile else None,
                "bio": profile.bio if profile else None,
                "avatar_url": profile.avatar_url if profile else None,
                "years_experience": profile.years_experience if profile else None,
            }
            for user, profile in self.user_repo.list_providers(specialty)
        ]
