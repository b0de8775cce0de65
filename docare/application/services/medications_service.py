from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...db.models.health import Medication
from ...db.models.users import User
from ...exceptions import APIException
from ...utils import to_naive_utc
from ..ports.medications_repo import MedicationsRepository

ADMIN_ROLES = ("admin", "super_admin")

# Fields a patient or provider may change after creation
UPDATABLE_FIELDS = (
    "dosage",
    "frequency",
    "route",
    "end_date",
    "pharmacy",
    "refills_remaining",
    "instructions",
    "side_effects",
    "reminder_enabled",
    "reminder_times",
    "status",
    "notes",
)
# NOT NULL columns; an explicit null leaves the stored value alone
REQUIRED_FIELDS = ("dosage", "frequency", "route", "refills_remaining", "reminder_enabled", "reminder_times", "status")


@dataclass
class MedicationsService:
    repo: MedicationsRepository

    def _get(self, medication_id: str) -> Medication:
        med = self.repo.get_by_id(medication_id)
        if not med:
            raise APIException(404, "Medication not found")
        return med

    def list_for_user(self, user: User, status: Optional[str] = None) -> List[Medication]:
        return self.repo.list_for_user(user.id, status)

    def get(self, user: User, medication_id: str) -> Medication:
        med = self._get(medication_id)
        if med.user_id != user.id and user.role not in ADMIN_ROLES:
            raise APIException(403, "Access denied")
        return med

    def create(self, user: User, data: Dict[str, Any]) -> Medication:
        med = Medication(
            user_id=user.id,
            prescribed_by=data.get("prescribed_by"),
            name=data["name"],
            generic_name=data.get("generic_name"),
            dosage=data["dosage"],
            frequency=data["frequency"],
            route=data.get("route") or "oral",
            start_date=to_naive_utc(data["start_date"]),
            end_date=to_naive_utc(data.get("end_date")),
            pharmacy=data.get("pharmacy"),
            refills_remaining=data.get("refills_remaining") or 0,
            instructions=data.get("instructions"),
            side_effects=data.get("side_effects"),
            reminder_enabled=bool(data.get("reminder_enabled")),
            reminder_times=list(data.get("reminder_times") or []),
            notes=data.get("notes"),
            status="active",
        )
        return self.repo.add(med)

    def update(self, user: User, medication_id: str, changes: Dict[str, Any]) -> Medication:
        med = self._get(medication_id)
        if med.user_id != user.id and user.role != "provider":
            raise APIException(403, "Access denied")
        for name in UPDATABLE_FIELDS:
            if name in changes:
                value = changes[name]
                if value is None and name in REQUIRED_FIELDS:
                    continue
                if name == "end_date":
                    value = to_naive_utc(value)
                if name == "refills_remaining" and value is not None and value < 0:
                    raise APIException(400, "Refills remaining cannot be negative")
                setattr(med, name, value)
        return self.repo.save(med)

    def discontinue(self, user: User, medication_id: str) -> Medication:
        med = self.get(user, medication_id)
        med.status = "discontinued"
        med.end_date = datetime.utcnow()
        return self.repo.save(med)

    def refill(self, user: User, medication_id: str) -> Medication:
        med = self._get(medication_id)
        if med.user_id != user.id:
            raise APIException(403, "Access denied")
        if med.refills_remaining <= 0:
            raise APIException(400, "No refills remaining. Please contact your provider.")
        med.refills_remaining -= 1
        return self.repo.save(med)
