from typing import List, Optional

from ...db.models.health import Medication


class MedicationsRepository:
    def get_by_id(self, medication_id: str) -> Optional[Medication]:
        ...

    def list_for_user(self, user_id: str, status: Optional[str] = None) -> List[Medication]:
        ...

    def add(self, medication: Medication) -> Medication:
        ...

    def save(self, medication: Medication) -> Medication:
        ...
