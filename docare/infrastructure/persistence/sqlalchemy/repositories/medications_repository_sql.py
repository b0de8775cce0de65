from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from .....db.models.health import Medication
from .....application.ports.medications_repo import MedicationsRepository


class SqlMedicationsRepository(MedicationsRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, medication_id: str) -> Optional[Medication]:
        return self.session.get(Medication, medication_id)

    def list_for_user(self, user_id: str, status: Optional[str] = None) -> List[Medication]:
        stmt = select(Medication).where(Medication.user_id == user_id)
        if status:
            stmt = stmt.where(Medication.status == status)
        return list(self.session.exec(stmt.order_by(Medication.created_at.desc())).all())

    def add(self, medication: Medication) -> Medication:
        self.session.add(medication)
        self.session.commit()
        self.session.refresh(medication)
        return medication

    def save(self, medication: Medication) -> Medication:
        medication.updated_at = datetime.utcnow()
        return self.add(medication)
