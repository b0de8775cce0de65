from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from .....db.models.health import Device
from .....application.ports.devices_repo import DevicesRepository


class SqlDevicesRepository(DevicesRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_for_user(self, device_id: str, user_id: str) -> Optional[Device]:
        return self.session.exec(
            select(Device).where(Device.id == device_id).where(Device.user_id == user_id)
        ).first()

    def list_for_user(self, user_id: str) -> List[Device]:
        return list(self.session.exec(
            select(Device).where(Device.user_id == user_id).order_by(Device.created_at.desc())
        ).all())

    def add(self, device: Device) -> Device:
        self.session.add(device)
        self.session.commit()
        self.session.refresh(device)
        return device

    def save(self, device: Device) -> Device:
        device.updated_at = datetime.utcnow()
        return self.add(device)

    def delete(self, device: Device) -> None:
        self.session.delete(device)
        self.session.commit()
