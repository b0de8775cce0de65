from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List

from ...db.models.health import Device
from ...exceptions import APIException
from ...infrastructure.security import encryption
from ...utils import to_naive_utc
from ..ports.devices_repo import DevicesRepository

UPDATABLE_FIELDS = ("device_name", "is_active", "sync_frequency_minutes", "permissions_granted")


@dataclass
class DevicesService:
    repo: DevicesRepository

    def _get(self, user_id: str, device_id: str) -> Device:
        device = self.repo.get_for_user(device_id, user_id)
        if not device:
            raise APIException(404, "Device not found")
        return device

    def list_for_user(self, user_id: str) -> List[Device]:
        return self.repo.list_for_user(user_id)

    def connect(self, user_id: str, data: Dict[str, Any]) -> Device:
        device = Device(
            user_id=user_id,
            device_type=data["device_type"],
            device_name=data["device_name"],
            access_token_encrypted=encryption.encrypt(data.get("access_token")),
            refresh_token_encrypted=encryption.encrypt(data.get("refresh_token")),
            token_expires_at=to_naive_utc(data.get("token_expires_at")),
            sync_frequency_minutes=data.get("sync_frequency_minutes") or 60,
            permissions_granted=list(data.get("permissions_granted") or []),
            is_active=True,
        )
        return self.repo.add(device)

    def update(self, user_id: str, device_id: str, changes: Dict[str, Any]) -> Device:
        device = self._get(user_id, device_id)
        for name in UPDATABLE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(device, name, changes[name])
        return self.repo.save(device)

    def disconnect(self, user_id: str, device_id: str) -> None:
        self.repo.delete(self._get(user_id, device_id))

    def sync(self, user_id: str, device_id: str) -> Device:
        device = self._get(user_id, device_id)
        if not device.is_active:
            raise APIException(400, "Device is not active")
        device.last_sync_at = datetime.utcnow()
        return self.repo.save(device)
