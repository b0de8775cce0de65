from typing import List, Optional

from ...db.models.health import Device


class DevicesRepository:
    def get_for_user(self, device_id: str, user_id: str) -> Optional[Device]:
        ...

    def list_for_user(self, user_id: str) -> List[Device]:
        ...

    def add(self, device: Device) -> Device:
        ...

    def save(self, device: Device) -> Device:
        ...

    def delete(self, device: Device) -> None:
        ...
