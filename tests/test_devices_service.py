import pytest

from docare.application.services.devices_service import DevicesService
from docare.exceptions import APIException
from docare.infrastructure.security import encryption

from conftest import FakeDevicesRepo


@pytest.fixture
def svc():
    return DevicesService(repo=FakeDevicesRepo())


def _connect(svc, user_id, **overrides):
    data = {"device_type": "fitbit", "device_name": "Charge 6", "access_token": "oauth-access"}
    data.update(overrides)
    return svc.connect(user_id, data)


def test_connect_encrypts_tokens(svc, patient):
    device = _connect(svc, patient.id)
    assert device.is_active
    assert device.access_token_encrypted != "oauth-access"
    assert encryption.decrypt(device.access_token_encrypted) == "oauth-access"
    assert device.refresh_token_encrypted is None
    assert device.sync_frequency_minutes == 60


def test_sync_updates_timestamp(svc, patient):
    device = _connect(svc, patient.id)
    assert svc.sync(patient.id, device.id).last_sync_at is not None


def test_sync_inactive_device_rejected(svc, patient):
    device = _connect(svc, patient.id)
    svc.update(patient.id, device.id, {"is_active": False})
    with pytest.raises(APIException) as exc:
        svc.sync(patient.id, device.id)
    assert exc.value.status_code == 400
    assert exc.value.detail == "Device is not active"


def test_devices_are_private(svc, patient, provider):
    device = _connect(svc, patient.id)
    with pytest.raises(APIException) as exc:
        svc.sync(provider.id, device.id)
    assert exc.value.status_code == 404
    assert svc.list_for_user(provider.id) == []


def test_disconnect_removes_device(svc, patient):
    device = _connect(svc, patient.id)
    svc.disconnect(patient.id, device.id)
    assert svc.list_for_user(patient.id) == []
    with pytest.raises(APIException):
        svc.disconnect(patient.id, device.id)
