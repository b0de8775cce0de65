import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..application.services.devices_service import DevicesService
from ..db.models.users import User
from ..dependencies import get_current_user, get_devices_service
from ..exceptions import APIException, create_success_response
from ..schemas.devices.device import DeviceCreate, DeviceResponse, DeviceUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices", tags=["Device Management"])


def _out(device) -> dict:
    return DeviceResponse.model_validate(device).model_dump()


@router.get("/")
def list_devices(
    current_user: User = Depends(get_current_user),
    devices_service: DevicesService = Depends(get_devices_service),
):
    devices = devices_service.list_for_user(current_user.id)
    return create_success_response([_out(d) for d in devices], count=len(devices))


@router.post("/", status_code=status.HTTP_201_CREATED)
def connect_device(
    payload: DeviceCreate,
    current_user: User = Depends(get_current_user),
    devices_service: DevicesService = Depends(get_devices_service),
):
    try:
        device = devices_service.connect(current_user.id, payload.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error connecting device for user {current_user.id}: {e}")
        raise APIException(500, "Failed to connect device")
    logger.info(f"Device {device.id} ({device.device_type}) connected for user {current_user.id}")
    return create_success_response(_out(device))


@router.patch("/{device_id}")
def update_device(
    device_id: str,
    payload: DeviceUpdate,
    current_user: User = Depends(get_current_user),
    devices_service: DevicesService = Depends(get_devices_service),
):
    device = devices_service.update(current_user.id, device_id, payload.model_dump(exclude_unset=True))
    return create_success_response(_out(device))


@router.delete("/{device_id}")
def disconnect_device(
    device_id: str,
    current_user: User = Depends(get_current_user),
    devices_service: DevicesService = Depends(get_devices_service),
):
    devices_service.disconnect(current_user.id, device_id)
    return create_success_response({"message": "Device disconnected"})


@router.post("/{device_id}/sync")
def sync_device(
    device_id: str,
    current_user: User = Depends(get_current_user),
    devices_service: DevicesService = Depends(get_devices_service),
):
    device = devices_service.sync(current_user.id, device_id)
    return create_success_response({
        "message": "Sync started",
        "device": _out(device),
    })
