from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..application.services.profile_service import ProfileService
from ..db.models.users import User
from ..dependencies import get_current_user, get_profile_service
from ..exceptions import create_success_response
from ..schemas.auth.auth import UserOut
from ..schemas.users.user import ProfileUpdate

router = APIRouter(prefix="/users", tags=["Users"])


def _me_payload(user: User, profile: Optional[dict]) -> dict:
    data = UserOut.model_validate(user).model_dump()
    data["profile"] = profile
    return data


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user), profile_service: ProfileService = Depends(get_profile_service)):
    user, profile = profile_service.get_me(current_user.id)
    return create_success_response(_me_payload(user, profile))


@router.patch("/me")
def update_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    user, profile = profile_service.update_me(current_user.id, payload.model_dump(exclude_unset=True))
    return create_success_response(_me_payload(user, profile))


@router.delete("/me")
def delete_me(current_user: User = Depends(get_current_user), profile_service: ProfileService = Depends(get_profile_service)):
    profile_service.delete_me(current_user.id)
    return create_success_response({"message": "Account deleted"})


@router.get("/providers")
def list_providers(
    specialty: Optional[str] = Query(None, max_length=255),
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    providers = profile_service.list_providers(specialty)
    return create_success_response(providers, count=len(providers))
