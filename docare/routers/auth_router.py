import logging

from fastapi import APIRouter, Depends, Request, status

from ..application.services.auth_service import AuthResult, AuthService, MfaChallenge
from ..db.models.users import User
from ..dependencies import auth_rate_limit, get_auth_service, get_current_user
from ..exceptions import create_success_response
from ..schemas.auth.auth import LoginRequest, LogoutRequest, RefreshRequest, SignupRequest, UserOut
from ..utils import get_client_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_payload(result: AuthResult) -> dict:
    return {
        "user": UserOut.model_validate(result.user).model_dump(),
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
        "token_type": "bearer",
        "expires_in": result.expires_in,
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_rate_limit)])
def signup(payload: SignupRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    client = get_client_info(request)
    result = auth_service.signup(
        email=payload.email,
        password=payload.password,
        name=payload.name,
        date_of_birth=payload.date_of_birth,
        phone=payload.phone,
        gender=payload.gender,
        ip_address=client["ip_address"],
        user_agent=client["user_agent"],
        request_id=client["request_id"],
    )
    request.state.user_id = result.user.id
    return create_success_response(_token_payload(result))


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
def login(payload: LoginRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    client = get_client_info(request)
    result = auth_service.login(
        email=payload.email,
        password=payload.password,
        ip_address=client["ip_address"],
        user_agent=client["user_agent"],
        request_id=client["request_id"],
    )
    if isinstance(result, MfaChallenge):
        return create_success_response({"mfa_required": True, "user_id": result.user_id})
    request.state.user_id = result.user.id
    return create_success_response(_token_payload(result))


@router.post("/refresh")
def refresh(payload: RefreshRequest, auth_service: AuthService = Depends(get_auth_service)):
    grant = auth_service.refresh(payload.refresh_token)
    return create_success_response({
        "access_token": grant.access_token,
        "token_type": "bearer",
        "expires_in": grant.expires_in,
    })


@router.post("/logout")
def logout(
    payload: LogoutRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    client = get_client_info(request)
    auth_service.logout(
        current_user.id,
        refresh_token=payload.refresh_token,
        ip_address=client["ip_address"],
        user_agent=client["user_agent"],
        request_id=client["request_id"],
    )
    return create_success_response({"message": "Logged out successfully"})
