from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ..application.ports.audit_repo import AuditQuery
from ..application.ports.user_repo import UserQuery
from ..application.services.admin_service import AdminService
from ..db.models.users import User
from ..db.session import check_database_connection
from ..dependencies import get_admin_service, require_mfa, require_roles
from ..exceptions import create_success_response
from ..schemas.admin.admin import AdminUserUpdate, AuditLogResponse, ProviderCreate, SettingsUpdate, UserRole, UserStatus
from ..schemas.appointments.appointment import AppointmentResponse
from ..schemas.auth.auth import UserOut
from ..schemas.common.common import paginate
from ..utils import get_client_info

router = APIRouter(
    prefix="/admin",
    tags=["Administration"],
    dependencies=[Depends(require_mfa)],
)

require_super_admin = require_roles("super_admin")


@router.get("/dashboard")
def dashboard(admin: User = Depends(require_super_admin), admin_service: AdminService = Depends(get_admin_service)):
    data = admin_service.dashboard()
    return create_success_response({
        "metrics": data["metrics"],
        "recent_users": [UserOut.model_validate(u).model_dump() for u in data["recent_users"]],
        "recent_activity": [AuditLogResponse.model_validate(a).model_dump() for a in data["recent_activity"]],
    })


@router.get("/users")
def list_users(
    search: Optional[str] = Query(None, max_length=255),
    role: Optional[UserRole] = None,
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    users, total = admin_service.list_users(UserQuery(
        search=search, role=role, status=status_filter, offset=(page - 1) * limit, limit=limit,
    ))
    return create_success_response({
        "users": [UserOut.model_validate(u).model_dump() for u in users],
        "pagination": paginate(page, limit, total),
    })


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    user = admin_service.update_user(admin, user_id, payload.model_dump(exclude_unset=True))
    return create_success_response(UserOut.model_validate(user).model_dump())


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    admin_service.delete_user(admin, user_id)
    return create_success_response({"message": "User deleted"})


@router.post("/providers", status_code=status.HTTP_201_CREATED)
def create_provider(
    payload: ProviderCreate,
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    provider = admin_service.create_provider(admin, payload.model_dump())
    return create_success_response(UserOut.model_validate(provider).model_dump())


@router.get("/providers/{provider_id}/schedule")
def provider_schedule(
    provider_id: str,
    start_from: Optional[datetime] = Query(None, alias="from"),
    start_to: Optional[datetime] = Query(None, alias="to"),
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    appts = admin_service.provider_schedule(provider_id, start_from, start_to)
    return create_success_response(
        [AppointmentResponse.model_validate(a).model_dump() for a in appts],
        count=len(appts),
    )


@router.get("/audit-logs")
def audit_logs(
    user_id: Optional[str] = None,
    action: Optional[str] = Query(None, max_length=100),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    logs, total = admin_service.audit_logs(AuditQuery(
        user_id=user_id,
        action=action,
        created_from=created_from,
        created_to=created_to,
        offset=(page - 1) * limit,
        limit=limit,
    ))
    return create_success_response({
        "logs": [AuditLogResponse.model_validate(entry).model_dump() for entry in logs],
        "pagination": paginate(page, limit, total),
    })


@router.get("/settings")
def platform_settings(admin: User = Depends(require_super_admin), admin_service: AdminService = Depends(get_admin_service)):
    return create_success_response(admin_service.platform_settings())


@router.patch("/settings")
def update_platform_settings(
    payload: SettingsUpdate,
    request: Request,
    admin: User = Depends(require_super_admin),
    admin_service: AdminService = Depends(get_admin_service),
):
    client = get_client_info(request)
    updated = admin_service.update_settings(admin, payload.model_dump(exclude_unset=True), **client)
    return create_success_response(updated, message="Settings updated successfully")


@router.get("/system/health")
def system_health(admin: User = Depends(require_super_admin), admin_service: AdminService = Depends(get_admin_service)):
    return create_success_response(admin_service.system_health(check_database_connection()))
