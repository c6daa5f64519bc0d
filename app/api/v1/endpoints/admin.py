# app/api/v1/endpoints/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.admin import (
    ActivityLogResponse,
    AdminUserResponse,
    UpdateUserRoleRequest,
    UserStatsResponse,
)
from app.services import activity_service, admin_service

router = APIRouter()

settings = get_settings()


@router.get("/users", response_model=list[AdminUserResponse], tags=["admin"])
def list_users(
    principal: Principal = Depends(require_route("admin.users")),
    db: Session = Depends(get_db),
) -> list[AdminUserResponse]:
    return admin_service.list_users(db, principal.account_id)


@router.put("/users/{user_id}/role", response_model=AdminUserResponse, tags=["admin"])
def update_user_role(
    user_id: int,
    payload: UpdateUserRoleRequest,
    principal: Principal = Depends(require_route("admin.update_role")),
    db: Session = Depends(get_db),
) -> AdminUserResponse:
    """
    Set the user's display role label. Does not change what the user may do.
    """
    return admin_service.update_role_label(db, principal, user_id, payload.role)


@router.get("/activity-logs", response_model=list[ActivityLogResponse], tags=["admin"])
def list_activity_logs(
    principal: Principal = Depends(require_route("admin.activity_logs")),
    db: Session = Depends(get_db),
) -> list[ActivityLogResponse]:
    return activity_service.list_recent_activity(
        db,
        account_id=principal.account_id,
        window_days=settings.activity_log_window_days,
        limit=settings.activity_log_limit,
    )


@router.get("/user-stats", response_model=UserStatsResponse, tags=["admin"])
def get_user_stats(
    principal: Principal = Depends(require_route("admin.user_stats")),
    db: Session = Depends(get_db),
) -> UserStatsResponse:
    return admin_service.user_stats(db, principal.account_id)
