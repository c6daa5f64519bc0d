# app/api/v1/endpoints/user_management.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.common import SuccessResponse
from app.schemas.role import AssignRolesRequest, RoleResponse
from app.schemas.user import (
    ManagedUserResponse,
    ResetPasswordRequest,
    UserCreate,
    UserSummary,
    UserUpdate,
)
from app.services import user_service

router = APIRouter()


def _summary(user) -> UserSummary:
    return UserSummary(
        id=user.id,
        email=user.email,
        firstname=user.first_name,
        lastname=user.last_name,
    )


@router.get("/users", response_model=list[ManagedUserResponse], tags=["user-management"])
def list_users(
    principal: Principal = Depends(require_route("users.list")),
    db: Session = Depends(get_db),
) -> list[ManagedUserResponse]:
    """
    Users of the caller's account with their role assignments, newest first.
    """
    return user_service.list_users(db, principal.account_id)


@router.get("/users/{user_id}", response_model=ManagedUserResponse, tags=["user-management"])
def get_user(
    user_id: int,
    principal: Principal = Depends(require_route("users.get")),
    db: Session = Depends(get_db),
) -> ManagedUserResponse:
    return user_service.get_user(db, principal.account_id, user_id)


@router.post(
    "/users",
    response_model=UserSummary,
    status_code=status.HTTP_201_CREATED,
    tags=["user-management"],
)
def create_user(
    payload: UserCreate,
    principal: Principal = Depends(require_route("users.create")),
    db: Session = Depends(get_db),
) -> UserSummary:
    """
    Create a user in the caller's account.

    - **roleIds** / **binIds**: parallel lists, binIds[i] scopes roleIds[i]
    - **teamIds**: teams to join
    - password must pass the complexity rules
    """
    return _summary(user_service.create_user(db, principal, payload))


@router.put("/users/{user_id}", response_model=UserSummary, tags=["user-management"])
def update_user(
    user_id: int,
    payload: UserUpdate,
    principal: Principal = Depends(require_route("users.update")),
    db: Session = Depends(get_db),
) -> UserSummary:
    return _summary(user_service.update_user(db, principal, user_id, payload))


@router.delete("/users/{user_id}", response_model=SuccessResponse, tags=["user-management"])
def delete_user(
    user_id: int,
    principal: Principal = Depends(require_route("users.delete")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    user_service.delete_user(db, principal, user_id)
    return SuccessResponse(success=True, message="User deleted")


@router.post(
    "/users/{user_id}/reset-password",
    response_model=SuccessResponse,
    tags=["user-management"],
)
def reset_password(
    user_id: int,
    payload: ResetPasswordRequest,
    principal: Principal = Depends(require_route("users.reset_password")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    user_service.reset_password(db, principal, user_id, payload.new_password)
    return SuccessResponse(success=True, message="Password reset successfully")


@router.get("/roles", response_model=list[RoleResponse], tags=["user-management"])
def list_roles(
    principal: Principal = Depends(require_route("users.roles")),
    db: Session = Depends(get_db),
) -> list[RoleResponse]:
    return user_service.list_roles(db, principal.account_id)


@router.post("/users/{user_id}/roles", response_model=SuccessResponse, tags=["user-management"])
def assign_roles(
    user_id: int,
    payload: AssignRolesRequest,
    principal: Principal = Depends(require_route("users.assign_roles")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """
    Replace the user's role assignments with `roleIds: [{roleId, binId?}]`.
    A missing or null binId grants the role for every bin.
    """
    user_service.assign_roles(db, principal, user_id, payload.role_ids)
    return SuccessResponse(success=True, message="Roles assigned successfully")
