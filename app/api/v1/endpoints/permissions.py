from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.common import SuccessResponse
from app.schemas.permission import (
    MatrixResponse,
    MatrixUpdateRequest,
    PermissionDefinitionResponse,
)
from app.services import matrix_service

router = APIRouter()


@router.get(
    "/definitions",
    response_model=list[PermissionDefinitionResponse],
    tags=["permissions"],
)
def list_permission_definitions(
    principal: Principal = Depends(require_route("permissions.definitions")),
    db: Session = Depends(get_db),
) -> list[PermissionDefinitionResponse]:
    """
    Active permission definitions, in display order, for building the matrix UI.
    """
    return matrix_service.list_definitions(db)


@router.get("/matrix", response_model=MatrixResponse, tags=["permissions"])
def get_permissions_matrix(
    principal: Principal = Depends(require_route("permissions.matrix_get")),
    db: Session = Depends(get_db),
) -> MatrixResponse:
    return matrix_service.get_matrix(db, principal)


@router.post("/matrix", response_model=SuccessResponse, tags=["permissions"])
def update_permissions_matrix(
    payload: MatrixUpdateRequest,
    principal: Principal = Depends(require_route("permissions.matrix_update")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """
    Bulk update direct grants and bin/team assignments.

    Entries for users outside the caller's account are ignored.
    """
    return matrix_service.apply_matrix_updates(db, principal, payload)
