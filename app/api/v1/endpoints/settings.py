from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.auth import ChangePasswordRequest
from app.schemas.common import SuccessResponse
from app.services.auth_service import change_own_password

router = APIRouter()


@router.post("/change-password", response_model=SuccessResponse, tags=["settings"])
def change_password(
    payload: ChangePasswordRequest,
    principal: Principal = Depends(require_route("settings.change_password")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    change_own_password(
        db,
        user_id=principal.id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return SuccessResponse(success=True, message="Password changed successfully")
