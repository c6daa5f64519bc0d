import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import create_session_token
from app.dependencies.authz import get_session_user_id
from app.models.user import User
from app.schemas.auth import LoginRequest, MeResponse, UserProfile
from app.schemas.common import SuccessResponse
from app.services.auth_service import authenticate_user
from app.services.permission_service import load_principal

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        firstname=user.first_name,
        lastname=user.last_name,
        email=user.email,
        role=user.role,
    )


@router.post("/login", response_model=UserProfile, tags=["auth"])
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> UserProfile:
    """
    Verify email and password and start a cookie session.

    Only the user id is stored in the (signed, HTTP-only) cookie.
    """
    user = authenticate_user(db, str(payload.email), payload.password)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user.id),
        max_age=settings.session_timeout_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    logger.info("Session created for user %s", user.id)
    return _profile(user)


@router.post("/logout", response_model=SuccessResponse, tags=["auth"])
def logout(response: Response) -> SuccessResponse:
    response.delete_cookie(key=settings.session_cookie_name)
    return SuccessResponse(success=True)


@router.get("/me", response_model=MeResponse, tags=["auth"])
def read_current_user(
    user_id: int = Depends(get_session_user_id),
    db: Session = Depends(get_db),
) -> MeResponse:
    """
    Return the current authenticated user with the resolved permission keys.
    """
    principal = load_principal(db, user_id)
    user = db.get(User, principal.id)
    return MeResponse(
        **_profile(user).model_dump(),
        account_id=principal.account_id,
        permissions=sorted(principal.permissions),
    )
