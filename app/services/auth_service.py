import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationRequired, NotFoundError, ValidationFailed
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.services import activity_service
from app.services.password_service import validate_password_complexity

logger = logging.getLogger(__name__)


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Authenticate by email and password.

    Email is unique per account, not globally, so every user with this
    email is a candidate; the first whose password verifies wins.
    Email comparison is case-insensitive.
    """
    candidates = (
        db.query(User)
        .filter(func.lower(User.email) == email.lower())
        .order_by(User.id)
        .all()
    )
    if not candidates:
        logger.info("Login failed, unknown email: %s", email)
        raise AuthenticationRequired("Invalid credentials")

    for user in candidates:
        if verify_password(password, user.hashed_password):
            if not user.is_active:
                logger.info("Login refused for inactive user %s", user.id)
                raise AuthenticationRequired("Invalid credentials")
            return user

    logger.info("Login failed, invalid password for: %s", email)
    raise AuthenticationRequired("Invalid credentials")


def change_own_password(
    db: Session,
    *,
    user_id: int,
    current_password: str,
    new_password: str,
) -> None:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")

    if not verify_password(current_password, user.hashed_password):
        raise AuthenticationRequired("Current password is incorrect")

    try:
        validate_password_complexity(new_password, user.email)
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc

    user.hashed_password = get_password_hash(new_password)
    activity_service.record_activity(
        db,
        account_id=user.account_id,
        user_id=user.id,
        action=activity_service.CHANGE_PASSWORD,
        details="User changed their password",
    )
    db.commit()
    logger.info("User %s changed their password", user.id)
