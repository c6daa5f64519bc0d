from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_session_token(
    user_id: int,
    expires_delta_minutes: int | None = None,
) -> str:
    """
    Create the signed session value stored in the session cookie.

    Only the user id travels in the cookie; permissions are resolved
    from the database on every request.
    """
    if expires_delta_minutes is None:
        expires_delta_minutes = settings.session_timeout_minutes

    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_delta_minutes)
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str) -> int:
    """
    Decode a session cookie value and return the user id it carries.
    Raises ValueError if the value is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        error_str = str(exc).lower()
        if "expired" in error_str:
            raise ValueError("Session has expired. Please log in again.") from None
        raise ValueError("Invalid session") from exc

    subject = payload.get("sub")
    if not subject:
        raise ValueError("Invalid session payload")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise ValueError("Invalid session payload") from None
