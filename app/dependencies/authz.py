# app/dependencies/authz.py
from typing import Iterable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationRequired
from app.core.permissions import (
    ROUTE_PERMISSIONS,
    PermissionRequirement,
    Principal,
    check_requirement,
)
from app.core.security import decode_session_token
from app.services.permission_service import load_principal

settings = get_settings()


def get_session_user_id(request: Request) -> int:
    """
    Read the user id from the session cookie.
    No cookie, or a cookie that fails verification, is an authentication failure.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise AuthenticationRequired()
    try:
        return decode_session_token(token)
    except ValueError as exc:
        raise AuthenticationRequired(str(exc)) from exc


def get_current_principal(
    user_id: int = Depends(get_session_user_id),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Resolve the caller's permissions from the database for this request.
    """
    return load_principal(db, user_id)


def _gate(requirement: PermissionRequirement):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        return check_requirement(principal, requirement)

    return dependency


def require_route(route_id: str):
    """
    Dependency factory driven by the declarative ROUTE_PERMISSIONS table.

    Usage:

    @router.get("")
    def list_bins(principal: Principal = Depends(require_route("bins.list")), ...):
        ...

    An unknown route id fails at import time, not at request time.
    """
    if route_id not in ROUTE_PERMISSIONS:
        raise KeyError(f"No permission requirement declared for route '{route_id}'")
    return _gate(ROUTE_PERMISSIONS[route_id])


def require_permission(permission_key: str):
    """
    Passes if the caller holds `permission_key` or "all".
    """
    return _gate(PermissionRequirement.single(permission_key))


def require_any_permission(permission_keys: Iterable[str]):
    """
    Passes if the caller holds at least one of `permission_keys`, or "all".
    """
    return _gate(PermissionRequirement.any_of(permission_keys))
