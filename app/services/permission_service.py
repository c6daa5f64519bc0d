# app/services/permission_service.py
"""
Permission resolver.

Builds the Principal for an authenticated user id from the current role
rows. Nothing here is cached: every request sees the assignments and role
definitions as they are in the database at that moment.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import AuthenticationRequired, UserNotFound
from app.core.permissions import ALL, Principal, RoleScope, flatten_permissions
from app.models.bin import Bin
from app.models.role import Role, UserRole
from app.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()


def visible_roles_filter(account_id):
    """
    Roles that count for a user of `account_id` under the configured role
    scope, or None when every role counts. `account_id` may be a value or
    a column expression.
    """
    if settings.role_scope == "account":
        return or_(Role.account_id.is_(None), Role.account_id == account_id)
    return None


def load_principal(db: Session, user_id: int) -> Principal:
    """
    Resolve the effective permission set for a user.

    Every assigned role contributes its full permission array, whether the
    assignment is bin-scoped or global; bin scope only matters to
    can_access_bin.

    Raises:
        UserNotFound: the session refers to a user row that does not exist.
        AuthenticationRequired: the user has been deactivated.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.info("Session refers to missing user %s", user_id)
        raise UserNotFound()
    if not user.is_active:
        raise AuthenticationRequired("User is inactive")

    query = (
        db.query(UserRole.role_id, UserRole.bin_id, Role.permissions)
        .join(Role, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id)
    )
    scope_filter = visible_roles_filter(user.account_id)
    if scope_filter is not None:
        query = query.filter(scope_filter)
    rows = query.all()

    return Principal(
        id=user.id,
        email=user.email,
        account_id=user.account_id,
        permissions=flatten_permissions(row.permissions for row in rows),
        role_assignments=tuple(RoleScope(role_id=row.role_id, bin_id=row.bin_id) for row in rows),
    )


def can_access_bin(db: Session, user_id: int, bin_id: int) -> bool:
    """
    Scoped-access predicate: may this user touch bin `bin_id`?

    True if the user holds a role assignment for this bin, a global
    assignment (bin NULL), or any assigned role carries "all".
    False for a user with no role assignments.
    """
    query = (
        db.query(UserRole.bin_id, Role.permissions)
        .join(Role, UserRole.role_id == Role.id)
        .join(User, UserRole.user_id == User.id)
        .filter(UserRole.user_id == user_id)
    )
    scope_filter = visible_roles_filter(User.account_id)
    if scope_filter is not None:
        query = query.filter(scope_filter)

    for row in query.all():
        if row.bin_id is None or row.bin_id == bin_id:
            return True
        if ALL in flatten_permissions([row.permissions]):
            return True
    return False


def get_user_roles_with_bins(db: Session, user_ids: list[int]) -> dict[int, list[dict]]:
    """
    Role assignments per user in the shape the user-management UI expects:
    {user_id: [{"roleId", "roleName", "roleDisplayName", "binId", "binName"}, ...]}
    """
    if not user_ids:
        return {}

    rows = (
        db.query(
            UserRole.user_id,
            UserRole.bin_id,
            Role.id.label("role_id"),
            Role.name.label("role_name"),
            Role.display_name.label("role_display_name"),
            Bin.name.label("bin_name"),
        )
        .join(Role, UserRole.role_id == Role.id)
        .outerjoin(Bin, UserRole.bin_id == Bin.id)
        .filter(UserRole.user_id.in_(user_ids))
        .order_by(UserRole.id)
        .all()
    )

    result: dict[int, list[dict]] = {uid: [] for uid in user_ids}
    for r in rows:
        result[r.user_id].append(
            {
                "roleId": r.role_id,
                "roleName": r.role_name,
                "roleDisplayName": r.role_display_name,
                "binId": r.bin_id,
                "binName": r.bin_name,
            }
        )
    return result
