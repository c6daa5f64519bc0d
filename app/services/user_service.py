# app/services/user_service.py
"""
User management within one account: CRUD, admin password resets and
role assignment.
"""

import logging
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import commit_or_conflict
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.permissions import ALL, PermissionRequirement, Principal, check_requirement, flatten_permissions
from app.core.security import get_password_hash
from app.models.bin import Bin, UserBin
from app.models.role import Role, UserRole
from app.models.team import Team, UserTeam
from app.models.user import User, UserRoleLabel
from app.schemas.role import RoleAssignmentIn
from app.schemas.user import ManagedUserResponse, UserCreate, UserUpdate
from app.services import activity_service
from app.services.password_service import validate_password_complexity
from app.services.permission_service import get_user_roles_with_bins, visible_roles_filter

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Email already exists"


def _to_response(user: User, roles: list[dict]) -> ManagedUserResponse:
    return ManagedUserResponse(
        id=user.id,
        email=user.email,
        firstname=user.first_name,
        lastname=user.last_name,
        roles=roles,
    )


def get_account_user(db: Session, account_id: int, user_id: int) -> User:
    user = (
        db.query(User)
        .filter(User.id == user_id, User.account_id == account_id)
        .first()
    )
    if not user:
        raise NotFoundError("User not found")
    return user


def _email_taken(db: Session, account_id: int, email: str, exclude_user_id: int | None = None) -> bool:
    query = db.query(User.id).filter(
        User.account_id == account_id,
        func.lower(User.email) == email.lower(),
    )
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def _check_password(password: str, email: str) -> None:
    try:
        validate_password_complexity(password, email)
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc


def _ids_in_account(db: Session, model, ids: Iterable[int], account_id: int) -> set[int]:
    ids = set(ids)
    if not ids:
        return set()
    rows = (
        db.query(model.id)
        .filter(model.id.in_(ids), model.account_id == account_id)
        .all()
    )
    return {row.id for row in rows}


def _assignable_roles(db: Session, account_id: int, role_ids: Iterable[int]) -> list[Role]:
    role_ids = set(role_ids)
    if not role_ids:
        return []
    query = db.query(Role).filter(Role.id.in_(role_ids))
    scope_filter = visible_roles_filter(account_id)
    if scope_filter is not None:
        query = query.filter(scope_filter)
    return query.all()


def _validate_assignments(db: Session, principal: Principal, assignments: list[tuple[int, int | None]]) -> None:
    """
    Every role must exist (and be visible under the role scope) and every
    bin must belong to the account. Only a superadmin may hand out a role
    carrying "all".
    """
    account_id = principal.account_id
    role_ids = {role_id for role_id, _ in assignments}
    bin_ids = {bin_id for _, bin_id in assignments if bin_id is not None}

    roles = _assignable_roles(db, account_id, role_ids)
    missing_roles = role_ids - {role.id for role in roles}
    if missing_roles:
        raise ValidationFailed(f"Unknown role id(s): {sorted(missing_roles)}")

    if not principal.is_superadmin and ALL in flatten_permissions(role.permissions for role in roles):
        logger.warning("User %s tried to assign a superadmin role", principal.id)
        check_requirement(principal, PermissionRequirement.single(ALL))

    missing_bins = bin_ids - _ids_in_account(db, Bin, bin_ids, account_id)
    if missing_bins:
        raise ValidationFailed(f"Bin id(s) not in this account: {sorted(missing_bins)}")


def _dedupe(assignments: Iterable[tuple[int, int | None]]) -> list[tuple[int, int | None]]:
    # The unique constraint does not catch repeated (user, role, NULL) rows.
    seen: set[tuple[int, int | None]] = set()
    result = []
    for pair in assignments:
        if pair not in seen:
            seen.add(pair)
            result.append(pair)
    return result


def list_users(db: Session, account_id: int) -> list[ManagedUserResponse]:
    users = (
        db.query(User)
        .filter(User.account_id == account_id)
        .order_by(User.id.desc())
        .all()
    )
    roles = get_user_roles_with_bins(db, [u.id for u in users])
    return [_to_response(u, roles.get(u.id, [])) for u in users]


def get_user(db: Session, account_id: int, user_id: int) -> ManagedUserResponse:
    user = get_account_user(db, account_id, user_id)
    roles = get_user_roles_with_bins(db, [user.id])
    return _to_response(user, roles.get(user.id, []))


def create_user(db: Session, principal: Principal, payload: UserCreate) -> User:
    """
    Create a user in the caller's account.

    roleIds[i] is scoped to binIds[i] when that entry exists and is not
    null. Every non-null bin id is also recorded as a direct bin assignment.
    """
    email = str(payload.email).lower()
    _check_password(payload.password, email)

    if _email_taken(db, principal.account_id, email):
        raise ConflictError(DUPLICATE_EMAIL)

    assignments = _dedupe(
        (role_id, payload.bin_ids[i] if i < len(payload.bin_ids) else None)
        for i, role_id in enumerate(payload.role_ids)
    )
    _validate_assignments(db, principal, assignments)

    direct_bins = {b for b in payload.bin_ids if b is not None}
    missing_bins = direct_bins - _ids_in_account(db, Bin, direct_bins, principal.account_id)
    if missing_bins:
        raise ValidationFailed(f"Bin id(s) not in this account: {sorted(missing_bins)}")

    team_ids = set(payload.team_ids)
    missing_teams = team_ids - _ids_in_account(db, Team, team_ids, principal.account_id)
    if missing_teams:
        raise ValidationFailed(f"Team id(s) not in this account: {sorted(missing_teams)}")

    user = User(
        account_id=principal.account_id,
        email=email,
        hashed_password=get_password_hash(payload.password),
        first_name=payload.firstname,
        last_name=payload.lastname,
        role=UserRoleLabel.USER.value,
        is_active=True,
    )
    db.add(user)
    db.flush()

    for role_id, bin_id in assignments:
        db.add(UserRole(user_id=user.id, role_id=role_id, bin_id=bin_id, granted_by=principal.id))
    for team_id in sorted(team_ids):
        db.add(UserTeam(user_id=user.id, team_id=team_id, assigned_by=principal.id))
    for bin_id in sorted(direct_bins):
        db.add(UserBin(user_id=user.id, bin_id=bin_id, assigned_by=principal.id))

    commit_or_conflict(db, DUPLICATE_EMAIL)
    db.refresh(user)
    logger.info("User %s created user %s (%s)", principal.id, user.id, user.email)
    return user


def update_user(db: Session, principal: Principal, user_id: int, payload: UserUpdate) -> User:
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise ValidationFailed("No updates provided")

    user = get_account_user(db, principal.account_id, user_id)

    if "email" in updates:
        email = str(updates["email"]).lower()
        if _email_taken(db, principal.account_id, email, exclude_user_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL)
        user.email = email
    if "firstname" in updates:
        user.first_name = updates["firstname"]
    if "lastname" in updates:
        user.last_name = updates["lastname"]

    commit_or_conflict(db, DUPLICATE_EMAIL)
    db.refresh(user)
    logger.info("User %s updated user %s", principal.id, user.id)
    return user


def delete_user(db: Session, principal: Principal, user_id: int) -> None:
    if user_id == principal.id:
        raise ValidationFailed("Cannot delete your own account")

    user = get_account_user(db, principal.account_id, user_id)
    email = user.email
    db.delete(user)
    db.commit()
    logger.info("User %s deleted user %s (%s)", principal.id, user_id, email)


def reset_password(db: Session, principal: Principal, user_id: int, new_password: str) -> None:
    user = get_account_user(db, principal.account_id, user_id)
    _check_password(new_password, user.email)

    user.hashed_password = get_password_hash(new_password)
    activity_service.record_activity(
        db,
        account_id=principal.account_id,
        user_id=principal.id,
        action=activity_service.RESET_PASSWORD,
        details=f"Reset password for user {user.id}",
    )
    db.commit()
    logger.info("User %s reset password for user %s", principal.id, user.id)


def list_roles(db: Session, account_id: int) -> list[Role]:
    query = db.query(Role)
    scope_filter = visible_roles_filter(account_id)
    if scope_filter is not None:
        query = query.filter(scope_filter)
    return query.order_by(Role.name, Role.id).all()


def assign_roles(
    db: Session,
    principal: Principal,
    user_id: int,
    role_assignments: list[RoleAssignmentIn],
) -> None:
    """
    Replace all of the user's role assignments with the submitted list.
    Validation happens before anything is deleted.
    """
    user = get_account_user(db, principal.account_id, user_id)

    assignments = _dedupe((a.role_id, a.bin_id) for a in role_assignments)
    _validate_assignments(db, principal, assignments)

    db.query(UserRole).filter(UserRole.user_id == user.id).delete(synchronize_session=False)
    for role_id, bin_id in assignments:
        db.add(UserRole(user_id=user.id, role_id=role_id, bin_id=bin_id, granted_by=principal.id))

    activity_service.record_activity(
        db,
        account_id=principal.account_id,
        user_id=principal.id,
        action=activity_service.ASSIGN_ROLES,
        details=f"Assigned {len(assignments)} role(s) to user {user.id}",
    )
    db.commit()
    logger.info("User %s assigned %d role(s) to user %s", principal.id, len(assignments), user.id)
