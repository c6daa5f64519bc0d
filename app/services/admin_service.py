# app/services/admin_service.py
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.permissions import Principal
from app.models.user import User, UserRoleLabel
from app.schemas.admin import AdminUserResponse, UserStatsResponse
from app.services import activity_service

logger = logging.getLogger(__name__)


def _to_admin_user(user: User) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        firstname=user.first_name,
        lastname=user.last_name,
        email=user.email,
        role=user.role,
    )


def list_users(db: Session, account_id: int) -> list[AdminUserResponse]:
    users = (
        db.query(User)
        .filter(User.account_id == account_id)
        .order_by(User.first_name, User.id)
        .all()
    )
    return [_to_admin_user(u) for u in users]


def update_role_label(
    db: Session,
    principal: Principal,
    user_id: int,
    role: UserRoleLabel,
) -> AdminUserResponse:
    """
    Change the display label on a user row. Capabilities are unaffected;
    those come from role assignments.
    """
    user = (
        db.query(User)
        .filter(User.id == user_id, User.account_id == principal.account_id)
        .first()
    )
    if not user:
        raise NotFoundError("User not found")

    user.role = role.value
    activity_service.record_activity(
        db,
        account_id=principal.account_id,
        user_id=principal.id,
        action=activity_service.UPDATE_USER_ROLE,
        details=f"Updated user {user.id} role to {role.value}",
    )
    db.commit()
    db.refresh(user)
    logger.info("User %s set role label of user %s to %s", principal.id, user.id, role.value)
    return _to_admin_user(user)


def user_stats(db: Session, account_id: int) -> UserStatsResponse:
    counts = dict(
        db.query(User.role, func.count(User.id))
        .filter(User.account_id == account_id)
        .group_by(User.role)
        .all()
    )
    return UserStatsResponse(
        total_users=sum(counts.values()),
        admin_count=counts.get(UserRoleLabel.ADMIN.value, 0),
        manager_count=counts.get(UserRoleLabel.MANAGER.value, 0),
        support_count=counts.get(UserRoleLabel.SUPPORT.value, 0),
        user_count=counts.get(UserRoleLabel.USER.value, 0),
    )
