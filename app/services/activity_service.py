# app/services/activity_service.py
"""
Append-only activity log. Rows are added in the caller's transaction and
never updated or deleted here.
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.utils.datetime_utils import utc_now

CHANGE_PASSWORD = "CHANGE_PASSWORD"
RESET_PASSWORD = "RESET_PASSWORD"
ASSIGN_ROLES = "ASSIGN_ROLES"
UPDATE_USER_ROLE = "UPDATE_USER_ROLE"
TRANSFER_TICKET = "TRANSFER_TICKET"


def record_activity(
    db: Session,
    *,
    account_id: int,
    user_id: int | None,
    action: str,
    details: str | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        account_id=account_id,
        user_id=user_id,
        action=action,
        details=details,
        timestamp=utc_now(),
    )
    db.add(entry)
    return entry


def list_recent_activity(
    db: Session,
    *,
    account_id: int,
    window_days: int,
    limit: int,
) -> list[ActivityLog]:
    """
    Entries of the last `window_days` days, newest first.
    Older rows stay in the table; they are only hidden from this view.
    """
    since = utc_now() - timedelta(days=window_days)
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.account_id == account_id)
        .filter(ActivityLog.timestamp > since)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
