# app/models/activity_log.py
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.utils.datetime_utils import utc_now


class ActivityLog(Base):
    """
    Append-only audit trail of privileged mutations.
    Rows are never updated or deleted by the application.
    """

    __tablename__ = "activity_logs"

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign Keys
    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Audit Information
    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Action tag: CHANGE_PASSWORD, RESET_PASSWORD, ASSIGN_ROLES, UPDATE_USER_ROLE, TRANSFER_TICKET",
    )
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
