# app/models/account.py
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.utils.datetime_utils import utc_now


class Account(Base):
    """
    Tenant boundary. Every user, bin, team, ticket and knowledge base item
    belongs to exactly one account; deleting an account cascades to them
    at the database level.
    """

    __tablename__ = "accounts"

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="Machine name, lowercase letters, digits and underscores only",
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Configuration
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Flags
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    # Audit (no FK: users reference accounts, not the other way round)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )
