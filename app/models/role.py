# app/models/role.py
"""
Role catalog and role assignments.

A role is a named bundle of permission keys. Assignments link a user to a
role, optionally scoped to one bin; bin_id NULL means the role applies to
every bin of the user's account.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.utils.datetime_utils import utc_now


class Role(Base):
    """
    Catalog entry. account_id NULL marks a role shared by every account;
    whether account-owned roles are honoured is decided by settings.role_scope.
    """

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("account_id", "name", name="uq_roles_account_name"),
    )

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign Keys
    account_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Role Information
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    permissions: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        doc="Array of permission keys, e.g. [\"all_bins\", \"transfer_tickets\"]",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Relationships
    assignments: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserRole(Base):
    """
    (user, role, bin) assignment. The triple is unique; a NULL bin is
    de-duplicated by the services since SQL treats NULLs as distinct.
    """

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", "bin_id", name="uq_user_role_bin"),
    )

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign Keys
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bin_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("bins.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        doc="NULL = global (all bins) grant of this role",
    )
    granted_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Relationships
    role: Mapped["Role"] = relationship("Role", back_populates="assignments")
