"""initial_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=nullable,
    )


def _user_fk(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("account_id", "email", name="uq_users_account_email"),
    )
    op.create_index(op.f("ix_users_account_id"), "users", ["account_id"])

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("account_id", "name", name="uq_roles_account_name"),
    )
    op.create_index(op.f("ix_roles_account_id"), "roles", ["account_id"])
    op.create_index(op.f("ix_roles_name"), "roles", ["name"])

    op.create_table(
        "bins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("manager_id"),
        _user_fk("created_by"),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=False, server_default=sa.text("'#6B7280'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("created_at"),
        sa.UniqueConstraint("account_id", "name", name="uq_bins_account_name"),
    )
    op.create_index(op.f("ix_bins_account_id"), "bins", ["account_id"])

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("created_by"),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("created_at"),
        sa.UniqueConstraint("account_id", "name", name="uq_teams_account_name"),
    )
    op.create_index(op.f("ix_teams_account_id"), "teams", ["account_id"])

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bin_id", sa.Integer(), sa.ForeignKey("bins.id", ondelete="CASCADE"), nullable=True),
        _user_fk("granted_by"),
        _timestamp("created_at"),
        sa.UniqueConstraint("user_id", "role_id", "bin_id", name="uq_user_role_bin"),
    )
    op.create_index(op.f("ix_user_roles_user_id"), "user_roles", ["user_id"])
    op.create_index(op.f("ix_user_roles_role_id"), "user_roles", ["role_id"])
    op.create_index(op.f("ix_user_roles_bin_id"), "user_roles", ["bin_id"])

    op.create_table(
        "permission_definitions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("permission_key", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("value_type", sa.String(length=20), nullable=False, server_default=sa.text("'boolean'")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index(
        op.f("ix_permission_definitions_permission_key"),
        "permission_definitions",
        ["permission_key"],
        unique=True,
    )

    op.create_table(
        "user_permissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        _user_fk("granted_by"),
        sa.Column("permission_key", sa.String(length=100), nullable=False),
        sa.Column("permission_value", sa.JSON(), nullable=False),
        _timestamp("updated_at"),
        sa.UniqueConstraint("user_id", "permission_key", name="uq_user_permission_key"),
    )
    op.create_index(op.f("ix_user_permissions_user_id"), "user_permissions", ["user_id"])

    op.create_table(
        "user_bins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bin_id", sa.Integer(), sa.ForeignKey("bins.id", ondelete="CASCADE"), nullable=False),
        _user_fk("assigned_by"),
        _timestamp("created_at"),
        sa.UniqueConstraint("user_id", "bin_id", name="uq_user_bin"),
    )
    op.create_index(op.f("ix_user_bins_user_id"), "user_bins", ["user_id"])
    op.create_index(op.f("ix_user_bins_bin_id"), "user_bins", ["bin_id"])

    op.create_table(
        "user_teams",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        _user_fk("assigned_by"),
        _timestamp("created_at"),
        sa.UniqueConstraint("user_id", "team_id", name="uq_user_team"),
    )
    op.create_index(op.f("ix_user_teams_user_id"), "user_teams", ["user_id"])
    op.create_index(op.f("ix_user_teams_team_id"), "user_teams", ["team_id"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("requester_id"),
        _user_fk("assignee_id"),
        sa.Column("bin_id", sa.Integer(), sa.ForeignKey("bins.id", ondelete="SET NULL"), nullable=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "duplicate_of_id",
            sa.Integer(),
            sa.ForeignKey("tickets.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("open", "in_progress", "closed", "archived", name="ticket_status_enum"),
            nullable=False,
        ),
        sa.Column(
            "priority",
            sa.Enum("low", "medium", "high", "critical", name="ticket_priority_enum"),
            nullable=False,
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f("ix_tickets_account_id"), "tickets", ["account_id"])
    op.create_index(op.f("ix_tickets_bin_id"), "tickets", ["bin_id"])
    op.create_index(op.f("ix_tickets_team_id"), "tickets", ["team_id"])
    op.create_index(op.f("ix_tickets_created_at"), "tickets", ["created_at"])

    op.create_table(
        "kb_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("author_id"),
        sa.Column(
            "source_ticket_id",
            sa.Integer(),
            sa.ForeignKey("tickets.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False, server_default=sa.text("'General'")),
        _timestamp("created_at"),
    )
    op.create_index(op.f("ix_kb_items_account_id"), "kb_items", ["account_id"])
    op.create_index(op.f("ix_kb_items_created_at"), "kb_items", ["created_at"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("user_id"),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        _timestamp("timestamp"),
    )
    op.create_index(op.f("ix_activity_logs_account_id"), "activity_logs", ["account_id"])
    op.create_index(op.f("ix_activity_logs_timestamp"), "activity_logs", ["timestamp"])


def downgrade() -> None:
    for table in (
        "activity_logs",
        "kb_items",
        "tickets",
        "user_teams",
        "user_bins",
        "user_permissions",
        "permission_definitions",
        "user_roles",
        "teams",
        "bins",
        "roles",
        "users",
        "accounts",
    ):
        op.drop_table(table)

    sa.Enum(name="ticket_priority_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="ticket_status_enum").drop(op.get_bind(), checkfirst=True)
