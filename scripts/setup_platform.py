#!/usr/bin/env python3
# scripts/setup_platform.py
"""
Platform setup.
This script is safe to run many times (idempotent).

What it ensures:
- the default account (id settings.default_account_id, name "default")
- the permission definition catalog shown by the matrix UI
- the shared role catalog (superadmin, admin, bin_manager, support)
- a superadmin user in the default account holding the "superadmin" role

Existing rows are left as they are, except the superadmin password, which
is rotated to the supplied value.

Examples:
  # Catalogs only
  python -m scripts.setup_platform --init-catalog

  # Superadmin from args
  python -m scripts.setup_platform --ensure-super-admin --email admin@example.com --password "Admin@12345"

  # Everything, credentials read from env (SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD)
  python -m scripts.setup_platform --init-catalog --ensure-super-admin
"""

from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import session_scope
from app.core.permissions import ALL, ALL_BINS, ALL_USERS, BINS_ASSIGNED, TRANSFER_TICKETS
from app.core.security import get_password_hash
from app.models import registry  # noqa: F401
from app.models.account import Account
from app.models.permission import PermissionDefinition
from app.models.role import Role, UserRole
from app.models.user import User, UserRoleLabel

logger = logging.getLogger(__name__)

SUPERADMIN_ROLE = "superadmin"

# (permission_key, display_name, description, value_type)
PERMISSION_DEFINITIONS: list[tuple[str, str, str, str]] = [
    (ALL, "Superadmin", "Every capability in every account-level screen", "boolean"),
    (ALL_BINS, "Manage all bins", "Create, edit and delete bins and teams", "boolean"),
    (ALL_USERS, "Manage all users", "User management, role assignment and the permissions matrix", "boolean"),
    (TRANSFER_TICKETS, "Transfer tickets", "Move tickets between bins", "boolean"),
    (BINS_ASSIGNED, "Assigned bins", "Bins the user works in", "array"),
    ("view_tickets", "View tickets", "Read tickets", "boolean"),
    ("manage_bin", "Manage bin", "Manage the bins the role is scoped to", "boolean"),
]

# (name, display_name, description, permissions)
DEFAULT_ROLES: list[tuple[str, str, str, list[str]]] = [
    (SUPERADMIN_ROLE, "Super Admin", "Unrestricted access", [ALL]),
    ("admin", "Administrator", "Account administration", [ALL_BINS, ALL_USERS, TRANSFER_TICKETS]),
    ("bin_manager", "Bin Manager", "Runs one or more bins", ["manage_bin", "view_tickets", TRANSFER_TICKETS]),
    ("support", "Support Agent", "Works tickets", ["view_tickets"]),
]


def ensure_default_account(db: Session) -> Account:
    settings = get_settings()
    account = db.get(Account, settings.default_account_id)
    if account:
        print(f"default account exists: {account.name}")
        return account

    account = Account(
        id=settings.default_account_id,
        name=settings.default_account_name,
        display_name=settings.default_account_name.title(),
        settings={},
        is_active=True,
    )
    db.add(account)
    db.flush()
    if db.get_bind().dialect.name == "postgresql":
        # explicit id insert does not advance the serial sequence
        db.execute(text("SELECT setval(pg_get_serial_sequence('accounts', 'id'), (SELECT MAX(id) FROM accounts))"))
    print(f"default account created: {account.name}")
    return account


def ensure_permission_definitions(db: Session) -> int:
    """
    Insert missing catalog entries. Returns how many were added.
    """
    existing = {key for (key,) in db.query(PermissionDefinition.permission_key).all()}
    added = 0
    for order, (key, display_name, description, value_type) in enumerate(PERMISSION_DEFINITIONS, start=1):
        if key in existing:
            continue
        db.add(
            PermissionDefinition(
                permission_key=key,
                display_name=display_name,
                description=description,
                value_type=value_type,
                display_order=order * 10,
                is_active=True,
            )
        )
        added += 1
    db.flush()
    print(f"permission definitions ensured ({added} added)")
    return added


def ensure_default_roles(db: Session) -> dict[str, Role]:
    """
    Shared roles (account_id NULL). Existing roles keep their permissions.
    """
    roles: dict[str, Role] = {}
    for name, display_name, description, permissions in DEFAULT_ROLES:
        role = db.query(Role).filter(Role.account_id.is_(None), Role.name == name).first()
        if not role:
            role = Role(
                account_id=None,
                name=name,
                display_name=display_name,
                description=description,
                permissions=list(permissions),
            )
            db.add(role)
            print(f"role created: {name}")
        roles[name] = role
    db.flush()
    return roles


def ensure_super_admin(
    db: Session,
    *,
    email: str,
    password: str,
    first_name: str = "Super",
    last_name: str = "Admin",
) -> User:
    """
    Ensure a superadmin exists in the default account with a global
    "superadmin" role assignment.

    Behavior:
    - If user exists: reactivate, rotate password, make sure the role is assigned.
    - If missing: create it.
    """
    account = ensure_default_account(db)
    roles = ensure_default_roles(db)
    superadmin_role = roles[SUPERADMIN_ROLE]

    email = email.lower()
    hashed = get_password_hash(password)

    user = (
        db.query(User)
        .filter(User.account_id == account.id, func.lower(User.email) == email)
        .first()
    )
    if user:
        user.is_active = True
        # If password changes in env, we intentionally rotate it.
        user.hashed_password = hashed
        print(f"SUPERADMIN ensured (updated if needed): {email}")
    else:
        user = User(
            account_id=account.id,
            email=email,
            hashed_password=hashed,
            first_name=first_name,
            last_name=last_name,
            role=UserRoleLabel.ADMIN.value,
            is_active=True,
        )
        db.add(user)
        print(f"SUPERADMIN created: {email}")
    db.flush()

    has_role = (
        db.query(UserRole.id)
        .filter(
            UserRole.user_id == user.id,
            UserRole.role_id == superadmin_role.id,
            UserRole.bin_id.is_(None),
        )
        .first()
    )
    if not has_role:
        db.add(UserRole(user_id=user.id, role_id=superadmin_role.id, bin_id=None))
        db.flush()
    return user


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Ticketing platform setup")
    p.add_argument(
        "--init-catalog",
        action="store_true",
        help="Ensure default account, permission definitions and default roles",
    )
    p.add_argument(
        "--ensure-super-admin",
        action="store_true",
        help="Ensure SUPERADMIN exists (from args if provided, else from env)",
    )

    # Optional CLI overrides (otherwise env is used)
    p.add_argument("--email", type=str, help="SUPERADMIN email (or use env SUPER_ADMIN_EMAIL)")
    p.add_argument("--password", type=str, help="SUPERADMIN password (or use env SUPER_ADMIN_PASSWORD)")
    p.add_argument("--first-name", type=str, default=None, help="Default: env SUPER_ADMIN_FIRST_NAME or 'Super'")
    p.add_argument("--last-name", type=str, default=None, help="Default: env SUPER_ADMIN_LAST_NAME or 'Admin'")
    return p.parse_args()


def main() -> None:
    args = parse_args()

    if not args.init_catalog and not args.ensure_super_admin:
        print("Nothing to do. Use --init-catalog and/or --ensure-super-admin.")
        sys.exit(1)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    if args.ensure_super_admin:
        # CLI args take precedence, then settings (from .env)
        email = args.email or settings.super_admin_email
        password = args.password or settings.super_admin_password
        first_name = args.first_name or settings.super_admin_first_name
        last_name = args.last_name or settings.super_admin_last_name

        if not email or not password:
            raise SystemExit(
                "SUPERADMIN credentials missing.\n"
                "Provide --email/--password OR set env SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD."
            )

    try:
        with session_scope() as db:
            if args.init_catalog:
                ensure_default_account(db)
                ensure_permission_definitions(db)
                ensure_default_roles(db)

            if args.ensure_super_admin:
                ensure_super_admin(
                    db,
                    email=str(email),
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                )
    except Exception:
        logger.exception("Platform setup failed")
        raise


if __name__ == "__main__":
    main()
