from __future__ import annotations

import os

# Settings are read at import time; configure them before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["REDIS_URL"] = ""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app import main as app_main
from app.core.config import get_settings
from app.core.database import build_engine, get_db
from app.core.security import get_password_hash
from app.models import registry  # noqa: F401
from app.models.account import Account
from app.models.base import Base
from app.models.bin import Bin
from app.models.permission import PermissionDefinition
from app.models.role import Role, UserRole
from app.models.team import Team
from app.models.ticket import Ticket, TicketStatus
from app.models.user import User

DEFAULT_PASSWORD = "Str0ng!Pass"


@pytest.fixture()
def session_factory(tmp_path: Path) -> Generator[sessionmaker, None, None]:
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(test_engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=test_engine, future=True)
    yield factory
    test_engine.dispose()


@pytest.fixture()
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    def _get_test_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app_main.app.dependency_overrides[get_db] = _get_test_db
    test_client = TestClient(app_main.app)
    yield test_client
    test_client.close()
    app_main.app.dependency_overrides.clear()


@pytest.fixture()
def settings():
    """The cached Settings object every module reads; monkeypatch its attributes."""
    return get_settings()


class Factory:
    """Builds committed rows for tests."""

    _hashes: dict[str, str] = {}

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def _hash(self, password: str) -> str:
        if password not in self._hashes:
            self._hashes[password] = get_password_hash(password)
        return self._hashes[password]

    def account(self, name: str = "default", account_id: int | None = None) -> Account:
        return self._save(
            Account(id=account_id, name=name, display_name=name.title(), settings={}, is_active=True)
        )

    def role(self, name: str, permissions: list[str], account: Account | None = None) -> Role:
        return self._save(
            Role(
                name=name,
                display_name=name.replace("_", " ").title(),
                permissions=permissions,
                account_id=account.id if account else None,
            )
        )

    def user(
        self,
        account: Account,
        email: str,
        *,
        password: str = DEFAULT_PASSWORD,
        roles: list[tuple[Role, Bin | None]] | None = None,
        first_name: str = "Test",
        last_name: str = "User",
        role_label: str = "user",
        is_active: bool = True,
    ) -> User:
        user = self._save(
            User(
                account_id=account.id,
                email=email,
                hashed_password=self._hash(password),
                first_name=first_name,
                last_name=last_name,
                role=role_label,
                is_active=is_active,
            )
        )
        for role, bin_obj in roles or []:
            self.assign(user, role, bin_obj)
        return user

    def assign(self, user: User, role: Role, bin_obj: Bin | None = None) -> UserRole:
        return self._save(UserRole(user_id=user.id, role_id=role.id, bin_id=bin_obj.id if bin_obj else None))

    def bin(self, account: Account, name: str, *, is_active: bool = True, manager: User | None = None) -> Bin:
        return self._save(
            Bin(
                account_id=account.id,
                name=name,
                is_active=is_active,
                manager_id=manager.id if manager else None,
            )
        )

    def team(self, account: Account, name: str) -> Team:
        return self._save(Team(account_id=account.id, name=name, is_active=True))

    def ticket(
        self,
        account: Account,
        *,
        subject: str = "Printer is on fire",
        status: TicketStatus = TicketStatus.OPEN,
        bin_obj: Bin | None = None,
        requester: User | None = None,
    ) -> Ticket:
        return self._save(
            Ticket(
                account_id=account.id,
                subject=subject,
                content="Smoke is coming out of the tray.",
                status=status,
                bin_id=bin_obj.id if bin_obj else None,
                requester_id=requester.id if requester else None,
            )
        )

    def definition(self, key: str, value_type: str = "boolean", order: int = 0, is_active: bool = True):
        return self._save(
            PermissionDefinition(
                permission_key=key,
                display_name=key.replace("_", " ").title(),
                value_type=value_type,
                display_order=order,
                is_active=is_active,
            )
        )


@pytest.fixture()
def factory(db: Session) -> Factory:
    return Factory(db)


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture()
def tenant(factory: Factory):
    """
    Default account with a superadmin, an admin (all_bins, all_users,
    transfer_tickets) and a plain user without roles.
    """
    account = factory.account("default", account_id=1)
    superadmin_role = factory.role("superadmin", ["all"])
    admin_role = factory.role("admin", ["all_bins", "all_users", "transfer_tickets"])
    superadmin = factory.user(account, "root@example.com", roles=[(superadmin_role, None)], first_name="Root")
    admin = factory.user(account, "admin@example.com", roles=[(admin_role, None)], first_name="Ada")
    plain = factory.user(account, "plain@example.com", first_name="Paul")
    return {
        "account": account,
        "superadmin": superadmin,
        "admin": admin,
        "plain": plain,
        "superadmin_role": superadmin_role,
        "admin_role": admin_role,
    }
