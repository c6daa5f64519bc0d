from __future__ import annotations

import pytest

from app.models.activity_log import ActivityLog
from app.models.bin import UserBin
from app.models.role import UserRole
from app.models.team import UserTeam
from app.models.user import User
from app.services import activity_service
from conftest import DEFAULT_PASSWORD, login

USERS_URL = "/api/user-management/users"


@pytest.fixture()
def org(client, factory, tenant):
    account = tenant["account"]
    data = {
        "billing": factory.bin(account, "Billing"),
        "hardware": factory.bin(account, "Hardware"),
        "team": factory.team(account, "Tier 1"),
        "support": factory.role("support", ["view_tickets"]),
        "bin_manager": factory.role("bin_manager", ["manage_bin"]),
    }
    login(client, "admin@example.com")
    return data


def _new_user(**overrides) -> dict:
    body = {
        "email": "New.Hire@Example.com",
        "password": "Welcome!2024",
        "firstname": "Nora",
        "lastname": "Hire",
    }
    body.update(overrides)
    return body


def test_create_user_with_parallel_role_and_bin_lists(client, db, org) -> None:
    body = _new_user(
        roleIds=[org["support"].id, org["bin_manager"].id],
        binIds=[org["billing"].id],
        teamIds=[org["team"].id],
    )
    response = client.post(USERS_URL, json=body)
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["email"] == "new.hire@example.com"
    assert set(created) == {"id", "email", "firstname", "lastname"}

    db.expire_all()
    roles = {
        (r.role_id, r.bin_id)
        for r in db.query(UserRole).filter(UserRole.user_id == created["id"]).all()
    }
    assert roles == {(org["support"].id, org["billing"].id), (org["bin_manager"].id, None)}
    assert [b.bin_id for b in db.query(UserBin).filter(UserBin.user_id == created["id"]).all()] == [
        org["billing"].id
    ]
    assert [t.team_id for t in db.query(UserTeam).filter(UserTeam.user_id == created["id"]).all()] == [
        org["team"].id
    ]


def test_created_user_can_log_in_case_insensitively(client, org) -> None:
    assert client.post(USERS_URL, json=_new_user()).status_code == 201
    profile = login(client, "NEW.HIRE@example.com", "Welcome!2024")
    assert profile["email"] == "new.hire@example.com"


def test_duplicate_email_conflicts(client, org) -> None:
    response = client.post(USERS_URL, json=_new_user(email="ADMIN@example.com"))
    assert response.status_code == 409
    assert response.json() == {"error": "Email already exists"}


def test_same_email_allowed_in_another_account(client, factory, org) -> None:
    factory.user(factory.account("other"), "new.hire@example.com")
    assert client.post(USERS_URL, json=_new_user()).status_code == 201


@pytest.mark.parametrize(
    "password, message",
    [
        ("alllowercase!", "Password must contain at least 1 uppercase letter"),
        ("ALLUPPER!1", "Password must contain at least 1 lowercase letter"),
        ("NoSpecials1", "Password must contain at least 1 special character"),
        ("Hire!New.hire", "Password cannot contain your email address"),
    ],
)
def test_create_user_enforces_password_complexity(client, db, org, password, message) -> None:
    response = client.post(USERS_URL, json=_new_user(password=password))
    assert response.status_code == 400
    assert response.json() == {"error": message}
    db.expire_all()
    assert db.query(User).filter(User.email == "new.hire@example.com").count() == 0


def test_short_password_fails_request_validation(client, org) -> None:
    response = client.post(USERS_URL, json=_new_user(password="Ab!1"))
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_create_user_rejects_foreign_references(client, db, factory, org) -> None:
    other = factory.account("other")
    foreign_bin = factory.bin(other, "Foreign")
    foreign_team = factory.team(other, "Foreign team")

    assert client.post(USERS_URL, json=_new_user(roleIds=[9999])).status_code == 400
    response = client.post(USERS_URL, json=_new_user(roleIds=[org["support"].id], binIds=[foreign_bin.id]))
    assert response.status_code == 400
    assert client.post(USERS_URL, json=_new_user(teamIds=[foreign_team.id])).status_code == 400

    db.expire_all()
    assert db.query(User).filter(User.email == "new.hire@example.com").count() == 0


def test_list_and_get_users_with_roles(client, factory, tenant, org) -> None:
    member = factory.user(
        tenant["account"],
        "member@example.com",
        roles=[(org["support"], org["billing"]), (org["bin_manager"], None)],
    )
    factory.user(factory.account("other"), "outsider@other.com")

    users = client.get(USERS_URL).json()
    assert [u["id"] for u in users] == sorted((u["id"] for u in users), reverse=True)
    assert "outsider@other.com" not in [u["email"] for u in users]

    detail = client.get(f"{USERS_URL}/{member.id}").json()
    assert {(r["roleName"], r["binName"]) for r in detail["roles"]} == {
        ("support", "Billing"),
        ("bin_manager", None),
    }


def test_get_foreign_user_is_not_found(client, factory, org) -> None:
    outsider = factory.user(factory.account("other"), "outsider@other.com")
    assert client.get(f"{USERS_URL}/{outsider.id}").status_code == 404
    assert client.put(f"{USERS_URL}/{outsider.id}", json={"firstname": "X"}).status_code == 404
    assert client.delete(f"{USERS_URL}/{outsider.id}").status_code == 404


def test_update_user(client, tenant, org) -> None:
    plain_id = tenant["plain"].id
    response = client.put(f"{USERS_URL}/{plain_id}", json={"firstname": "Paula", "email": "Paula@Example.com"})
    assert response.status_code == 200
    assert response.json()["firstname"] == "Paula"
    assert response.json()["email"] == "paula@example.com"

    assert client.put(f"{USERS_URL}/{plain_id}", json={}).status_code == 400
    assert client.put(f"{USERS_URL}/{plain_id}", json={"email": "root@example.com"}).status_code == 409


def test_delete_user(client, db, tenant, org) -> None:
    plain_id = tenant["plain"].id
    assert client.delete(f"{USERS_URL}/{plain_id}").status_code == 200
    db.expire_all()
    assert db.get(User, plain_id) is None


def test_cannot_delete_self(client, tenant, org) -> None:
    response = client.delete(f"{USERS_URL}/{tenant['admin'].id}")
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete your own account"}


def test_reset_password(client, db, tenant, org) -> None:
    plain_id = tenant["plain"].id
    response = client.post(f"{USERS_URL}/{plain_id}/reset-password", json={"newPassword": "Fresh!Start9"})
    assert response.status_code == 200

    weak = client.post(f"{USERS_URL}/{plain_id}/reset-password", json={"newPassword": "weakpassword"})
    assert weak.status_code == 400

    db.expire_all()
    entry = db.query(ActivityLog).filter(ActivityLog.action == activity_service.RESET_PASSWORD).one()
    assert entry.user_id == tenant["admin"].id

    client.cookies.clear()
    login(client, "plain@example.com", "Fresh!Start9")


def test_list_roles(client, org) -> None:
    names = [r["name"] for r in client.get("/api/user-management/roles").json()]
    assert names == sorted(names)
    assert {"support", "bin_manager", "admin", "superadmin"} <= set(names)


def test_list_roles_account_scope(client, factory, settings, monkeypatch, org) -> None:
    factory.role("foreign_only", ["all"], account=factory.account("other"))
    assert "foreign_only" in [r["name"] for r in client.get("/api/user-management/roles").json()]

    monkeypatch.setattr(settings, "role_scope", "account")
    assert "foreign_only" not in [r["name"] for r in client.get("/api/user-management/roles").json()]


def test_assign_roles_replaces_everything(client, db, factory, tenant, org) -> None:
    member = factory.user(tenant["account"], "member@example.com", roles=[(org["support"], org["billing"])])
    body = {
        "roleIds": [
            {"roleId": org["bin_manager"].id, "binId": org["hardware"].id},
            {"roleId": org["support"].id},
            {"roleId": org["support"].id, "binId": None},
        ]
    }
    response = client.post(f"{USERS_URL}/{member.id}/roles", json=body)
    assert response.status_code == 200, response.text

    db.expire_all()
    rows = {(r.role_id, r.bin_id) for r in db.query(UserRole).filter(UserRole.user_id == member.id).all()}
    assert rows == {(org["bin_manager"].id, org["hardware"].id), (org["support"].id, None)}
    assert db.query(ActivityLog).filter(ActivityLog.action == activity_service.ASSIGN_ROLES).count() == 1


def test_assign_roles_validates_before_deleting(client, db, factory, tenant, org) -> None:
    member = factory.user(tenant["account"], "member@example.com", roles=[(org["support"], org["billing"])])
    foreign_bin = factory.bin(factory.account("other"), "Foreign")

    response = client.post(
        f"{USERS_URL}/{member.id}/roles",
        json={"roleIds": [{"roleId": org["support"].id, "binId": foreign_bin.id}]},
    )
    assert response.status_code == 400

    db.expire_all()
    rows = {(r.role_id, r.bin_id) for r in db.query(UserRole).filter(UserRole.user_id == member.id).all()}
    assert rows == {(org["support"].id, org["billing"].id)}


def test_admin_cannot_assign_superadmin_role(client, db, tenant, org) -> None:
    admin_id = tenant["admin"].id
    before = {(r.role_id, r.bin_id) for r in db.query(UserRole).filter(UserRole.user_id == admin_id).all()}

    response = client.post(
        f"{USERS_URL}/{admin_id}/roles",
        json={"roleIds": [{"roleId": tenant["superadmin_role"].id}]},
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden", "message": "Required permission: all"}

    db.expire_all()
    after = {(r.role_id, r.bin_id) for r in db.query(UserRole).filter(UserRole.user_id == admin_id).all()}
    assert after == before
    assert client.get("/api/accounts").status_code == 403


def test_admin_cannot_create_superadmin(client, db, tenant, org) -> None:
    response = client.post(USERS_URL, json=_new_user(roleIds=[org["support"].id, tenant["superadmin_role"].id]))
    assert response.status_code == 403
    assert response.json()["message"] == "Required permission: all"

    db.expire_all()
    assert db.query(User).filter(User.email == "new.hire@example.com").count() == 0


def test_superadmin_can_assign_superadmin_role(client, db, tenant, org) -> None:
    client.cookies.clear()
    login(client, "root@example.com")
    plain_id = tenant["plain"].id
    response = client.post(
        f"{USERS_URL}/{plain_id}/roles",
        json={"roleIds": [{"roleId": tenant["superadmin_role"].id}]},
    )
    assert response.status_code == 200

    db.expire_all()
    rows = db.query(UserRole).filter(UserRole.user_id == plain_id).all()
    assert [(r.role_id, r.bin_id) for r in rows] == [(tenant["superadmin_role"].id, None)]


def test_assign_empty_list_removes_all_roles(client, db, factory, tenant, org) -> None:
    member = factory.user(tenant["account"], "member@example.com", roles=[(org["support"], None)])
    assert client.post(f"{USERS_URL}/{member.id}/roles", json={"roleIds": []}).status_code == 200
    db.expire_all()
    assert db.query(UserRole).filter(UserRole.user_id == member.id).count() == 0


def test_user_management_requires_all_users(client, tenant) -> None:
    login(client, "plain@example.com", DEFAULT_PASSWORD)
    assert client.get(USERS_URL).status_code == 403
    assert client.get("/api/user-management/roles").status_code == 403
