from __future__ import annotations

import pytest

from app.models.bin import UserBin
from app.models.permission import UserPermission
from app.models.team import UserTeam
from app.services import matrix_service
from conftest import login

MATRIX_URL = "/api/permissions/matrix"


@pytest.fixture()
def matrix(client, factory, tenant):
    account = tenant["account"]
    data = {
        "bin_a": factory.bin(account, "Billing"),
        "bin_b": factory.bin(account, "Hardware"),
        "team": factory.team(account, "Tier 1"),
        "target": factory.user(account, "agent@example.com", first_name="Agnes"),
    }
    factory.definition("all_bins", order=20)
    factory.definition("bins_assigned", value_type="array", order=10)
    factory.definition("legacy_flag", order=5, is_active=False)
    login(client, "admin@example.com")
    return data


def _grants(db, user_id: int) -> dict:
    db.expire_all()
    rows = db.query(UserPermission).filter(UserPermission.user_id == user_id).all()
    return {row.permission_key: row.permission_value for row in rows}


def _bins(db, user_id: int) -> set[int]:
    db.expire_all()
    return {row.bin_id for row in db.query(UserBin).filter(UserBin.user_id == user_id).all()}


def test_update_grants_and_assignments(client, db, tenant, matrix) -> None:
    target = matrix["target"]
    body = {
        "updates": [
            {
                "userId": target.id,
                "permissions": {"all_bins": True, "limits": {"daily": 10}, "regions": ["eu"]},
                "binsAssigned": [matrix["bin_a"].id, matrix["bin_b"].id],
                "teamsAssigned": [matrix["team"].id],
            }
        ]
    }
    response = client.post(MATRIX_URL, json=body)
    assert response.status_code == 200, response.text
    assert response.json() == {"success": True, "message": "Permissions updated successfully"}

    assert _grants(db, target.id) == {"all_bins": True, "limits": {"daily": 10}, "regions": ["eu"]}
    assert _bins(db, target.id) == {matrix["bin_a"].id, matrix["bin_b"].id}
    teams = db.query(UserTeam).filter(UserTeam.user_id == target.id).all()
    assert [t.team_id for t in teams] == [matrix["team"].id]
    assert teams[0].assigned_by == tenant["admin"].id


def test_update_is_idempotent(client, db, matrix) -> None:
    target = matrix["target"]
    body = {
        "updates": [
            {"userId": target.id, "permissions": {"all_bins": True}, "binsAssigned": [matrix["bin_a"].id]}
        ]
    }
    assert client.post(MATRIX_URL, json=body).status_code == 200
    first = (_grants(db, target.id), _bins(db, target.id))
    assert client.post(MATRIX_URL, json=body).status_code == 200
    assert (_grants(db, target.id), _bins(db, target.id)) == first
    assert db.query(UserPermission).filter(UserPermission.user_id == target.id).count() == 1


def test_upsert_overwrites_value_and_grantor(client, db, factory, tenant, matrix) -> None:
    target = matrix["target"]
    db.add(UserPermission(user_id=target.id, permission_key="all_bins", permission_value=True, granted_by=None))
    db.commit()

    body = {"updates": [{"userId": target.id, "permissions": {"all_bins": False}}]}
    assert client.post(MATRIX_URL, json=body).status_code == 200

    db.expire_all()
    grant = db.query(UserPermission).filter(UserPermission.user_id == target.id).one()
    assert grant.permission_value is False
    assert grant.granted_by == tenant["admin"].id


def test_empty_bins_assigned_clears_all_assignments(client, db, matrix) -> None:
    target = matrix["target"]
    seed = {"updates": [{"userId": target.id, "binsAssigned": [matrix["bin_a"].id, matrix["bin_b"].id]}]}
    assert client.post(MATRIX_URL, json=seed).status_code == 200
    assert len(_bins(db, target.id)) == 2

    clear = {"updates": [{"userId": target.id, "permissions": {}, "binsAssigned": []}]}
    assert client.post(MATRIX_URL, json=clear).status_code == 200
    assert _bins(db, target.id) == set()


@pytest.mark.parametrize("sentinel", ["1,2", 3, None])
def test_scalar_bins_assigned_key_is_ignored(client, db, matrix, sentinel) -> None:
    target = matrix["target"]
    body = {"updates": [{"userId": target.id, "permissions": {"bins_assigned": sentinel, "all_bins": True}}]}
    response = client.post(MATRIX_URL, json=body)
    assert response.status_code == 200, response.text
    assert _grants(db, target.id) == {"all_bins": True}
    assert _bins(db, target.id) == set()


def test_absent_bins_assigned_leaves_assignments(client, db, matrix) -> None:
    target = matrix["target"]
    seed = {"updates": [{"userId": target.id, "binsAssigned": [matrix["bin_a"].id]}]}
    assert client.post(MATRIX_URL, json=seed).status_code == 200

    grants_only = {"updates": [{"userId": target.id, "permissions": {"all_bins": True}}]}
    assert client.post(MATRIX_URL, json=grants_only).status_code == 200
    assert _bins(db, target.id) == {matrix["bin_a"].id}


def test_bins_assigned_key_is_not_stored_as_grant(client, db, matrix) -> None:
    target = matrix["target"]
    body = {
        "updates": [
            {
                "userId": target.id,
                "permissions": {"bins_assigned": [matrix["bin_a"].id], "all_bins": True},
            }
        ]
    }
    assert client.post(MATRIX_URL, json=body).status_code == 200
    assert _grants(db, target.id) == {"all_bins": True}
    assert _bins(db, target.id) == set()


def test_cross_account_user_is_skipped_silently(client, db, factory, matrix) -> None:
    other_account = factory.account("other")
    outsider = factory.user(other_account, "outsider@other.com")
    target = matrix["target"]
    body = {
        "updates": [
            {"userId": outsider.id, "permissions": {"all_bins": True}, "binsAssigned": [matrix["bin_a"].id]},
            {"userId": target.id, "permissions": {"all_bins": True}},
        ]
    }
    response = client.post(MATRIX_URL, json=body)
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert _grants(db, outsider.id) == {}
    assert _bins(db, outsider.id) == set()
    assert _grants(db, target.id) == {"all_bins": True}


def test_foreign_bins_are_not_assigned(client, db, factory, matrix) -> None:
    foreign_bin = factory.bin(factory.account("other"), "Foreign")
    target = matrix["target"]
    body = {"updates": [{"userId": target.id, "binsAssigned": [foreign_bin.id, matrix["bin_a"].id]}]}
    assert client.post(MATRIX_URL, json=body).status_code == 200
    assert _bins(db, target.id) == {matrix["bin_a"].id}


@pytest.mark.parametrize("bad_value", [1, "yes", None])
def test_invalid_permission_value_rejects_whole_request(client, db, matrix, bad_value) -> None:
    target = matrix["target"]
    body = {
        "updates": [
            {"userId": target.id, "permissions": {"all_bins": True}},
            {"userId": target.id, "permissions": {"broken": bad_value}},
        ]
    }
    response = client.post(MATRIX_URL, json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"
    assert _grants(db, target.id) == {}


def _fail_on_second_record(monkeypatch) -> None:
    original = matrix_service._apply_record
    calls = {"n": 0}

    def flaky(db, principal, record):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("storage went away")
        return original(db, principal, record)

    monkeypatch.setattr(matrix_service, "_apply_record", flaky)


def _two_record_body(matrix) -> dict:
    target = matrix["target"]
    return {
        "updates": [
            {"userId": target.id, "permissions": {"all_bins": True}},
            {"userId": target.id, "permissions": {"other": True}},
        ]
    }


def test_per_record_commit_keeps_earlier_records(client, db, matrix, monkeypatch) -> None:
    _fail_on_second_record(monkeypatch)
    with pytest.raises(RuntimeError):
        client.post(MATRIX_URL, json=_two_record_body(matrix))
    assert _grants(db, matrix["target"].id) == {"all_bins": True}


def test_atomic_batch_rolls_back_everything(client, db, settings, matrix, monkeypatch) -> None:
    monkeypatch.setattr(settings, "matrix_atomic_batch", True)
    _fail_on_second_record(monkeypatch)
    with pytest.raises(RuntimeError):
        client.post(MATRIX_URL, json=_two_record_body(matrix))
    assert _grants(db, matrix["target"].id) == {}


def test_get_matrix_lists_account_users_and_active_definitions(client, db, factory, matrix) -> None:
    target = matrix["target"]
    factory.user(factory.account("other"), "stranger@other.com")
    body = {
        "updates": [
            {
                "userId": target.id,
                "permissions": {"all_bins": True},
                "binsAssigned": [matrix["bin_b"].id, matrix["bin_a"].id],
                "teamsAssigned": [matrix["team"].id],
            }
        ]
    }
    assert client.post(MATRIX_URL, json=body).status_code == 200

    response = client.get(MATRIX_URL)
    assert response.status_code == 200
    payload = response.json()

    assert "stranger@other.com" not in [u["email"] for u in payload["users"]]
    ids = [u["id"] for u in payload["users"]]
    assert ids == sorted(ids)
    assert len(ids) == 4

    row = next(u for u in payload["users"] if u["id"] == target.id)
    assert row["firstname"] == "Agnes"
    assert row["permissions"] == {"all_bins": True}
    assert row["bins_assigned"] == sorted([matrix["bin_a"].id, matrix["bin_b"].id])
    assert row["teams_assigned"] == [matrix["team"].id]

    keys = [d["permission_key"] for d in payload["permissionDefinitions"]]
    assert keys == ["bins_assigned", "all_bins"]


def test_definitions_endpoint_orders_active_entries(client, matrix) -> None:
    response = client.get("/api/permissions/definitions")
    assert response.status_code == 200
    assert [(d["permission_key"], d["value_type"]) for d in response.json()] == [
        ("bins_assigned", "array"),
        ("all_bins", "boolean"),
    ]


def test_matrix_requires_all_users(client, tenant, matrix) -> None:
    login(client, "plain@example.com")
    assert client.get(MATRIX_URL).status_code == 403
    assert client.post(MATRIX_URL, json={"updates": []}).status_code == 403
