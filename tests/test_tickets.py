from __future__ import annotations

from app.models.activity_log import ActivityLog
from app.models.ticket import Ticket, TicketStatus
from app.services import activity_service
from conftest import login

NEW_TICKET = {"subject": "VPN keeps dropping", "content": "Disconnects every ten minutes."}


def test_create_ticket(client, factory, tenant) -> None:
    billing = factory.bin(tenant["account"], "Billing")
    login(client, "plain@example.com")
    response = client.post("/api/tickets", json={**NEW_TICKET, "priority": "high", "bin_id": billing.id})
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "open"
    assert body["priority"] == "high"
    assert body["bin_id"] == billing.id
    assert body["requester_id"] == tenant["plain"].id
    assert body["archived_at"] is None


def test_create_ticket_validates_input(client, factory, tenant) -> None:
    login(client, "plain@example.com")
    assert client.post("/api/tickets", json={"subject": "Hi", "content": "Too short subject"}).status_code == 400
    assert client.post("/api/tickets", json={**NEW_TICKET, "priority": "urgent"}).status_code == 400

    foreign_bin = factory.bin(factory.account("other"), "Foreign")
    response = client.post("/api/tickets", json={**NEW_TICKET, "bin_id": foreign_bin.id})
    assert response.status_code == 400
    assert response.json() == {"error": "Bin not found in this account"}


def test_list_tickets_is_account_scoped_newest_first(client, factory, tenant) -> None:
    account = tenant["account"]
    first = factory.ticket(account, subject="First ticket")
    second = factory.ticket(account, subject="Second ticket")
    factory.ticket(factory.account("other"), subject="Foreign ticket")

    login(client, "plain@example.com")
    ids = [t["id"] for t in client.get("/api/tickets").json()]
    assert ids == [second.id, first.id]


def test_get_ticket_of_other_account_is_not_found(client, factory, tenant) -> None:
    foreign = factory.ticket(factory.account("other"))
    login(client, "plain@example.com")
    response = client.get(f"/api/tickets/{foreign.id}")
    assert response.status_code == 404
    assert response.json() == {"error": "Ticket not found"}


def test_update_ticket(client, factory, tenant) -> None:
    ticket = factory.ticket(tenant["account"])
    login(client, "plain@example.com")
    response = client.put(
        f"/api/tickets/{ticket.id}",
        json={"status": "in_progress", "assignee_id": tenant["admin"].id},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_progress"
    assert body["assignee_id"] == tenant["admin"].id
    assert body["priority"] == "medium"


def test_update_ticket_rejects_foreign_assignee(client, factory, tenant) -> None:
    ticket = factory.ticket(tenant["account"])
    outsider = factory.user(factory.account("other"), "outsider@other.com")
    login(client, "plain@example.com")
    response = client.put(f"/api/tickets/{ticket.id}", json={"assignee_id": outsider.id})
    assert response.status_code == 400


def test_archive_ticket(client, factory, tenant) -> None:
    ticket = factory.ticket(tenant["account"])
    login(client, "plain@example.com")
    response = client.post(f"/api/tickets/{ticket.id}/archive")
    assert response.status_code == 200
    assert response.json()["status"] == "archived"
    assert response.json()["archived_at"] is not None


def test_transfer_ticket(client, db, factory, tenant) -> None:
    account = tenant["account"]
    billing = factory.bin(account, "Billing")
    hardware = factory.bin(account, "Hardware")
    ticket = factory.ticket(account, bin_obj=billing)

    login(client, "admin@example.com")
    response = client.post(
        f"/api/tickets/{ticket.id}/transfer",
        json={"toBinId": hardware.id, "reason": "Wrong queue"},
    )
    assert response.status_code == 200, response.text
    assert response.json() == {"success": True, "message": "Ticket transferred successfully"}

    db.expire_all()
    assert db.get(Ticket, ticket.id).bin_id == hardware.id
    entry = db.query(ActivityLog).filter(ActivityLog.action == activity_service.TRANSFER_TICKET).one()
    assert entry.user_id == tenant["admin"].id
    assert entry.details.endswith("Wrong queue")


def test_transfer_edge_cases(client, factory, tenant) -> None:
    account = tenant["account"]
    billing = factory.bin(account, "Billing")
    closed_bin = factory.bin(account, "Old", is_active=False)
    foreign_bin = factory.bin(factory.account("other"), "Foreign")
    ticket = factory.ticket(account, bin_obj=billing)
    url = f"/api/tickets/{ticket.id}/transfer"

    login(client, "admin@example.com")
    response = client.post(url, json={"toBinId": billing.id})
    assert response.status_code == 400
    assert response.json() == {"error": "Ticket is already in this bin"}

    assert client.post(url, json={"toBinId": closed_bin.id}).status_code == 400
    assert client.post(url, json={"toBinId": foreign_bin.id}).status_code == 404
    assert client.post("/api/tickets/9999/transfer", json={"toBinId": billing.id}).status_code == 404


def test_transfer_requires_permission(client, factory, tenant) -> None:
    billing = factory.bin(tenant["account"], "Billing")
    ticket = factory.ticket(tenant["account"])
    login(client, "plain@example.com")
    response = client.post(f"/api/tickets/{ticket.id}/transfer", json={"toBinId": billing.id})
    assert response.status_code == 403
    assert response.json()["message"] == "Required permission: transfer_tickets"


def test_transfer_respects_bin_scope_when_enforced(client, db, factory, tenant, settings, monkeypatch) -> None:
    account = tenant["account"]
    source = factory.bin(account, "Source")
    allowed = factory.bin(account, "Allowed")
    forbidden = factory.bin(account, "Forbidden")
    mover = factory.role("mover", ["transfer_tickets"])
    factory.user(account, "mover@example.com", roles=[(mover, allowed)])
    ticket = factory.ticket(account, bin_obj=source)
    url = f"/api/tickets/{ticket.id}/transfer"

    monkeypatch.setattr(settings, "enforce_bin_scope", True)
    login(client, "mover@example.com")
    response = client.post(url, json={"toBinId": forbidden.id})
    assert response.status_code == 404
    assert response.json() == {"error": "Bin not found"}

    assert client.post(url, json={"toBinId": allowed.id}).status_code == 200
    db.expire_all()
    assert db.get(Ticket, ticket.id).bin_id == allowed.id


def test_archived_tickets_can_still_be_read(client, factory, tenant) -> None:
    ticket = factory.ticket(tenant["account"], status=TicketStatus.ARCHIVED)
    login(client, "plain@example.com")
    assert client.get(f"/api/tickets/{ticket.id}").json()["status"] == "archived"
