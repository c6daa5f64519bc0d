from __future__ import annotations

from conftest import login

KB_URL = "/api/knowledge-base"
ARTICLE = {
    "title": "Resetting the VPN client",
    "content": "Quit the client, clear the profile cache, then sign in again.",
    "category": "Network",
}


def test_create_and_read_item(client, factory, tenant) -> None:
    ticket = factory.ticket(tenant["account"])
    login(client, "plain@example.com")

    response = client.post(KB_URL, json={**ARTICLE, "source_ticket_id": ticket.id})
    assert response.status_code == 201, response.text
    item = response.json()
    assert item["author_id"] == tenant["plain"].id
    assert item["source_ticket_id"] == ticket.id

    assert client.get(f"{KB_URL}/{item['id']}").json()["title"] == ARTICLE["title"]
    assert [i["id"] for i in client.get(KB_URL).json()] == [item["id"]]


def test_default_category(client, tenant) -> None:
    login(client, "plain@example.com")
    body = {k: v for k, v in ARTICLE.items() if k != "category"}
    assert client.post(KB_URL, json=body).json()["category"] == "General"


def test_item_validation(client, factory, tenant) -> None:
    login(client, "plain@example.com")
    assert client.post(KB_URL, json={**ARTICLE, "title": "VPN"}).status_code == 400
    assert client.post(KB_URL, json={**ARTICLE, "content": "short"}).status_code == 400

    foreign_ticket = factory.ticket(factory.account("other"))
    response = client.post(KB_URL, json={**ARTICLE, "source_ticket_id": foreign_ticket.id})
    assert response.status_code == 400
    assert response.json() == {"error": "Source ticket not found in this account"}


def test_delete_item(client, tenant) -> None:
    login(client, "plain@example.com")
    item_id = client.post(KB_URL, json=ARTICLE).json()["id"]
    assert client.delete(f"{KB_URL}/{item_id}").status_code == 200
    response = client.get(f"{KB_URL}/{item_id}")
    assert response.status_code == 404
    assert response.json() == {"error": "KB item not found"}


def test_items_are_account_scoped(client, factory, tenant) -> None:
    login(client, "plain@example.com")
    item_id = client.post(KB_URL, json=ARTICLE).json()["id"]

    factory.user(factory.account("other"), "outsider@other.com")
    client.cookies.clear()
    login(client, "outsider@other.com")
    assert client.get(KB_URL).json() == []
    assert client.get(f"{KB_URL}/{item_id}").status_code == 404
    assert client.delete(f"{KB_URL}/{item_id}").status_code == 404
