from fastapi.testclient import TestClient

from helpers import days_from_today


def _create(client: TestClient, **overrides) -> dict:
    payload = {"type": "gre", "title": "Quant practice set"}
    payload.update(overrides)
    response = client.post("/api/preparation", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_filter_by_type(client: TestClient) -> None:
    _create(client, type="german", title="Goethe B1")
    _create(client, type="gre")

    rows = client.get("/api/preparation", params={"type": "german"}).json()

    assert [row["title"] for row in rows] == ["Goethe B1"]
    assert rows[0]["completed"] is False


def test_create_rejects_unknown_type(client: TestClient) -> None:
    response = client.post("/api/preparation", json={"type": "toefl", "title": "x"})
    assert response.status_code == 400


def test_list_orders_undated_items_last(client: TestClient) -> None:
    _create(client, title="No date")
    _create(client, title="Later", target_date=days_from_today(40))
    _create(client, title="Sooner", target_date=days_from_today(10))

    rows = client.get("/api/preparation").json()
    assert [row["title"] for row in rows] == ["Sooner", "Later", "No date"]


def test_toggle_twice_restores_value(client: TestClient) -> None:
    item = _create(client)

    first = client.patch(f"/api/preparation/{item['id']}/toggle").json()
    second = client.patch(f"/api/preparation/{item['id']}/toggle").json()

    assert first["completed"] is True
    assert second["completed"] is False


def test_update_applies_sent_fields_and_rejects_empty_body(client: TestClient) -> None:
    item = _create(client, notes="old")

    updated = client.put(f"/api/preparation/{item['id']}", json={"completed": True, "notes": None})
    assert updated.status_code == 200
    assert updated.json()["completed"] is True
    assert updated.json()["notes"] is None

    empty = client.put(f"/api/preparation/{item['id']}", json={})
    assert empty.status_code == 400
    assert empty.json()["error"] == "No updates provided"

    nulled = client.put(f"/api/preparation/{item['id']}", json={"title": None})
    assert nulled.status_code == 400


def test_stats_per_type(client: TestClient) -> None:
    _create(client, title="Verbal", target_date=days_from_today(20))
    done = _create(client, title="Quant", target_date=days_from_today(5))
    client.patch(f"/api/preparation/{done['id']}/toggle")

    stats = {row["type"]: row for row in client.get("/api/preparation/stats").json()}

    assert stats["gre"]["total"] == 2
    assert stats["gre"]["completed"] == 1
    assert stats["gre"]["next_target"] == days_from_today(20)


def test_delete_returns_deleted_item(client: TestClient) -> None:
    item = _create(client)

    response = client.delete(f"/api/preparation/{item['id']}")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["deleted"]["id"] == item["id"]

    assert client.delete(f"/api/preparation/{item['id']}").status_code == 404
    assert client.patch(f"/api/preparation/{item['id']}/toggle").json()["error"] == "Item not found"
