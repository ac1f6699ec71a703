from fastapi.testclient import TestClient

from gradtrack.api.deps import get_autofiller
from gradtrack.llm.autofill import ResearchAutofiller
from helpers import scripted_provider, text_reply


def _create(client: TestClient, **overrides) -> dict:
    payload = {"university_name": "ETH Zurich", "program_name": "M.Sc. Computer Science", "country": "Switzerland"}
    payload.update(overrides)
    response = client.post("/api/research", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_defaults_to_researching(client: TestClient) -> None:
    item = _create(client, ranking=7, tuition_fees="730 CHF / semester", website="")

    assert item["status"] == "Researching"
    assert item["ranking"] == 7
    assert item["website"] is None


def test_list_puts_shortlisted_first_then_ranking(client: TestClient) -> None:
    _create(client, university_name="Unranked")
    _create(client, university_name="Rank 30", ranking=30)
    _create(client, university_name="Rank 5", ranking=5)
    shortlisted = _create(client, university_name="Shortlisted", ranking=90)
    client.patch(f"/api/research/{shortlisted['id']}/status", json={"status": "Shortlisted"})

    rows = client.get("/api/research").json()

    assert [row["university_name"] for row in rows] == ["Shortlisted", "Rank 5", "Rank 30", "Unranked"]


def test_invalid_status_leaves_row_unchanged(client: TestClient) -> None:
    item = _create(client)

    response = client.patch(f"/api/research/{item['id']}/status", json={"status": "Maybe"})
    assert response.status_code == 400

    rows = client.get("/api/research").json()
    assert rows[0]["status"] == "Researching"


def test_update_and_filters(client: TestClient) -> None:
    item = _create(client)
    _create(client, university_name="TUM", country="Germany")

    updated = client.put(f"/api/research/{item['id']}", json={"notes": "Apply early", "status": "Applied"})
    assert updated.status_code == 200
    assert updated.json()["notes"] == "Apply early"

    applied = client.get("/api/research", params={"status": "Applied"}).json()
    assert [row["id"] for row in applied] == [item["id"]]

    germany = client.get("/api/research", params={"country": "Germany"}).json()
    assert [row["university_name"] for row in germany] == ["TUM"]

    nulled = client.put(f"/api/research/{item['id']}", json={"country": None})
    assert nulled.status_code == 400


def test_stats_counts(client: TestClient) -> None:
    _create(client)
    item = _create(client, university_name="TUM", country="Germany")
    client.patch(f"/api/research/{item['id']}/status", json={"status": "Shortlisted"})

    stats = client.get("/api/research/stats").json()

    assert stats == {"total": 2, "shortlisted": 1, "applied": 0, "germany": 1, "switzerland": 1}


def test_delete_missing_item_returns_404(client: TestClient) -> None:
    item = _create(client)

    assert client.delete(f"/api/research/{item['id']}").json()["deleted"]["id"] == item["id"]
    response = client.delete(f"/api/research/{item['id']}")
    assert response.status_code == 404
    assert response.json()["error"] == "Item not found"


def test_autofill_uses_model_json(client: TestClient) -> None:
    provider, completions = scripted_provider(
        text_reply('```json\n{"website": "https://ethz.ch", "ranking": "7", "tuition_fees": "730 CHF"}\n```')
    )
    client.app.dependency_overrides[get_autofiller] = lambda: ResearchAutofiller(provider=provider)

    response = client.post(
        "/api/research/autofill",
        json={"university_name": "ETH Zurich", "program_name": "M.Sc. CS", "country": "Switzerland"},
    )

    assert response.status_code == 200
    assert response.json()["ranking"] == 7
    assert response.json()["website"] == "https://ethz.ch"
    assert "ETH Zurich" in completions.requests[0]["messages"][0]["content"]


def test_autofill_with_unparseable_output_is_a_server_error(client: TestClient) -> None:
    provider, _ = scripted_provider(text_reply("I do not know that program."))
    client.app.dependency_overrides[get_autofiller] = lambda: ResearchAutofiller(provider=provider)

    response = client.post("/api/research/autofill", json={"university_name": "X", "program_name": "Y"})

    assert response.status_code == 500
    assert "error" in response.json()


def test_autofill_without_api_key_is_a_server_error(client: TestClient) -> None:
    response = client.post("/api/research/autofill", json={"university_name": "X", "program_name": "Y"})

    assert response.status_code == 500
    assert response.json()["error"] == "AI assistant is not configured"
