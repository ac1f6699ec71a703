from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gradtrack.client.api import APIClientError, GradTrackAPI
from helpers import days_from_today


@pytest.fixture
def api(client: TestClient) -> GradTrackAPI:
    return GradTrackAPI("http://testserver/api", session=client)


def test_client_round_trips_applications(api: GradTrackAPI) -> None:
    created = api.create_application(
        {
            "university_name": "KIT",
            "program_name": "M.Sc. Informatics",
            "country": "Germany",
            "deadline": days_from_today(60),
        }
    )

    assert api.get_application(created["id"])["university_name"] == "KIT"
    assert [row["id"] for row in api.list_applications(country="Germany", status=None)] == [created["id"]]
    assert api.update_documents(created["id"], {"gre": True})["gre"] is True
    assert api.application_stats()["total_applications"] == 1
    assert api.delete_application(created["id"]) == {"message": "Application deleted successfully"}


def test_client_surfaces_api_error_message(api: GradTrackAPI) -> None:
    with pytest.raises(APIClientError) as excinfo:
        api.get_application(404)

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Application not found"


def test_client_validation_error_details(api: GradTrackAPI) -> None:
    with pytest.raises(APIClientError) as excinfo:
        api.create_preparation({"type": "gre"})

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Missing required fields"
    assert excinfo.value.details


def test_client_preparation_and_research(api: GradTrackAPI) -> None:
    item = api.create_preparation({"type": "german", "title": "A2 exam"})
    assert api.toggle_preparation(item["id"])["completed"] is True
    assert api.list_preparation("german")[0]["completed"] is True

    research = api.create_research({"university_name": "ETH", "program_name": "CS", "country": "Switzerland"})
    assert api.update_research_status(research["id"], "Applied")["status"] == "Applied"
    assert api.research_stats()["applied"] == 1
