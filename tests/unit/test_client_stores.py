from __future__ import annotations

from typing import Any

import pytest

from gradtrack.client.api import APIClientError
from gradtrack.client.stores import ApplicationsStore, PreparationStore, ResearchStore


class FakeAPI:
    """In-memory stand-in that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: APIClientError | None = None
        self.next_id = 100

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with:
            raise self.fail_with

    def list_applications(self, **filters: Any) -> list[dict]:
        self._call("list_applications", filters)
        return [
            {"id": 1, "deadline": "2026-12-01", "status": "In Progress", "documents": {"gre": False}},
            {"id": 2, "deadline": "2027-02-01", "status": "Submitted", "documents": {"gre": True}},
        ]

    def create_application(self, data: dict) -> dict:
        self._call("create_application", data)
        self.next_id += 1
        return {"id": self.next_id, "status": "Not Started", "documents": {}, **data}

    def update_documents(self, application_id: int, documents: dict) -> dict:
        self._call("update_documents", application_id, documents)
        return {"application_id": application_id, **documents}

    def delete_application(self, application_id: int) -> dict:
        self._call("delete_application", application_id)
        return {"message": "Application deleted successfully"}

    def list_preparation(self) -> list[dict]:
        self._call("list_preparation")
        return [
            {"id": 1, "type": "gre", "title": "Verbal", "target_date": "2026-11-01", "completed": True},
            {"id": 2, "type": "gre", "title": "Quant", "target_date": "2026-11-20", "completed": False},
            {"id": 3, "type": "german", "title": "B1", "target_date": None, "completed": False},
        ]

    def toggle_preparation(self, item_id: int) -> dict:
        self._call("toggle_preparation", item_id)
        return {"id": item_id, "type": "gre", "title": "Quant", "target_date": "2026-11-20", "completed": True}

    def create_preparation(self, data: dict) -> dict:
        self._call("create_preparation", data)
        self.next_id += 1
        return {"id": self.next_id, "completed": False, "target_date": None, **data}

    def list_research(self, **filters: Any) -> list[dict]:
        self._call("list_research", filters)
        return [{"id": 1, "status": "Researching", "country": "Germany"}]

    def create_research(self, data: dict) -> dict:
        self._call("create_research", data)
        self.next_id += 1
        return {"id": self.next_id, "status": "Researching", **data}

    def update_research_status(self, item_id: int, status: str) -> dict:
        self._call("update_research_status", item_id, status)
        return {"id": item_id, "status": status, "country": "Germany"}


def test_applications_store_fetch_sets_items_and_flags() -> None:
    store = ApplicationsStore(FakeAPI())
    store.fetch()

    assert [item["id"] for item in store.items] == [1, 2]
    assert store.loading is False
    assert store.error is None


def test_applications_store_fetch_failure_keeps_error() -> None:
    api = FakeAPI()
    api.fail_with = APIClientError("connection refused")
    store = ApplicationsStore(api)

    store.fetch()

    assert store.items == []
    assert store.error == "connection refused"
    assert store.loading is False


def test_applications_store_filters_are_forwarded() -> None:
    api = FakeAPI()
    store = ApplicationsStore(api)

    store.update_filters(country="Germany", search="tum", ignored="x")

    assert api.calls[-1] == ("list_applications", ({"country": "Germany", "status": None, "search": "tum"},))


def test_applications_store_add_keeps_deadline_order() -> None:
    store = ApplicationsStore(FakeAPI())
    store.fetch()

    store.add({"university_name": "ETH", "deadline": "2027-01-10"})

    assert [item["deadline"] for item in store.items] == ["2026-12-01", "2027-01-10", "2027-02-01"]


def test_applications_store_merges_documents_locally() -> None:
    store = ApplicationsStore(FakeAPI())
    store.fetch()

    store.update_documents(1, {"sop": True})

    assert store.items[0]["documents"] == {"gre": False, "sop": True}


def test_applications_store_failed_mutation_leaves_state_alone() -> None:
    api = FakeAPI()
    store = ApplicationsStore(api)
    store.fetch()
    api.fail_with = APIClientError("Application not found", status_code=404)

    with pytest.raises(APIClientError, match="Application not found"):
        store.delete(1)
    assert len(store.items) == 2


def test_applications_store_network_failure_uses_fallback_message() -> None:
    api = FakeAPI()
    store = ApplicationsStore(api)
    api.fail_with = APIClientError("connection refused")

    with pytest.raises(APIClientError, match="Failed to add application"):
        store.add({"deadline": "2027-01-01"})


def test_applications_store_stats() -> None:
    store = ApplicationsStore(FakeAPI())
    store.fetch()

    stats = store.stats()

    assert stats["total"] == 2
    assert stats["completed"] == 1
    assert stats["in_progress"] == 1


def test_preparation_store_groups_and_stats() -> None:
    store = PreparationStore(FakeAPI())
    store.fetch()

    grouped = store.grouped()
    stats = store.stats()

    assert set(grouped) == {"german", "gre", "ielts"}
    assert [item["title"] for item in grouped["gre"]] == ["Verbal", "Quant"]
    assert stats["gre"] == {"total": 2, "completed": 1, "next_target": "2026-11-20"}
    assert stats["german"] == {"total": 1, "completed": 0, "next_target": None}
    assert stats["ielts"] == {"total": 0, "completed": 0, "next_target": None}


def test_preparation_store_toggle_replaces_item() -> None:
    store = PreparationStore(FakeAPI())
    store.fetch()

    store.toggle(2)

    assert store.items[1]["completed"] is True


def test_preparation_store_add_sorts_undated_last() -> None:
    store = PreparationStore(FakeAPI())
    store.fetch()

    store.add({"type": "ielts", "title": "Mock test", "target_date": "2026-10-30"})

    assert [item["title"] for item in store.items] == ["Mock test", "Verbal", "Quant", "B1"]


def test_research_store_prepends_and_moves_status() -> None:
    store = ResearchStore(FakeAPI())
    store.fetch()

    created = store.add({"university_name": "ETH", "country": "Switzerland"})
    store.update_status(1, "Shortlisted")

    assert store.items[0]["id"] == created["id"]
    assert store.stats() == {"total": 2, "shortlisted": 1, "germany": 1, "switzerland": 1}
    assert [item["id"] for item in store.grouped()["Shortlisted"]] == [1]
