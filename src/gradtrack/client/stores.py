"""Per-resource state stores layered on :class:`GradTrackAPI`.

Each store owns the fetched list plus ``loading``/``error`` flags. Mutations
call the API first and only patch local state once the call succeeds, so a
failed request leaves the list untouched.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from gradtrack.client.api import APIClientError, GradTrackAPI
from gradtrack.types import COMPLETED_STATUSES, PREPARATION_TYPES, RESEARCH_STATUSES

logger = logging.getLogger(__name__)

_FAR_FUTURE = "9999-12-31"


def _replace(items: list[dict], updated: dict) -> list[dict]:
    return [updated if item["id"] == updated["id"] else item for item in items]


def _failed(exc: APIClientError, fallback: str) -> APIClientError:
    if exc.status_code is None:
        return APIClientError(fallback, details=exc.message)
    return exc


class _Store:
    def __init__(self, api: GradTrackAPI):
        self.api = api
        self.items: list[dict] = []
        self.loading = False
        self.error: str | None = None

    def _load(self, fetch, fallback: str) -> list[dict]:
        self.loading = True
        try:
            self.items = fetch()
            self.error = None
        except APIClientError as exc:
            self.error = exc.message or fallback
            logger.warning("%s: %s", fallback, exc.message)
        finally:
            self.loading = False
        return self.items


class ApplicationsStore(_Store):
    def __init__(self, api: GradTrackAPI):
        super().__init__(api)
        self.filters: dict[str, str] = {"search": "", "country": "", "status": ""}

    def fetch(self) -> list[dict]:
        return self._load(
            lambda: self.api.list_applications(
                country=self.filters["country"] or None,
                status=self.filters["status"] or None,
                search=self.filters["search"] or None,
            ),
            "Failed to fetch applications",
        )

    def update_filters(self, **filters: str) -> list[dict]:
        self.filters.update({key: value for key, value in filters.items() if key in self.filters})
        return self.fetch()

    def add(self, data: dict[str, Any]) -> dict:
        try:
            created = self.api.create_application(data)
        except APIClientError as exc:
            raise _failed(exc, "Failed to add application") from exc
        self.items = sorted([*self.items, created], key=lambda item: item["deadline"])
        return created

    def update(self, application_id: int, data: dict[str, Any]) -> dict:
        try:
            updated = self.api.update_application(application_id, data)
        except APIClientError as exc:
            raise _failed(exc, "Failed to update application") from exc
        self.items = _replace(self.items, updated)
        return updated

    def delete(self, application_id: int) -> None:
        try:
            self.api.delete_application(application_id)
        except APIClientError as exc:
            raise _failed(exc, "Failed to delete application") from exc
        self.items = [item for item in self.items if item["id"] != application_id]

    def update_documents(self, application_id: int, documents: dict[str, bool]) -> None:
        try:
            self.api.update_documents(application_id, documents)
        except APIClientError as exc:
            raise _failed(exc, "Failed to update documents") from exc
        self.items = [
            {**item, "documents": {**(item.get("documents") or {}), **documents}}
            if item["id"] == application_id
            else item
            for item in self.items
        ]

    def stats(self, today: date | None = None) -> dict[str, Any]:
        today_iso = (today or date.today()).isoformat()
        upcoming = sorted(
            (item for item in self.items if item["deadline"] >= today_iso),
            key=lambda item: item["deadline"],
        )
        return {
            "total": len(self.items),
            "completed": sum(1 for item in self.items if item["status"] in COMPLETED_STATUSES),
            "in_progress": sum(1 for item in self.items if item["status"] == "In Progress"),
            "next_deadline": upcoming[0] if upcoming else None,
        }


class PreparationStore(_Store):
    def fetch(self) -> list[dict]:
        return self._load(self.api.list_preparation, "Failed to fetch preparation items")

    def add(self, data: dict[str, Any]) -> dict:
        created = self.api.create_preparation(data)
        self.items = sorted(
            [*self.items, created],
            key=lambda item: item.get("target_date") or _FAR_FUTURE,
        )
        return created

    def update(self, item_id: int, data: dict[str, Any]) -> dict:
        updated = self.api.update_preparation(item_id, data)
        self.items = _replace(self.items, updated)
        return updated

    def toggle(self, item_id: int) -> dict:
        updated = self.api.toggle_preparation(item_id)
        self.items = _replace(self.items, updated)
        return updated

    def delete(self, item_id: int) -> None:
        self.api.delete_preparation(item_id)
        self.items = [item for item in self.items if item["id"] != item_id]

    def grouped(self) -> dict[str, list[dict]]:
        groups: dict[str, list[dict]] = {key: [] for key in PREPARATION_TYPES}
        for item in self.items:
            groups.setdefault(item["type"], []).append(item)
        return groups

    def stats(self) -> dict[str, dict[str, Any]]:
        result = {}
        for key, items in self.grouped().items():
            pending = [item for item in items if not item["completed"] and item.get("target_date")]
            result[key] = {
                "total": len(items),
                "completed": sum(1 for item in items if item["completed"]),
                "next_target": pending[0]["target_date"] if pending else None,
            }
        return result


class ResearchStore(_Store):
    def fetch(self, *, country: str | None = None, status: str | None = None) -> list[dict]:
        return self._load(
            lambda: self.api.list_research(country=country, status=status),
            "Failed to fetch research items",
        )

    def add(self, data: dict[str, Any]) -> dict:
        created = self.api.create_research(data)
        self.items = [created, *self.items]
        return created

    def update(self, item_id: int, data: dict[str, Any]) -> dict:
        updated = self.api.update_research(item_id, data)
        self.items = _replace(self.items, updated)
        return updated

    def update_status(self, item_id: int, status: str) -> dict:
        updated = self.api.update_research_status(item_id, status)
        self.items = _replace(self.items, updated)
        return updated

    def delete(self, item_id: int) -> None:
        self.api.delete_research(item_id)
        self.items = [item for item in self.items if item["id"] != item_id]

    def grouped(self) -> dict[str, list[dict]]:
        return {status: [item for item in self.items if item["status"] == status] for status in RESEARCH_STATUSES}

    def stats(self) -> dict[str, int]:
        grouped = self.grouped()
        return {
            "total": len(self.items),
            "shortlisted": len(grouped["Shortlisted"]),
            "germany": sum(1 for item in self.items if item["country"] == "Germany"),
            "switzerland": sum(1 for item in self.items if item["country"] == "Switzerland"),
        }
