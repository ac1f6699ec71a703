"""HTTP client for the GradTrack REST API.

Any object with a ``requests.Session``-style ``request`` method can be passed
as ``session``; tests hand in a FastAPI ``TestClient``.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from gradtrack.errors import GradTrackError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001/api"


class APIClientError(GradTrackError):
    default_message = "Request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None, details: Any = None):
        super().__init__(message, details)
        self.status_code = status_code


class GradTrackAPI:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, *, session: Any = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, *, params: dict[str, Any] | None = None, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            params = {key: value for key, value in params.items() if value not in (None, "")}
        try:
            response = self.session.request(method, url, params=params or None, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise APIClientError(str(exc)) from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("error") if isinstance(body, dict) else None
            raise APIClientError(
                message or f"HTTP {response.status_code}",
                status_code=response.status_code,
                details=body.get("details") if isinstance(body, dict) else None,
            )
        return response.json()

    # applications

    def list_applications(self, *, country: str | None = None, status: str | None = None, search: str | None = None) -> list[dict]:
        return self._request("GET", "/applications", params={"country": country, "status": status, "search": search})

    def get_application(self, application_id: int) -> dict:
        return self._request("GET", f"/applications/{application_id}")

    def create_application(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/applications", json=data)

    def update_application(self, application_id: int, data: dict[str, Any]) -> dict:
        return self._request("PUT", f"/applications/{application_id}", json=data)

    def delete_application(self, application_id: int) -> dict:
        return self._request("DELETE", f"/applications/{application_id}")

    def update_documents(self, application_id: int, documents: dict[str, bool]) -> dict:
        return self._request("PUT", f"/applications/{application_id}/documents", json=documents)

    def application_stats(self) -> dict:
        return self._request("GET", "/applications/stats/summary")

    def upcoming_deadlines(self, days: int = 30) -> list[dict]:
        return self._request("GET", "/applications/upcoming", params={"days": days})

    def export_applications(self) -> list[dict]:
        return self._request("GET", "/applications/export")

    # preparation

    def list_preparation(self, type: str | None = None) -> list[dict]:
        return self._request("GET", "/preparation", params={"type": type})

    def preparation_stats(self) -> list[dict]:
        return self._request("GET", "/preparation/stats")

    def create_preparation(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/preparation", json=data)

    def update_preparation(self, item_id: int, data: dict[str, Any]) -> dict:
        return self._request("PUT", f"/preparation/{item_id}", json=data)

    def toggle_preparation(self, item_id: int) -> dict:
        return self._request("PATCH", f"/preparation/{item_id}/toggle")

    def delete_preparation(self, item_id: int) -> dict:
        return self._request("DELETE", f"/preparation/{item_id}")

    # research

    def list_research(self, *, country: str | None = None, status: str | None = None) -> list[dict]:
        return self._request("GET", "/research", params={"country": country, "status": status})

    def research_stats(self) -> dict:
        return self._request("GET", "/research/stats")

    def create_research(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/research", json=data)

    def update_research(self, item_id: int, data: dict[str, Any]) -> dict:
        return self._request("PUT", f"/research/{item_id}", json=data)

    def update_research_status(self, item_id: int, status: str) -> dict:
        return self._request("PATCH", f"/research/{item_id}/status", json={"status": status})

    def delete_research(self, item_id: int) -> dict:
        return self._request("DELETE", f"/research/{item_id}")

    def autofill_research(self, university_name: str, program_name: str, country: str | None = None) -> dict:
        return self._request(
            "POST",
            "/research/autofill",
            json={"university_name": university_name, "program_name": program_name, "country": country},
        )

    # chat

    def chat(self, message: str, session_id: str = "default") -> dict:
        return self._request("POST", "/chat", json={"message": message, "session_id": session_id})

    def chat_history(self, *, limit: int = 50, session_id: str | None = None) -> list[dict]:
        return self._request("GET", "/chat/history", params={"limit": limit, "session_id": session_id})

    def clear_chat_history(self, session_id: str | None = None) -> dict:
        return self._request("DELETE", "/chat/history", params={"session_id": session_id})
