"""Functions the chat assistant may call, and the dispatcher that runs them.

Every tool reuses a ``Repository`` method that also backs a REST endpoint.
Tools never raise: failures come back as ``{"error": ...}`` so the model can
react to them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gradtrack.api.schemas import (
    ApplicationCreateRequest,
    ApplicationResponse,
    ApplicationStatsResponse,
    DocumentsResponse,
    PreparationCreateRequest,
    PreparationResponse,
)
from gradtrack.db.repositories import Repository
from gradtrack.types import (
    APPLICATION_STATUSES,
    COUNTRIES,
    PREPARATION_TYPES,
    ApplicationStatus,
    Country,
)

logger = logging.getLogger(__name__)

NO_ARGUMENTS: dict[str, Any] = {"type": "object", "properties": {}, "required": []}

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "get_all_applications",
        "description": "Get all university applications with their documents and status",
        "parameters": NO_ARGUMENTS,
    },
    {
        "name": "search_applications",
        "description": "Search applications by university name, program, or country",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "country": {"type": "string", "enum": list(COUNTRIES), "description": "Filter by country"},
                "status": {"type": "string", "enum": list(APPLICATION_STATUSES)},
            },
        },
    },
    {
        "name": "add_application",
        "description": "Add a new university application",
        "parameters": {
            "type": "object",
            "properties": {
                "university_name": {"type": "string", "description": "Name of the university"},
                "program_name": {
                    "type": "string",
                    "description": "Name of the program (e.g., M.Sc. Computer Science)",
                },
                "country": {"type": "string", "enum": list(COUNTRIES)},
                "deadline": {"type": "string", "description": "Application deadline in YYYY-MM-DD format"},
                "notes": {"type": "string", "description": "Optional notes"},
            },
            "required": ["university_name", "program_name", "country", "deadline"],
        },
    },
    {
        "name": "update_application_status",
        "description": "Update the status of an application",
        "parameters": {
            "type": "object",
            "properties": {
                "application_id": {"type": "number", "description": "ID of the application"},
                "status": {"type": "string", "enum": list(APPLICATION_STATUSES)},
            },
            "required": ["application_id", "status"],
        },
    },
    {
        "name": "update_documents",
        "description": "Update document completion status for an application",
        "parameters": {
            "type": "object",
            "properties": {
                "application_id": {"type": "number"},
                "gre": {"type": "boolean"},
                "toefl_ielts": {"type": "boolean"},
                "lors": {"type": "boolean"},
                "sop": {"type": "boolean"},
                "transcript": {"type": "boolean"},
            },
            "required": ["application_id"],
        },
    },
    {
        "name": "get_dashboard_summary",
        "description": (
            "Get a summary of all applications including total count, completion rate, "
            "and upcoming deadlines"
        ),
        "parameters": NO_ARGUMENTS,
    },
    {
        "name": "get_upcoming_deadlines",
        "description": "Get applications with upcoming deadlines in the next N days",
        "parameters": {
            "type": "object",
            "properties": {
                "days": {"type": "number", "description": "Number of days to look ahead", "default": 30},
            },
        },
    },
    {
        "name": "get_preparation_status",
        "description": "Get status of preparation items (German course, GRE, IELTS)",
        "parameters": NO_ARGUMENTS,
    },
    {
        "name": "add_preparation_item",
        "description": "Add a new preparation tracking item",
        "parameters": {
            "type": "object",
            "properties": {
                "type": {"type": "string", "enum": list(PREPARATION_TYPES), "description": "Type of preparation"},
                "title": {"type": "string", "description": "Title of the milestone or goal"},
                "target_date": {"type": "string", "description": "Target date in YYYY-MM-DD format"},
                "notes": {"type": "string"},
            },
            "required": ["type", "title"],
        },
    },
]

TOOL_NAMES: tuple[str, ...] = tuple(item["name"] for item in TOOL_DEFINITIONS)


def openai_tool_schema() -> list[dict[str, Any]]:
    return [{"type": "function", "function": definition} for definition in TOOL_DEFINITIONS]


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SearchApplicationsArgs(ToolArguments):
    query: str | None = None
    country: Country | None = None
    status: ApplicationStatus | None = None


class UpdateStatusArgs(ToolArguments):
    application_id: int
    status: ApplicationStatus


class UpdateDocumentsArgs(ToolArguments):
    application_id: int
    gre: bool | None = None
    toefl_ielts: bool | None = None
    lors: bool | None = None
    sop: bool | None = None
    transcript: bool | None = None


class UpcomingDeadlinesArgs(ToolArguments):
    days: int = Field(default=30, ge=0, le=366)


class ToolBridge:
    def __init__(self, repo: Repository):
        self.repo = repo
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = {
            "get_all_applications": self.get_all_applications,
            "search_applications": self.search_applications,
            "add_application": self.add_application,
            "update_application_status": self.update_application_status,
            "update_documents": self.update_documents,
            "get_dashboard_summary": self.get_dashboard_summary,
            "get_upcoming_deadlines": self.get_upcoming_deadlines,
            "get_preparation_status": self.get_preparation_status,
            "add_preparation_item": self.add_preparation_item,
        }

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def execute(self, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        handler = self._handlers.get(name)
        if handler is None:
            return {"error": f"Unknown function: {name}"}

        try:
            return {"result": jsonable_encoder(handler(args or {}))}
        except ValidationError as exc:
            logger.info("Tool %s rejected arguments: %s", name, exc.errors(include_url=False))
            return {"error": f"Invalid arguments for {name}: {_describe(exc)}"}
        except Exception as exc:
            logger.exception("Tool %s failed", name)
            self.repo.session.rollback()
            return {"error": str(exc) or type(exc).__name__}

    def get_all_applications(self, args: dict[str, Any]) -> list[ApplicationResponse]:
        return [ApplicationResponse.model_validate(row) for row in self.repo.list_applications()]

    def search_applications(self, args: dict[str, Any]) -> list[ApplicationResponse]:
        params = SearchApplicationsArgs.model_validate(args)
        rows = self.repo.list_applications(country=params.country, status=params.status, search=params.query)
        return [ApplicationResponse.model_validate(row) for row in rows]

    def add_application(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = ApplicationCreateRequest.model_validate(args)
        application = self.repo.create_application(**payload.model_dump())
        return {"success": True, "application": ApplicationResponse.model_validate(application)}

    def update_application_status(self, args: dict[str, Any]) -> dict[str, Any]:
        params = UpdateStatusArgs.model_validate(args)
        application = self.repo.update_application(params.application_id, {"status": params.status})
        if not application:
            return {"success": False, "error": "Application not found"}
        return {"success": True, "application": ApplicationResponse.model_validate(application)}

    def update_documents(self, args: dict[str, Any]) -> dict[str, Any]:
        params = UpdateDocumentsArgs.model_validate(args)
        values = params.model_dump(exclude={"application_id"}, exclude_none=True)
        if not values:
            return {"success": False, "error": "No updates provided"}

        documents = self.repo.update_documents(params.application_id, values)
        if not documents:
            return {"success": False, "error": "Application not found"}
        return {"success": True, "documents": DocumentsResponse.model_validate(documents)}

    def get_dashboard_summary(self, args: dict[str, Any]) -> ApplicationStatsResponse:
        return ApplicationStatsResponse.model_validate(self.repo.application_stats(), from_attributes=True)

    def get_upcoming_deadlines(self, args: dict[str, Any]) -> list[dict[str, Any]]:
        params = UpcomingDeadlinesArgs.model_validate(args)
        today = date.today()
        return [
            {
                "id": row.id,
                "university_name": row.university_name,
                "program_name": row.program_name,
                "country": row.country,
                "deadline": row.deadline,
                "status": row.status,
                "days_left": (row.deadline - today).days,
            }
            for row in self.repo.upcoming_deadlines(days=params.days, today=today)
        ]

    def get_preparation_status(self, args: dict[str, Any]) -> list[PreparationResponse] | dict[str, str]:
        rows = self.repo.list_preparation()
        if not rows:
            return {"message": "No preparation items tracked yet. Add some using add_preparation_item."}
        return [PreparationResponse.model_validate(row) for row in rows]

    def add_preparation_item(self, args: dict[str, Any]) -> dict[str, Any]:
        payload = PreparationCreateRequest.model_validate(args)
        item = self.repo.create_preparation(**payload.model_dump())
        return {"success": True, "item": PreparationResponse.model_validate(item)}


def _describe(exc: ValidationError) -> str:
    parts = []
    for item in exc.errors(include_url=False):
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
