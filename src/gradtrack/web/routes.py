from __future__ import annotations

from datetime import datetime
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from gradtrack.api.deps import get_repository
from gradtrack.api.schemas import (
    ApplicationCreateRequest,
    PreparationCreateRequest,
    ResearchCreateRequest,
    ResearchStatusRequest,
)
from gradtrack.core.dashboard import COUNTDOWN_WINDOW_DAYS, deadline_countdown, kpi_cards
from gradtrack.db.repositories import Repository
from gradtrack.types import (
    APPLICATION_STATUSES,
    COUNTRIES,
    DOCUMENT_FLAGS,
    PREPARATION_TYPES,
    RESEARCH_STATUSES,
)

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

TABS = [
    {"key": "research", "label": "Research", "description": "Find universities & programs"},
    {"key": "prepare", "label": "Prepare", "description": "Track German, GRE & IELTS"},
    {"key": "apply", "label": "Apply", "description": "Manage applications"},
]
PREPARATION_LABELS = {"german": "German", "gre": "GRE", "ielts": "IELTS"}


def _redirect(tab: str, error: str | None = None) -> RedirectResponse:
    query = {"tab": tab}
    if error:
        query["error"] = error
    return RedirectResponse(url=f"/?{urlencode(query)}", status_code=303)


def _first_error(exc: ValidationError) -> str:
    item = exc.errors(include_url=False)[0]
    field = ".".join(str(part) for part in item.get("loc", ())) or "form"
    return f"{field}: {item.get('msg', 'invalid value')}"


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    tab: str = "research",
    country: str = "",
    status: str = "",
    search: str = "",
    error: str = "",
    repo: Repository = Depends(get_repository),
) -> HTMLResponse:
    if tab not in {item["key"] for item in TABS}:
        tab = "research"

    now = datetime.now()
    stats = repo.application_stats(now.date())
    upcoming = [
        {"application": row, "countdown": deadline_countdown(row.deadline, now)}
        for row in repo.upcoming_deadlines(days=COUNTDOWN_WINDOW_DAYS, today=now.date())
    ]

    preparation = repo.list_preparation()
    grouped_preparation = {key: [item for item in preparation if item.type == key] for key in PREPARATION_TYPES}

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "tabs": TABS,
            "active_tab": tab,
            "error": error,
            "filters": {"country": country, "status": status, "search": search},
            "applications": repo.list_applications(
                country=country if country in COUNTRIES else None,
                status=status if status in APPLICATION_STATUSES else None,
                search=search or None,
            ),
            "kpis": kpi_cards(stats, now.date()),
            "upcoming": upcoming,
            "preparation": grouped_preparation,
            "preparation_stats": {row["type"]: row for row in repo.preparation_stats(now.date())},
            "preparation_labels": PREPARATION_LABELS,
            "research": repo.list_research(),
            "research_stats": repo.research_stats(),
            "countries": COUNTRIES,
            "application_statuses": APPLICATION_STATUSES,
            "research_statuses": RESEARCH_STATUSES,
            "document_flags": DOCUMENT_FLAGS,
        },
    )


@router.post("/web/applications")
def create_application(
    university_name: str = Form(""),
    program_name: str = Form(""),
    country: str = Form(""),
    deadline: str = Form(""),
    status: str = Form("Not Started"),
    notes: str = Form(""),
    repo: Repository = Depends(get_repository),
):
    try:
        payload = ApplicationCreateRequest(
            university_name=university_name.strip(),
            program_name=program_name.strip(),
            country=country,
            deadline=deadline,
            status=status,
            notes=_blank_to_none(notes),
        )
    except ValidationError as exc:
        return _redirect("apply", _first_error(exc))
    repo.create_application(**payload.model_dump())
    return _redirect("apply")


@router.post("/web/applications/{application_id}/status")
def update_application_status(
    application_id: int,
    status: str = Form(...),
    repo: Repository = Depends(get_repository),
):
    if status not in APPLICATION_STATUSES:
        return _redirect("apply", f"Unknown status '{status}'")
    if not repo.update_application(application_id, {"status": status}):
        return _redirect("apply", "Application not found")
    return _redirect("apply")


@router.post("/web/applications/{application_id}/documents/{flag}")
def toggle_document(application_id: int, flag: str, repo: Repository = Depends(get_repository)):
    application = repo.get_application(application_id)
    if flag not in DOCUMENT_FLAGS or not application or not application.documents:
        return _redirect("apply", "Document not found")
    current = bool(getattr(application.documents, flag))
    repo.update_documents(application_id, {flag: not current})
    return _redirect("apply")


@router.post("/web/applications/{application_id}/delete")
def delete_application(application_id: int, repo: Repository = Depends(get_repository)):
    if not repo.delete_application(application_id):
        return _redirect("apply", "Application not found")
    return _redirect("apply")


@router.post("/web/preparation")
def create_preparation(
    type: str = Form(""),
    title: str = Form(""),
    target_date: str = Form(""),
    notes: str = Form(""),
    repo: Repository = Depends(get_repository),
):
    try:
        payload = PreparationCreateRequest(
            type=type,
            title=title.strip(),
            target_date=_blank_to_none(target_date),
            notes=_blank_to_none(notes),
        )
    except ValidationError as exc:
        return _redirect("prepare", _first_error(exc))
    repo.create_preparation(**payload.model_dump())
    return _redirect("prepare")


@router.post("/web/preparation/{item_id}/toggle")
def toggle_preparation(item_id: int, repo: Repository = Depends(get_repository)):
    if not repo.toggle_preparation(item_id):
        return _redirect("prepare", "Item not found")
    return _redirect("prepare")


@router.post("/web/preparation/{item_id}/delete")
def delete_preparation(item_id: int, repo: Repository = Depends(get_repository)):
    if not repo.delete_preparation(item_id):
        return _redirect("prepare", "Item not found")
    return _redirect("prepare")


@router.post("/web/research")
def create_research(
    university_name: str = Form(""),
    program_name: str = Form(""),
    country: str = Form(""),
    website: str = Form(""),
    ranking: str = Form(""),
    tuition_fees: str = Form(""),
    requirements: str = Form(""),
    notes: str = Form(""),
    repo: Repository = Depends(get_repository),
):
    try:
        payload = ResearchCreateRequest(
            university_name=university_name.strip(),
            program_name=program_name.strip(),
            country=country,
            website=_blank_to_none(website),
            ranking=_blank_to_none(ranking),
            tuition_fees=_blank_to_none(tuition_fees),
            requirements=_blank_to_none(requirements),
            notes=_blank_to_none(notes),
        )
    except ValidationError as exc:
        return _redirect("research", _first_error(exc))
    repo.create_research(payload.model_dump())
    return _redirect("research")


@router.post("/web/research/{item_id}/status")
def update_research_status(
    item_id: int,
    status: str = Form(...),
    repo: Repository = Depends(get_repository),
):
    try:
        payload = ResearchStatusRequest(status=status)
    except ValidationError as exc:
        return _redirect("research", _first_error(exc))
    if not repo.update_research(item_id, {"status": payload.status}):
        return _redirect("research", "Item not found")
    return _redirect("research")


@router.post("/web/research/{item_id}/delete")
def delete_research(item_id: int, repo: Repository = Depends(get_repository)):
    if not repo.delete_research(item_id):
        return _redirect("research", "Item not found")
    return _redirect("research")
