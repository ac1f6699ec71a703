from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

import typer
import uvicorn
from pydantic import ValidationError

from gradtrack.api.app import create_app
from gradtrack.api.schemas import (
    ApplicationCreateRequest,
    ApplicationResponse,
    ApplicationStatsResponse,
    PreparationCreateRequest,
    PreparationResponse,
    PreparationStatsResponse,
    ResearchCreateRequest,
    ResearchResponse,
    ResearchStatsResponse,
)
from gradtrack.config import get_settings
from gradtrack.core.dashboard import deadline_countdown
from gradtrack.core.sessions import ChatSessionStore
from gradtrack.db.init import init_database
from gradtrack.db.repositories import Repository
from gradtrack.db.session import SessionLocal
from gradtrack.errors import GradTrackError
from gradtrack.llm.agent import ChatAgent
from gradtrack.llm.providers import build_provider
from gradtrack.llm.tools import ToolBridge
from gradtrack.logging_config import configure_logging
from gradtrack.types import RESEARCH_STATUSES

app = typer.Typer(help="GradTrack CLI")
apps_app = typer.Typer(help="Manage university applications")
prep_app = typer.Typer(help="Track German, GRE and IELTS preparation")
research_app = typer.Typer(help="Research universities and programs")

app.add_typer(apps_app, name="apps")
app.add_typer(prep_app, name="prep")
app.add_typer(research_app, name="research")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _validated(model: type, **values: Any) -> Any:
    try:
        return model(**values)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("init")
def init_cmd() -> None:
    """Create the database tables if they do not exist."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)


@app.command("chat")
def chat(
    message: list[str] = typer.Argument(None, help="Send a single message and exit"),
    session_id: str = typer.Option("cli", "--session-id"),
) -> None:
    """Talk to the application assistant. Without a message, starts an interactive loop."""
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    store = ChatSessionStore.from_settings(settings)

    try:
        provider = build_provider(settings)
    except GradTrackError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(code=1) from exc

    def _turn(text: str) -> str:
        with SessionLocal() as db:
            repo = Repository(db)
            agent = ChatAgent(provider=provider, tools=ToolBridge(repo), settings=settings)
            result = agent.chat(text, store.get(session_id))
            store.set(session_id, result.history)
            repo.append_chat_message(role="user", content=text, session_id=session_id)
            repo.append_chat_message(role="assistant", content=result.message, session_id=session_id)
            return result.message

    if message:
        typer.echo(_turn(" ".join(message)))
        return

    typer.echo("Type 'exit' to quit.")
    while True:
        text = typer.prompt("you").strip()
        if text.lower() in {"exit", "quit"}:
            break
        if not text:
            continue
        try:
            typer.echo(f"assistant: {_turn(text)}")
        except GradTrackError as exc:
            typer.echo(f"error: {exc.message}", err=True)


# applications


@apps_app.command("list")
def apps_list(
    country: str | None = typer.Option(None, "--country"),
    status: str | None = typer.Option(None, "--status"),
    search: str | None = typer.Option(None, "--search"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_applications(country=country, status=status, search=search)
        _echo([ApplicationResponse.model_validate(row).model_dump(mode="json") for row in rows])


@apps_app.command("add")
def apps_add(
    university: str = typer.Option(..., "--university"),
    program: str = typer.Option(..., "--program"),
    country: str = typer.Option(..., "--country"),
    deadline: str = typer.Option(..., "--deadline", help="YYYY-MM-DD"),
    status: str = typer.Option("Not Started", "--status"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    payload = _validated(
        ApplicationCreateRequest,
        university_name=university,
        program_name=program,
        country=country,
        deadline=deadline,
        status=status,
        notes=notes,
    )
    with SessionLocal() as db:
        row = Repository(db).create_application(**payload.model_dump())
        _echo(ApplicationResponse.model_validate(row).model_dump(mode="json"))


@apps_app.command("stats")
def apps_stats() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        stats = Repository(db).application_stats()
        _echo(ApplicationStatsResponse.model_validate(stats, from_attributes=True).model_dump(mode="json"))


@apps_app.command("export")
def apps_export(output: Path | None = typer.Option(None, "--output", "-o")) -> None:
    """Write every application with its document checklist as JSON."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_applications()
        data = [ApplicationResponse.model_validate(row).model_dump(mode="json") for row in rows]

    if output is None:
        _echo(data)
        return
    output.write_text(json.dumps(data, indent=2), encoding="utf-8")
    _echo({"path": str(output), "count": len(data)})


@apps_app.command("deadlines")
def apps_deadlines(days: int = typer.Option(30, "--days", min=0)) -> None:
    configure_logging()
    ensure_initialized()
    now = datetime.now()
    with SessionLocal() as db:
        rows = Repository(db).upcoming_deadlines(days=days, today=now.date())
        _echo(
            [
                {
                    "id": row.id,
                    "university_name": row.university_name,
                    "program_name": row.program_name,
                    "deadline": row.deadline.isoformat(),
                    "status": row.status,
                    "countdown": deadline_countdown(row.deadline, now).text,
                }
                for row in rows
            ]
        )


# preparation


@prep_app.command("list")
def prep_list(type: str | None = typer.Option(None, "--type")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        items = [PreparationResponse.model_validate(row).model_dump(mode="json") for row in repo.list_preparation(type=type)]
        stats = [PreparationStatsResponse.model_validate(row).model_dump(mode="json") for row in repo.preparation_stats(date.today())]
        _echo({"items": items, "stats": stats})


@prep_app.command("add")
def prep_add(
    type: str = typer.Option(..., "--type", help="german, gre or ielts"),
    title: str = typer.Option(..., "--title"),
    target_date: str | None = typer.Option(None, "--target-date", help="YYYY-MM-DD"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    payload = _validated(PreparationCreateRequest, type=type, title=title, target_date=target_date, notes=notes)
    with SessionLocal() as db:
        row = Repository(db).create_preparation(**payload.model_dump())
        _echo(PreparationResponse.model_validate(row).model_dump(mode="json"))


@prep_app.command("toggle")
def prep_toggle(item_id: int = typer.Argument(...)) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        row = Repository(db).toggle_preparation(item_id)
        if not row:
            raise typer.BadParameter(f"preparation item {item_id} not found")
        _echo(PreparationResponse.model_validate(row).model_dump(mode="json"))


# research


@research_app.command("list")
def research_list(
    country: str | None = typer.Option(None, "--country"),
    status: str | None = typer.Option(None, "--status"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        items = [ResearchResponse.model_validate(row).model_dump(mode="json") for row in repo.list_research(country=country, status=status)]
        stats = ResearchStatsResponse.model_validate(repo.research_stats()).model_dump()
        _echo({"items": items, "stats": stats})


@research_app.command("add")
def research_add(
    university: str = typer.Option(..., "--university"),
    program: str = typer.Option(..., "--program"),
    country: str = typer.Option(..., "--country"),
    website: str | None = typer.Option(None, "--website"),
    ranking: int | None = typer.Option(None, "--ranking"),
    tuition_fees: str | None = typer.Option(None, "--tuition-fees"),
    requirements: str | None = typer.Option(None, "--requirements"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    payload = _validated(
        ResearchCreateRequest,
        university_name=university,
        program_name=program,
        country=country,
        website=website,
        ranking=ranking,
        tuition_fees=tuition_fees,
        requirements=requirements,
        notes=notes,
    )
    with SessionLocal() as db:
        row = Repository(db).create_research(payload.model_dump())
        _echo(ResearchResponse.model_validate(row).model_dump(mode="json"))


@research_app.command("status")
def research_status(
    item_id: int = typer.Argument(...),
    status: str = typer.Argument(..., help=" | ".join(RESEARCH_STATUSES)),
) -> None:
    configure_logging()
    ensure_initialized()
    if status not in RESEARCH_STATUSES:
        raise typer.BadParameter(f"status must be one of: {', '.join(RESEARCH_STATUSES)}")
    with SessionLocal() as db:
        row = Repository(db).update_research(item_id, {"status": status})
        if not row:
            raise typer.BadParameter(f"research item {item_id} not found")
        _echo(ResearchResponse.model_validate(row).model_dump(mode="json"))

