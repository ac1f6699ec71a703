from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from sqlalchemy import and_, case, delete, func, or_, select
from sqlalchemy.orm import Session

from gradtrack.db.models import (
    Application,
    ApplicationDocuments,
    ChatMessage,
    PreparationItem,
    ResearchItem,
)
from gradtrack.types import COMPLETED_STATUSES, DOCUMENT_FLAGS


def _as_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _count_where(condition: Any) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def _patch(self, obj: Any, values: dict[str, Any]) -> Any:
        for field, value in values.items():
            setattr(obj, field, value)
        return self._save(obj)

    def _remove(self, obj: Any) -> Any:
        self.session.delete(obj)
        self.session.commit()
        return obj

    # applications

    def list_applications(
        self,
        *,
        country: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[Application]:
        statement = select(Application)
        if country:
            statement = statement.where(Application.country == country)
        if status:
            statement = statement.where(Application.status == status)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(
                    Application.university_name.ilike(pattern),
                    Application.program_name.ilike(pattern),
                )
            )
        statement = statement.order_by(Application.deadline.asc(), Application.id.asc())
        return list(self.session.scalars(statement).unique().all())

    def get_application(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def create_application(
        self,
        *,
        university_name: str,
        program_name: str,
        country: str,
        deadline: date,
        status: str | None = None,
        notes: str | None = None,
    ) -> Application:
        application = Application(
            university_name=university_name,
            program_name=program_name,
            country=country,
            deadline=deadline,
            status=status or "Not Started",
            notes=notes or None,
        )
        application.documents = ApplicationDocuments()
        return self._save(application)

    def update_application(self, application_id: int, values: dict[str, Any]) -> Application | None:
        application = self.get_application(application_id)
        if not application:
            return None
        return self._patch(application, values)

    def delete_application(self, application_id: int) -> Application | None:
        application = self.get_application(application_id)
        if not application:
            return None
        return self._remove(application)

    def update_documents(self, application_id: int, values: dict[str, Any]) -> ApplicationDocuments | None:
        documents = self.session.scalar(
            select(ApplicationDocuments).where(ApplicationDocuments.application_id == application_id)
        )
        if not documents:
            return None
        return self._patch(documents, values)

    def next_deadline_application(self, today: date | None = None) -> Application | None:
        today = today or date.today()
        statement = (
            select(Application)
            .where(Application.deadline >= today)
            .order_by(Application.deadline.asc(), Application.id.asc())
            .limit(1)
        )
        return self.session.scalars(statement).unique().first()

    def application_stats(self, today: date | None = None) -> dict[str, Any]:
        today = today or date.today()
        row = self.session.execute(
            select(
                func.count(Application.id),
                _count_where(Application.status.in_(COMPLETED_STATUSES)),
                _count_where(Application.status == "In Progress"),
            )
        ).one()
        next_app = self.next_deadline_application(today)
        return {
            "total_applications": int(row[0] or 0),
            "completed": int(row[1] or 0),
            "in_progress": int(row[2] or 0),
            "next_deadline": next_app.deadline if next_app else None,
            "next_deadline_application": next_app,
            "documents": self.document_stats(),
        }

    def document_stats(self) -> dict[str, int]:
        columns = [
            _count_where(getattr(ApplicationDocuments, flag).is_(True)) for flag in DOCUMENT_FLAGS
        ]
        row = self.session.execute(select(*columns, func.count(ApplicationDocuments.id))).one()
        keys = ["gre_complete", "toefl_complete", "lors_complete", "sop_complete", "transcript_complete"]
        stats = {key: int(value or 0) for key, value in zip(keys, row[:-1])}
        stats["total"] = int(row[-1] or 0)
        return stats

    def upcoming_deadlines(self, days: int = 30, today: date | None = None) -> list[Application]:
        today = today or date.today()
        statement = (
            select(Application)
            .where(and_(Application.deadline >= today, Application.deadline <= today + timedelta(days=days)))
            .order_by(Application.deadline.asc(), Application.id.asc())
        )
        return list(self.session.scalars(statement).unique().all())

    # preparation

    def list_preparation(self, *, type: str | None = None) -> list[PreparationItem]:
        statement = select(PreparationItem)
        if type:
            statement = statement.where(PreparationItem.type == type)
        statement = statement.order_by(
            PreparationItem.target_date.is_(None),
            PreparationItem.target_date.asc(),
            PreparationItem.created_at.asc(),
            PreparationItem.id.asc(),
        )
        return list(self.session.scalars(statement).all())

    def get_preparation(self, item_id: int) -> PreparationItem | None:
        return self.session.get(PreparationItem, item_id)

    def create_preparation(
        self,
        *,
        type: str,
        title: str,
        target_date: date | None = None,
        notes: str | None = None,
    ) -> PreparationItem:
        item = PreparationItem(
            type=type,
            title=title,
            target_date=target_date,
            notes=notes or None,
            completed=False,
        )
        return self._save(item)

    def update_preparation(self, item_id: int, values: dict[str, Any]) -> PreparationItem | None:
        item = self.get_preparation(item_id)
        if not item:
            return None
        return self._patch(item, values)

    def toggle_preparation(self, item_id: int) -> PreparationItem | None:
        item = self.get_preparation(item_id)
        if not item:
            return None
        return self._patch(item, {"completed": not item.completed})

    def delete_preparation(self, item_id: int) -> PreparationItem | None:
        item = self.get_preparation(item_id)
        if not item:
            return None
        return self._remove(item)

    def preparation_stats(self, today: date | None = None) -> list[dict[str, Any]]:
        today = today or date.today()
        upcoming = case(
            (
                and_(PreparationItem.completed.is_(False), PreparationItem.target_date >= today),
                PreparationItem.target_date,
            ),
            else_=None,
        )
        statement = (
            select(
                PreparationItem.type,
                func.count(PreparationItem.id),
                _count_where(PreparationItem.completed.is_(True)),
                func.min(upcoming),
            )
            .group_by(PreparationItem.type)
            .order_by(PreparationItem.type.asc())
        )
        return [
            {
                "type": row[0],
                "total": int(row[1] or 0),
                "completed": int(row[2] or 0),
                "next_target": _as_date(row[3]),
            }
            for row in self.session.execute(statement).all()
        ]

    # research

    def list_research(self, *, country: str | None = None, status: str | None = None) -> list[ResearchItem]:
        statement = select(ResearchItem)
        if country:
            statement = statement.where(ResearchItem.country == country)
        if status:
            statement = statement.where(ResearchItem.status == status)
        statement = statement.order_by(
            case((ResearchItem.status == "Shortlisted", 0), else_=1),
            ResearchItem.ranking.is_(None),
            ResearchItem.ranking.asc(),
            ResearchItem.created_at.desc(),
            ResearchItem.id.desc(),
        )
        return list(self.session.scalars(statement).all())

    def get_research(self, item_id: int) -> ResearchItem | None:
        return self.session.get(ResearchItem, item_id)

    def create_research(self, values: dict[str, Any]) -> ResearchItem:
        payload = {key: (value if value != "" else None) for key, value in values.items()}
        item = ResearchItem(**payload, status="Researching")
        return self._save(item)

    def update_research(self, item_id: int, values: dict[str, Any]) -> ResearchItem | None:
        item = self.get_research(item_id)
        if not item:
            return None
        return self._patch(item, values)

    def delete_research(self, item_id: int) -> ResearchItem | None:
        item = self.get_research(item_id)
        if not item:
            return None
        return self._remove(item)

    def research_stats(self) -> dict[str, int]:
        row = self.session.execute(
            select(
                func.count(ResearchItem.id),
                _count_where(ResearchItem.status == "Shortlisted"),
                _count_where(ResearchItem.status == "Applied"),
                _count_where(ResearchItem.country == "Germany"),
                _count_where(ResearchItem.country == "Switzerland"),
            )
        ).one()
        keys = ["total", "shortlisted", "applied", "germany", "switzerland"]
        return {key: int(value or 0) for key, value in zip(keys, row)}

    # chat log

    def append_chat_message(self, *, role: str, content: str, session_id: str = "default") -> ChatMessage:
        return self._save(ChatMessage(role=role, content=content, session_id=session_id))

    def list_chat_history(self, limit: int = 50, session_id: str | None = None) -> list[ChatMessage]:
        statement = select(ChatMessage)
        if session_id:
            statement = statement.where(ChatMessage.session_id == session_id)
        statement = statement.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()).limit(limit)
        rows = list(self.session.scalars(statement).all())
        rows.reverse()
        return rows

    def clear_chat_history(self, session_id: str | None = None) -> int:
        statement = delete(ChatMessage)
        if session_id:
            statement = statement.where(ChatMessage.session_id == session_id)
        result = self.session.execute(statement)
        self.session.commit()
        return int(result.rowcount or 0)
