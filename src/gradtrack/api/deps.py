from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gradtrack.config import get_settings
from gradtrack.core.sessions import ChatSessionStore
from gradtrack.db.repositories import Repository
from gradtrack.db.session import get_db_session
from gradtrack.llm.agent import ChatAgent
from gradtrack.llm.autofill import ResearchAutofiller
from gradtrack.llm.providers import build_provider
from gradtrack.llm.tools import ToolBridge


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_repository(db: Session = Depends(get_db)) -> Repository:
    return Repository(db)


def get_session_store(request: Request) -> ChatSessionStore:
    return request.app.state.chat_sessions


def get_chat_agent(repo: Repository = Depends(get_repository)) -> ChatAgent:
    settings = get_settings()
    return ChatAgent(provider=build_provider(settings), tools=ToolBridge(repo), settings=settings)


def get_autofiller() -> ResearchAutofiller:
    settings = get_settings()
    return ResearchAutofiller(provider=build_provider(settings), settings=settings)
