from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from gradtrack.api.deps import get_chat_agent, get_repository, get_session_store
from gradtrack.api.schemas import ChatMessageResponse, ChatRequest, ChatResponse, MessageResponse
from gradtrack.core.sessions import ChatSessionStore
from gradtrack.db.repositories import Repository
from gradtrack.llm.agent import ChatAgent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
def send_message(
    payload: ChatRequest,
    repo: Repository = Depends(get_repository),
    agent: ChatAgent = Depends(get_chat_agent),
    store: ChatSessionStore = Depends(get_session_store),
) -> ChatResponse:
    result = agent.chat(payload.message, store.get(payload.session_id))
    store.set(payload.session_id, result.history)

    repo.append_chat_message(role="user", content=payload.message, session_id=payload.session_id)
    repo.append_chat_message(role="assistant", content=result.message, session_id=payload.session_id)
    if result.truncated:
        logger.warning("Chat turn for session %s stopped at the tool round limit", payload.session_id)

    return ChatResponse(message=result.message, session_id=payload.session_id, tool_calls=result.tool_calls)


@router.get("/history", response_model=list[ChatMessageResponse])
def chat_history(
    limit: int = Query(50, ge=1, le=500),
    session_id: str | None = None,
    repo: Repository = Depends(get_repository),
) -> list[ChatMessageResponse]:
    return [ChatMessageResponse.model_validate(row) for row in repo.list_chat_history(limit, session_id)]


@router.delete("/history", response_model=MessageResponse)
def clear_chat_history(
    session_id: str | None = None,
    repo: Repository = Depends(get_repository),
    store: ChatSessionStore = Depends(get_session_store),
) -> MessageResponse:
    repo.clear_chat_history(session_id)
    if session_id:
        store.delete(session_id)
    else:
        store.clear()
    return MessageResponse(message="Chat history cleared")
