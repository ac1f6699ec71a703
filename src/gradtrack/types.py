from __future__ import annotations

from typing import Any, Literal, get_args

from pydantic import BaseModel, Field

Country = Literal["Germany", "Switzerland"]
ApplicationStatus = Literal["Not Started", "In Progress", "Submitted", "Interview", "Result"]
PreparationType = Literal["german", "gre", "ielts"]
ResearchStatus = Literal["Researching", "Shortlisted", "Rejected", "Applied"]
ChatRole = Literal["user", "assistant"]

COUNTRIES: tuple[str, ...] = get_args(Country)
APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)
PREPARATION_TYPES: tuple[str, ...] = get_args(PreparationType)
RESEARCH_STATUSES: tuple[str, ...] = get_args(ResearchStatus)

# Statuses counted as "completed" on the dashboard.
COMPLETED_STATUSES: tuple[str, ...] = ("Submitted", "Interview", "Result")
DOCUMENT_FLAGS: tuple[str, ...] = ("gre", "toefl_ielts", "lors", "sop", "transcript")


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: str = "{}"


class ModelResponse(BaseModel):
    content: str
    tool_calls: list[ToolCall] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict)


class ChatTurn(BaseModel):
    role: ChatRole
    content: str


class ChatResult(BaseModel):
    message: str
    history: list[ChatTurn] = Field(default_factory=list)
    tool_calls: list[str] = Field(default_factory=list)
    rounds: int = 0
    truncated: bool = False


class ResearchAutofill(BaseModel):
    website: str | None = None
    ranking: int | None = None
    tuition_fees: str | None = None
    requirements: str | None = None
    notes: str | None = None
