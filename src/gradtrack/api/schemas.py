from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gradtrack.types import ApplicationStatus, Country, PreparationType, ResearchStatus

RequiredText = Annotated[str, Field(min_length=1, max_length=255)]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SparseUpdate(BaseModel):
    """Partial update body; only fields the caller actually sent are applied."""

    model_config = ConfigDict(extra="ignore")

    def changes(self, *, keep_nulls: bool = True) -> dict[str, Any]:
        values = self.model_dump(exclude_unset=True)
        if keep_nulls:
            return values
        return {key: value for key, value in values.items() if value is not None}


# applications


class DocumentFlags(ORMModel):
    gre: bool | None = False
    toefl_ielts: bool | None = False
    lors: bool | None = False
    sop: bool | None = False
    transcript: bool | None = False


class DocumentsUpdateRequest(SparseUpdate):
    gre: bool | None = None
    toefl_ielts: bool | None = None
    lors: bool | None = None
    sop: bool | None = None
    transcript: bool | None = None


class DocumentsResponse(DocumentFlags):
    application_id: int


class ApplicationCreateRequest(BaseModel):
    university_name: RequiredText
    program_name: RequiredText
    country: Country
    deadline: date
    status: ApplicationStatus = "Not Started"
    notes: str | None = None


class ApplicationUpdateRequest(SparseUpdate):
    university_name: str | None = Field(default=None, min_length=1, max_length=255)
    program_name: str | None = Field(default=None, min_length=1, max_length=255)
    country: Country | None = None
    deadline: date | None = None
    status: ApplicationStatus | None = None
    notes: str | None = None


class ApplicationResponse(ORMModel):
    id: int
    university_name: str
    program_name: str
    country: str
    deadline: date
    status: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    documents: DocumentFlags = Field(default_factory=DocumentFlags)

    @field_validator("documents", mode="before")
    @classmethod
    def default_documents(cls, value: Any) -> Any:
        return {} if value is None else value


class UpcomingDeadlineResponse(ApplicationResponse):
    days_left: int


class DeadlineApplication(ORMModel):
    id: int
    university_name: str
    program_name: str
    deadline: date


class DocumentStats(BaseModel):
    gre_complete: int = 0
    toefl_complete: int = 0
    lors_complete: int = 0
    sop_complete: int = 0
    transcript_complete: int = 0
    total: int = 0


class ApplicationStatsResponse(ORMModel):
    total_applications: int
    completed: int
    in_progress: int
    next_deadline: date | None = None
    next_deadline_application: DeadlineApplication | None = None
    documents: DocumentStats


class MessageResponse(BaseModel):
    message: str


# preparation


class PreparationCreateRequest(BaseModel):
    type: PreparationType
    title: RequiredText
    target_date: date | None = None
    notes: str | None = None


class PreparationUpdateRequest(SparseUpdate):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    target_date: date | None = None
    notes: str | None = None
    completed: bool | None = None


class PreparationResponse(ORMModel):
    id: int
    type: str
    title: str
    target_date: date | None = None
    notes: str | None = None
    completed: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PreparationStatsResponse(BaseModel):
    type: str
    total: int
    completed: int
    next_target: date | None = None


class PreparationDeleteResponse(BaseModel):
    success: bool = True
    deleted: PreparationResponse


# research


class ResearchCreateRequest(BaseModel):
    university_name: RequiredText
    program_name: RequiredText
    country: Country
    website: str | None = None
    ranking: int | None = Field(default=None, ge=1)
    tuition_fees: str | None = None
    requirements: str | None = None
    notes: str | None = None


class ResearchUpdateRequest(SparseUpdate):
    university_name: str | None = Field(default=None, min_length=1, max_length=255)
    program_name: str | None = Field(default=None, min_length=1, max_length=255)
    country: Country | None = None
    website: str | None = None
    ranking: int | None = Field(default=None, ge=1)
    tuition_fees: str | None = None
    requirements: str | None = None
    notes: str | None = None
    status: ResearchStatus | None = None


class ResearchStatusRequest(BaseModel):
    status: ResearchStatus


class ResearchResponse(ORMModel):
    id: int
    university_name: str
    program_name: str
    country: str
    website: str | None = None
    ranking: int | None = None
    tuition_fees: str | None = None
    requirements: str | None = None
    notes: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ResearchStatsResponse(BaseModel):
    total: int
    shortlisted: int
    applied: int
    germany: int
    switzerland: int


class ResearchDeleteResponse(BaseModel):
    success: bool = True
    deleted: ResearchResponse


class ResearchAutofillRequest(BaseModel):
    university_name: RequiredText
    program_name: RequiredText
    country: Country | None = None


# chat


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    session_id: str = Field(default="default", min_length=1, max_length=120)


class ChatResponse(BaseModel):
    message: str
    session_id: str
    tool_calls: list[str] = Field(default_factory=list)


class ChatMessageResponse(ORMModel):
    id: int
    session_id: str
    role: str
    content: str
    created_at: datetime | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
    environment: str
