from __future__ import annotations

import json
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response

from gradtrack.api.deps import get_repository
from gradtrack.api.schemas import (
    ApplicationCreateRequest,
    ApplicationResponse,
    ApplicationStatsResponse,
    ApplicationUpdateRequest,
    DocumentsResponse,
    DocumentsUpdateRequest,
    MessageResponse,
    UpcomingDeadlineResponse,
)
from gradtrack.db.repositories import Repository
from gradtrack.types import ApplicationStatus, Country

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", response_model=list[ApplicationResponse])
def list_applications(
    country: Country | None = None,
    status: ApplicationStatus | None = None,
    search: str | None = None,
    repo: Repository = Depends(get_repository),
) -> list[ApplicationResponse]:
    rows = repo.list_applications(country=country, status=status, search=search)
    return [ApplicationResponse.model_validate(row) for row in rows]


@router.get("/stats/summary", response_model=ApplicationStatsResponse)
def application_stats(repo: Repository = Depends(get_repository)) -> ApplicationStatsResponse:
    return ApplicationStatsResponse.model_validate(repo.application_stats(), from_attributes=True)


@router.get("/upcoming", response_model=list[UpcomingDeadlineResponse])
def upcoming_deadlines(
    days: int = Query(30, ge=0, le=366),
    repo: Repository = Depends(get_repository),
) -> list[UpcomingDeadlineResponse]:
    today = date.today()
    return [
        UpcomingDeadlineResponse.model_validate(
            ApplicationResponse.model_validate(row).model_dump() | {"days_left": (row.deadline - today).days}
        )
        for row in repo.upcoming_deadlines(days=days, today=today)
    ]


@router.get("/export")
def export_applications(repo: Repository = Depends(get_repository)) -> Response:
    rows = [ApplicationResponse.model_validate(row) for row in repo.list_applications()]
    filename = f"applications-{date.today().isoformat()}.json"
    return Response(
        content=json.dumps(jsonable_encoder(rows), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(application_id: int, repo: Repository = Depends(get_repository)) -> ApplicationResponse:
    application = repo.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return ApplicationResponse.model_validate(application)


@router.post("", response_model=ApplicationResponse, status_code=201)
def create_application(
    payload: ApplicationCreateRequest,
    repo: Repository = Depends(get_repository),
) -> ApplicationResponse:
    application = repo.create_application(**payload.model_dump())
    return ApplicationResponse.model_validate(application)


@router.put("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: int,
    payload: ApplicationUpdateRequest,
    repo: Repository = Depends(get_repository),
) -> ApplicationResponse:
    application = repo.update_application(application_id, payload.changes(keep_nulls=False))
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return ApplicationResponse.model_validate(application)


@router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(application_id: int, repo: Repository = Depends(get_repository)) -> MessageResponse:
    if not repo.delete_application(application_id):
        raise HTTPException(status_code=404, detail="Application not found")
    return MessageResponse(message="Application deleted successfully")


@router.put("/{application_id}/documents", response_model=DocumentsResponse)
def update_documents(
    application_id: int,
    payload: DocumentsUpdateRequest,
    repo: Repository = Depends(get_repository),
) -> DocumentsResponse:
    documents = repo.update_documents(application_id, payload.changes(keep_nulls=False))
    if not documents:
        raise HTTPException(status_code=404, detail="Documents not found for this application")
    return DocumentsResponse.model_validate(documents)
