from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from gradtrack.api.deps import get_autofiller, get_repository
from gradtrack.api.schemas import (
    ResearchAutofillRequest,
    ResearchCreateRequest,
    ResearchDeleteResponse,
    ResearchResponse,
    ResearchStatsResponse,
    ResearchStatusRequest,
    ResearchUpdateRequest,
)
from gradtrack.db.repositories import Repository
from gradtrack.llm.autofill import ResearchAutofiller
from gradtrack.types import Country, ResearchAutofill, ResearchStatus

router = APIRouter(prefix="/research", tags=["research"])

NON_NULLABLE_FIELDS = {"university_name", "program_name", "country", "status"}


@router.get("", response_model=list[ResearchResponse])
def list_research(
    country: Country | None = None,
    status: ResearchStatus | None = None,
    repo: Repository = Depends(get_repository),
) -> list[ResearchResponse]:
    return [ResearchResponse.model_validate(row) for row in repo.list_research(country=country, status=status)]


@router.get("/stats", response_model=ResearchStatsResponse)
def research_stats(repo: Repository = Depends(get_repository)) -> ResearchStatsResponse:
    return ResearchStatsResponse.model_validate(repo.research_stats())


@router.post("", response_model=ResearchResponse, status_code=201)
def create_research(
    payload: ResearchCreateRequest,
    repo: Repository = Depends(get_repository),
) -> ResearchResponse:
    return ResearchResponse.model_validate(repo.create_research(payload.model_dump()))


@router.post("/autofill", response_model=ResearchAutofill)
def autofill_research(
    payload: ResearchAutofillRequest,
    autofiller: ResearchAutofiller = Depends(get_autofiller),
) -> ResearchAutofill:
    return autofiller.autofill(
        university_name=payload.university_name,
        program_name=payload.program_name,
        country=payload.country,
    )


@router.put("/{item_id}", response_model=ResearchResponse)
def update_research(
    item_id: int,
    payload: ResearchUpdateRequest,
    repo: Repository = Depends(get_repository),
) -> ResearchResponse:
    values = payload.changes()
    nulled = sorted(field for field in NON_NULLABLE_FIELDS if field in values and values[field] is None)
    if nulled:
        raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(nulled)}")
    if not values:
        raise HTTPException(status_code=400, detail="No updates provided")

    item = repo.update_research(item_id, values)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ResearchResponse.model_validate(item)


@router.patch("/{item_id}/status", response_model=ResearchResponse)
def update_research_status(
    item_id: int,
    payload: ResearchStatusRequest,
    repo: Repository = Depends(get_repository),
) -> ResearchResponse:
    item = repo.update_research(item_id, {"status": payload.status})
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return ResearchResponse.model_validate(item)


@router.delete("/{item_id}", response_model=ResearchDeleteResponse)
def delete_research(item_id: int, repo: Repository = Depends(get_repository)) -> ResearchDeleteResponse:
    item = repo.get_research(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    deleted = ResearchResponse.model_validate(item)
    repo.delete_research(item_id)
    return ResearchDeleteResponse(deleted=deleted)
