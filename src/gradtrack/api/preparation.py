from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from gradtrack.api.deps import get_repository
from gradtrack.api.schemas import (
    PreparationCreateRequest,
    PreparationDeleteResponse,
    PreparationResponse,
    PreparationStatsResponse,
    PreparationUpdateRequest,
)
from gradtrack.db.repositories import Repository
from gradtrack.types import PreparationType

router = APIRouter(prefix="/preparation", tags=["preparation"])

NON_NULLABLE_FIELDS = {"title", "completed"}


@router.get("", response_model=list[PreparationResponse])
def list_preparation(
    type: PreparationType | None = None,
    repo: Repository = Depends(get_repository),
) -> list[PreparationResponse]:
    return [PreparationResponse.model_validate(row) for row in repo.list_preparation(type=type)]


@router.get("/stats", response_model=list[PreparationStatsResponse])
def preparation_stats(repo: Repository = Depends(get_repository)) -> list[PreparationStatsResponse]:
    return [PreparationStatsResponse.model_validate(row) for row in repo.preparation_stats()]


@router.post("", response_model=PreparationResponse, status_code=201)
def create_preparation(
    payload: PreparationCreateRequest,
    repo: Repository = Depends(get_repository),
) -> PreparationResponse:
    item = repo.create_preparation(**payload.model_dump())
    return PreparationResponse.model_validate(item)


@router.put("/{item_id}", response_model=PreparationResponse)
def update_preparation(
    item_id: int,
    payload: PreparationUpdateRequest,
    repo: Repository = Depends(get_repository),
) -> PreparationResponse:
    values = payload.changes()
    nulled = sorted(field for field in NON_NULLABLE_FIELDS if field in values and values[field] is None)
    if nulled:
        raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(nulled)}")
    if not values:
        raise HTTPException(status_code=400, detail="No updates provided")

    item = repo.update_preparation(item_id, values)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return PreparationResponse.model_validate(item)


@router.patch("/{item_id}/toggle", response_model=PreparationResponse)
def toggle_preparation(item_id: int, repo: Repository = Depends(get_repository)) -> PreparationResponse:
    item = repo.toggle_preparation(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return PreparationResponse.model_validate(item)


@router.delete("/{item_id}", response_model=PreparationDeleteResponse)
def delete_preparation(item_id: int, repo: Repository = Depends(get_repository)) -> PreparationDeleteResponse:
    item = repo.get_preparation(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    deleted = PreparationResponse.model_validate(item)
    repo.delete_preparation(item_id)
    return PreparationDeleteResponse(deleted=deleted)
