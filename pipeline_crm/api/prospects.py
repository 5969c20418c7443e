"""Prospect endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status

from pipeline_crm.api._authz import get_current_user, get_repository, raise_http_error
from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.core.exceptions import PipelineCRMException
from pipeline_crm.schemas.prospect import Prospect, ProspectActivity, ProspectCreate, ProspectFile, ProspectUpdate
from pipeline_crm.schemas.stage_progress import write_stage_data
from pipeline_crm.services.pipeline_metrics import filter_prospects
from pipeline_crm.services.prospect_repository import ProspectRepository, build_placeholder_prospect

router = APIRouter(prefix="/prospects", tags=["prospects"])


def _load(repository: ProspectRepository) -> list[Prospect]:
    prospects = repository.fetch_prospects()
    if repository.error is not None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=repository.error)
    return prospects


def _require(repository: ProspectRepository, prospect_id: str) -> Prospect:
    _load(repository)
    prospect = repository.get_prospect(prospect_id)
    if prospect is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="prospect not found")
    return prospect


@router.get("", response_model=list[Prospect])
def list_prospects(
    search: str = Query(default="", max_length=255),
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> list[Prospect]:
    return filter_prospects(_load(repository), search)


@router.post("", response_model=Prospect, status_code=status.HTTP_201_CREATED)
def create_prospect(
    payload: ProspectCreate | None = Body(default=None),
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> Prospect:
    try:
        return repository.create_prospect(payload or build_placeholder_prospect(user), user)
    except PipelineCRMException as exc:
        raise_http_error(exc)


@router.get("/{prospect_id}", response_model=Prospect)
def get_prospect(
    prospect_id: str,
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> Prospect:
    return _require(repository, prospect_id)


@router.patch("/{prospect_id}", response_model=Prospect)
def update_prospect(
    prospect_id: str,
    payload: ProspectUpdate,
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> Prospect:
    try:
        return repository.update_prospect(prospect_id, payload, user)
    except PipelineCRMException as exc:
        raise_http_error(exc)


@router.delete("/{prospect_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prospect(
    prospect_id: str,
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> Response:
    try:
        repository.delete_prospect(prospect_id)
    except PipelineCRMException as exc:
        raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{prospect_id}/activities", response_model=list[ProspectActivity])
def list_activities(
    prospect_id: str,
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> list[ProspectActivity]:
    return repository.get_prospect_activities(prospect_id)


@router.get("/{prospect_id}/files", response_model=list[ProspectFile])
def list_files(
    prospect_id: str,
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> list[ProspectFile]:
    return repository.get_prospect_files(prospect_id)


@router.get("/{prospect_id}/stages/{stage}")
def get_stage_data(
    prospect_id: str,
    stage: int = Path(ge=1, le=5),
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> dict[str, Any]:
    prospect = _require(repository, prospect_id)
    try:
        data = prospect.stage_data(stage)
    except PipelineCRMException as exc:
        raise_http_error(exc)
    return {"stage": stage, "data": data.model_dump(mode="json") if data is not None else None}


@router.put("/{prospect_id}/stages/{stage}", response_model=Prospect)
def put_stage_data(
    prospect_id: str,
    stage: int = Path(ge=1, le=5),
    payload: dict[str, Any] = Body(...),
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> Prospect:
    prospect = _require(repository, prospect_id)
    try:
        blob = write_stage_data(prospect.stage_progress, stage, payload)
        return repository.update_prospect(prospect_id, {"stage_progress": blob}, user)
    except PipelineCRMException as exc:
        raise_http_error(exc)
