"""Dashboard endpoint: metric tiles and stage columns for the pipeline views."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from pipeline_crm.api._authz import get_current_user, get_repository
from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.core.enums import ViewMode
from pipeline_crm.schemas.pipeline import DashboardResponse
from pipeline_crm.services.pipeline_metrics import build_snapshot
from pipeline_crm.services.prospect_repository import ProspectRepository

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    search: str = Query(default="", max_length=255),
    view: ViewMode = Query(default=ViewMode.KANBAN),
    user: UserContext = Depends(get_current_user),
    repository: ProspectRepository = Depends(get_repository),
) -> DashboardResponse:
    prospects = repository.fetch_prospects()
    if repository.error is not None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=repository.error)
    return DashboardResponse.from_snapshot(build_snapshot(prospects, search_term=search, view_mode=view))
