"""Pydantic schema package for API contracts and stored rows."""

from pipeline_crm.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from pipeline_crm.schemas.prospect import Prospect, ProspectActivity, ProspectCreate, ProspectFile, ProspectUpdate
from pipeline_crm.schemas.stage_progress import (
    STAGE_DATA_MODELS,
    Stage1Data,
    Stage2Data,
    Stage3Data,
    Stage4Data,
    Stage5Data,
    StageProgress,
)

__all__ = [
    "LoginRequest",
    "Prospect",
    "ProspectActivity",
    "ProspectCreate",
    "ProspectFile",
    "ProspectUpdate",
    "RefreshRequest",
    "STAGE_DATA_MODELS",
    "Stage1Data",
    "Stage2Data",
    "Stage3Data",
    "Stage4Data",
    "Stage5Data",
    "StageProgress",
    "TokenResponse",
]
