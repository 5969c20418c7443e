"""Prospect, activity and file schemas shared by the repository and the API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pipeline_crm.core.enums import PriorityLevel
from pipeline_crm.schemas.stage_progress import StageData, StageProgress, parse_stage_progress, read_stage_data

REQUIRED_COLUMNS = ("company_name", "contact_name", "first_contact_date", "assigned_to", "current_stage")


class Prospect(BaseModel):
    """A stored prospect row as returned by the gateway.

    Value fields are checked on the way in (`ProspectCreate`, `ProspectUpdate`),
    not here, so one bad row written elsewhere cannot block a whole listing.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    company_name: str
    contact_name: str
    contact_email: str | None = None
    contact_phone: str | None = None
    first_contact_date: date
    assigned_to: str
    current_stage: int = Field(default=1, ge=1, le=5)
    stage_progress: dict[str, Any] = Field(default_factory=dict)
    is_lost: bool = False
    lost_reason: str | None = None
    priority_level: str | None = PriorityLevel.MEDIUM.value
    estimated_value: float | None = None
    expected_close_date: date | None = None
    last_action: str | None = None
    next_step: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("current_stage", mode="before")
    @classmethod
    def _default_stage(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("is_lost", mode="before")
    @classmethod
    def _default_lost(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("stage_progress", mode="before")
    @classmethod
    def _default_progress(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    def stage_data(self, stage: int) -> StageData | None:
        return read_stage_data(self.stage_progress, stage)

    def progress(self) -> StageProgress:
        return parse_stage_progress(self.stage_progress)


class ProspectCreate(BaseModel):
    """Fields a caller supplies when creating a prospect.

    Identity and timestamps are assigned by the gateway and every new prospect
    starts at stage 1, so neither is accepted here.
    """

    company_name: str = Field(min_length=1, max_length=255)
    contact_name: str = Field(min_length=1, max_length=255)
    contact_email: str | None = Field(default=None, max_length=320)
    contact_phone: str | None = Field(default=None, max_length=64)
    first_contact_date: date
    assigned_to: str = Field(min_length=1, max_length=255)
    stage_progress: dict[str, Any] = Field(default_factory=dict)
    is_lost: bool = False
    lost_reason: str | None = None
    priority_level: PriorityLevel = PriorityLevel.MEDIUM
    estimated_value: float | None = Field(default=None, ge=0)
    expected_close_date: date | None = None
    last_action: str | None = None
    next_step: str | None = None
    tags: list[str] = Field(default_factory=list)


class ProspectUpdate(BaseModel):
    """A partial update; only explicitly set fields are sent to the gateway."""

    model_config = ConfigDict(extra="forbid")

    company_name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_email: str | None = Field(default=None, max_length=320)
    contact_phone: str | None = Field(default=None, max_length=64)
    first_contact_date: date | None = None
    assigned_to: str | None = Field(default=None, min_length=1, max_length=255)
    current_stage: int | None = Field(default=None, ge=1, le=5)
    stage_progress: dict[str, Any] | None = None
    is_lost: bool | None = None
    lost_reason: str | None = None
    priority_level: PriorityLevel | None = None
    estimated_value: float | None = Field(default=None, ge=0)
    expected_close_date: date | None = None
    last_action: str | None = None
    next_step: str | None = None
    tags: list[str] | None = None

    @model_validator(mode="after")
    def _required_columns_not_cleared(self) -> "ProspectUpdate":
        for name in REQUIRED_COLUMNS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class ProspectActivity(BaseModel):
    """Immutable audit-trail entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    prospect_id: str | None = None
    activity_type: str
    description: str
    stage: int | None = None
    created_by: str
    created_at: datetime | None = None


class ProspectFile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    prospect_id: str | None = None
    stage: int
    file_name: str
    file_url: str
    file_type: str | None = None
    uploaded_at: datetime | None = None
