"""Per-stage qualification documents stored inside a prospect's `stage_progress`.

The blob is schema-flexible at the storage layer. Each stage slot (`stage1` ..
`stage5`) is validated against its own model only when it is read, so a
half-filled or legacy slot never prevents the rest of the prospect from loading.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from pipeline_crm.core.enums import STAGE_NUMBERS
from pipeline_crm.core.exceptions import ValidationError


class _StageModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class ProcessMapping(_StageModel):
    process: str = ""
    current_friction: str = ""
    impact_score: float = Field(default=0, ge=0)
    worth_intervening: bool = False
    priority: int = Field(default=0, ge=0)


class ProjectPhase(_StageModel):
    name: str = ""
    timeline: str = ""
    description: str = ""


class SolutionMapping(_StageModel):
    process: str = ""
    proposed_solution: str = ""
    quantified_benefit: str = ""
    estimated_roi: str = ""
    implementation_time: str = ""


class ProposalAlternative(_StageModel):
    name: str = ""
    price: float = Field(default=0, ge=0)
    description: str = ""


class Stage1Data(_StageModel):
    """Pre-meeting research notes."""

    business_analysis: str = ""
    digital_channels: str = ""
    tech_stack: str = ""
    pain_hypothesis: str = ""
    potential_use_case: str = ""
    direct_competitors: str = ""
    decision_maker: str = ""
    completed: bool = False


class Stage2Data(_StageModel):
    """BANT+ qualification captured during the initial meeting."""

    budget_range: str = ""
    authority_map: str = ""
    need_urgency: str = ""
    timeline: str = ""
    cultural_fit_score: float = Field(default=0, ge=0)
    friction_area: str = ""
    critical_processes: list[ProcessMapping] = Field(default_factory=list)
    secondary_pain_points: list[str] = Field(default_factory=list)
    urgency_score: float = Field(default=0, ge=0)
    urgency_justification: str = ""
    meeting_transcript: str | None = None
    follow_up_notes: str = ""
    qualification_score: float = Field(default=0, ge=0, le=100)
    completed: bool = False


class Stage3Data(_StageModel):
    """Roadmap and value proposition."""

    project_phases: list[ProjectPhase] = Field(default_factory=list)
    solutions_table: list[SolutionMapping] = Field(default_factory=list)
    technical_dependencies: str = ""
    success_metrics: str = ""
    approval_status: Literal["approved", "pending", "rejected"] = "pending"
    sent_date: str | None = None
    client_feedback: str | None = None
    roadmap_versions: int = Field(default=0, ge=0)
    completed: bool = False


class Stage4Data(_StageModel):
    """Commercial proposal and pricing terms."""

    total_price: float = Field(default=0, ge=0)
    payment_structure: str = ""
    specific_deliverables: list[str] = Field(default_factory=list)
    commercial_conditions: str = ""
    proposal_alternatives: list[ProposalAlternative] = Field(default_factory=list)
    approval_status: Literal["approved", "in_review", "rejected"] = "in_review"
    advance_paid: bool = False
    advance_amount: float | None = Field(default=None, ge=0)
    advance_date: str | None = None
    closing_probability: float = Field(default=0, ge=0, le=100)
    decision_deadline: str | None = None
    completed: bool = False


class Stage5Data(_StageModel):
    """Technical handoff details."""

    technical_session_date: str | None = None
    session_duration: str = ""
    meeting_link: str | None = None
    participants: list[str] = Field(default_factory=list)
    workflow_diagrams: str = ""
    tools_to_integrate: list[str] = Field(default_factory=list)
    technical_restrictions: str = ""
    validated_deliverables: list[str] = Field(default_factory=list)
    proposed_architecture: str = ""
    technical_approval: bool = False
    ready_for_implementation: bool = False
    completed: bool = False


StageData = Union[Stage1Data, Stage2Data, Stage3Data, Stage4Data, Stage5Data]

STAGE_DATA_MODELS: dict[int, type[BaseModel]] = {
    1: Stage1Data,
    2: Stage2Data,
    3: Stage3Data,
    4: Stage4Data,
    5: Stage5Data,
}


class StageProgress(_StageModel):
    stage1: Stage1Data | None = None
    stage2: Stage2Data | None = None
    stage3: Stage3Data | None = None
    stage4: Stage4Data | None = None
    stage5: Stage5Data | None = None


def stage_key(stage: int) -> str:
    if stage not in STAGE_NUMBERS:
        raise ValidationError(f"Stage must be between 1 and 5, got {stage}.")
    return f"stage{stage}"


def _as_mapping(raw: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValidationError("stage_progress must be a JSON object.")
    return raw


def read_stage_data(raw: Mapping[str, Any] | None, stage: int) -> StageData | None:
    """Validate and return one stage slot, or None when it was never filled."""
    key = stage_key(stage)
    slot = _as_mapping(raw).get(key)
    if slot is None:
        return None
    try:
        return STAGE_DATA_MODELS[stage].model_validate(slot)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {key} data: {exc.error_count()} error(s).") from exc


def write_stage_data(raw: Mapping[str, Any] | None, stage: int, data: StageData | Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of the blob with one stage slot validated and replaced."""
    key = stage_key(stage)
    model = STAGE_DATA_MODELS[stage]
    try:
        validated = data if isinstance(data, model) else model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {key} data: {exc.error_count()} error(s).") from exc
    blob = dict(_as_mapping(raw))
    blob[key] = validated.model_dump(mode="json")
    return blob


def parse_stage_progress(raw: Mapping[str, Any] | None) -> StageProgress:
    try:
        return StageProgress.model_validate(dict(_as_mapping(raw)))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid stage_progress: {exc.error_count()} error(s).") from exc


def completed_stages(raw: Mapping[str, Any] | None) -> list[int]:
    """Stages whose slot carries `completed: true`, ascending."""
    blob = _as_mapping(raw)
    done = []
    for stage in STAGE_NUMBERS:
        slot = blob.get(f"stage{stage}")
        if isinstance(slot, Mapping) and slot.get("completed") is True:
            done.append(stage)
    return done
