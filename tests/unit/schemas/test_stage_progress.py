from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from pipeline_crm.core.exceptions import ValidationError
from pipeline_crm.schemas.prospect import Prospect, ProspectUpdate
from pipeline_crm.schemas.stage_progress import (
    Stage2Data,
    Stage4Data,
    completed_stages,
    read_stage_data,
    write_stage_data,
)


def test_missing_slot_reads_as_none():
    assert read_stage_data({}, 3) is None
    assert read_stage_data(None, 1) is None


def test_slot_is_validated_against_its_stage_model():
    raw = {"stage2": {"budget_range": "50k", "qualification_score": 80, "critical_processes": [{"process": "billing"}]}}

    data = read_stage_data(raw, 2)

    assert isinstance(data, Stage2Data)
    assert data.critical_processes[0].process == "billing"
    assert data.completed is False


def test_invalid_slot_raises_validation_error():
    with pytest.raises(ValidationError, match="stage4"):
        read_stage_data({"stage4": {"closing_probability": 140}}, 4)


def test_stage_outside_pipeline_is_rejected():
    with pytest.raises(ValidationError):
        read_stage_data({}, 0)


def test_write_replaces_one_slot_and_keeps_others():
    raw = {"stage1": {"tech_stack": "django", "completed": True}}

    blob = write_stage_data(raw, 4, Stage4Data(total_price=9000, approval_status="approved"))

    assert blob["stage1"] == raw["stage1"]
    assert blob["stage4"]["total_price"] == 9000
    assert blob["stage4"]["approval_status"] == "approved"
    assert "stage4" not in raw


def test_unknown_keys_are_preserved():
    blob = write_stage_data({}, 1, {"tech_stack": "rails", "legacy_field": "kept"})

    assert blob["stage1"]["legacy_field"] == "kept"


def test_completed_stages_are_listed_in_order():
    raw = {"stage3": {"completed": True}, "stage1": {"completed": True}, "stage2": {"completed": False}}

    assert completed_stages(raw) == [1, 3]


def test_prospect_defaults_missing_optional_columns():
    prospect = Prospect.model_validate(
        {
            "id": "p-1",
            "company_name": "Acme",
            "contact_name": "Jane",
            "first_contact_date": "2026-01-15",
            "assigned_to": "owner",
            "current_stage": None,
            "is_lost": None,
            "stage_progress": None,
            "tags": None,
        }
    )

    assert prospect.current_stage == 1
    assert prospect.is_lost is False
    assert prospect.stage_data(2) is None
    assert prospect.progress().stage1 is None


def test_update_cannot_clear_required_columns():
    with pytest.raises(PydanticValidationError, match="cannot be cleared"):
        ProspectUpdate(company_name=None)

    assert ProspectUpdate(next_step=None).changes() == {"next_step": None}
