from __future__ import annotations

from datetime import date

import pytest

from pipeline_crm.core.enums import ViewMode
from pipeline_crm.schemas.prospect import Prospect
from pipeline_crm.services.pipeline_metrics import (
    active_count,
    average_stage,
    build_snapshot,
    filter_prospects,
    group_by_stage,
    lost_count,
    total_pipeline_value,
)


def _prospect(idx: int, **overrides) -> Prospect:
    data = {
        "id": f"p-{idx}",
        "company_name": f"Company {idx}",
        "contact_name": f"Contact {idx}",
        "first_contact_date": date(2026, 1, 1),
        "assigned_to": "owner",
        "current_stage": 1,
    }
    data.update(overrides)
    return Prospect(**data)


COLLECTIONS = [
    [],
    [_prospect(1, estimated_value=1000, current_stage=2)],
    [
        _prospect(1, estimated_value=1500.5, current_stage=1),
        _prospect(2, estimated_value=None, current_stage=3, is_lost=True),
        _prospect(3, estimated_value=0, current_stage=5),
        _prospect(4, estimated_value=250, current_stage=3, is_lost=None),
    ],
    [_prospect(i, estimated_value=i * 10, current_stage=(i % 5) + 1, is_lost=i % 3 == 0) for i in range(1, 13)],
]


@pytest.mark.parametrize("prospects", COLLECTIONS)
def test_total_value_treats_missing_as_zero(prospects):
    expected = sum(p.estimated_value if p.estimated_value is not None else 0 for p in prospects)
    assert total_pipeline_value(prospects) == expected


@pytest.mark.parametrize("prospects", COLLECTIONS)
def test_active_and_lost_partition_total(prospects):
    assert active_count(prospects) + lost_count(prospects) == len(prospects)


@pytest.mark.parametrize("prospects", COLLECTIONS)
def test_group_by_stage_is_exact_partition(prospects):
    groups = group_by_stage(prospects)

    assert sum(len(members) for members in groups.values()) == len(prospects)
    for stage, members in groups.items():
        assert members
        assert all(p.current_stage == stage for p in members)


def test_average_stage_of_empty_collection_is_zero():
    assert average_stage([]) == 0


def test_average_stage_is_arithmetic_mean():
    prospects = [_prospect(1, current_stage=1), _prospect(2, current_stage=2), _prospect(3, current_stage=4)]
    assert average_stage(prospects) == pytest.approx(7 / 3)


def test_search_is_case_insensitive_on_company_or_contact():
    prospects = [
        _prospect(1, company_name="ACME Corp"),
        _prospect(2, contact_name="Maria Acmeson"),
        _prospect(3, company_name="Globex"),
    ]

    assert [p.id for p in filter_prospects(prospects, "acme")] == ["p-1", "p-2"]
    assert len(filter_prospects(prospects, "")) == 3
    assert filter_prospects(prospects, "   ") == []


def test_search_term_whitespace_is_part_of_the_match():
    prospects = [
        _prospect(1, company_name="ACME Corp", contact_name="Jane"),
        _prospect(2, company_name="Acmeville", contact_name="Omar"),
        _prospect(3, company_name="Globex", contact_name="Li"),
    ]

    assert [p.id for p in filter_prospects(prospects, "acme ")] == ["p-1"]
    assert [p.id for p in filter_prospects(prospects, " ")] == ["p-1"]


def test_missing_stage_is_absent_from_grouping():
    groups = group_by_stage([_prospect(1, current_stage=2)])

    assert 3 not in groups
    assert groups.get(3, []) == []


def test_snapshot_totals_ignore_search_filter():
    prospects = [
        _prospect(1, company_name="ACME Corp", estimated_value=100, current_stage=2),
        _prospect(2, company_name="Globex", estimated_value=300, current_stage=4, is_lost=True),
    ]

    snapshot = build_snapshot(prospects, search_term="acme", view_mode=ViewMode.LIST)

    assert [p.id for p in snapshot.filtered] == ["p-1"]
    assert snapshot.total_value == 400
    assert snapshot.total_count == 2
    assert snapshot.active_count == 1
    assert snapshot.lost_count == 1
    assert snapshot.average_stage == 3
    assert snapshot.view_mode is ViewMode.LIST
    assert [c.stage for c in snapshot.columns] == [1, 2, 3, 4, 5]
    assert [c.count for c in snapshot.columns] == [0, 1, 0, 0, 0]
