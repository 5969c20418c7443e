"""Dashboard aggregates derived from the in-memory prospect collection.

Every function here is pure: it reads the collection it is given and returns a
new value. Totals are computed over the full collection; grouping runs over the
search-filtered one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from pipeline_crm.core.enums import STAGE_NAMES, STAGE_NUMBERS, ViewMode
from pipeline_crm.schemas.prospect import Prospect


def filter_prospects(prospects: Iterable[Prospect], search_term: str = "") -> list[Prospect]:
    """Case-insensitive substring match on company or contact name."""
    needle = (search_term or "").lower()
    if not needle:
        return list(prospects)
    return [
        p for p in prospects
        if needle in p.company_name.lower() or needle in p.contact_name.lower()
    ]


def group_by_stage(prospects: Iterable[Prospect]) -> dict[int, list[Prospect]]:
    """Bucket by `current_stage`; stages without members are absent."""
    buckets: dict[int, list[Prospect]] = {}
    for prospect in prospects:
        buckets.setdefault(prospect.current_stage, []).append(prospect)
    return buckets


def total_pipeline_value(prospects: Iterable[Prospect]) -> float:
    return sum((p.estimated_value or 0) for p in prospects)


def active_count(prospects: Iterable[Prospect]) -> int:
    return sum(1 for p in prospects if not p.is_lost)


def lost_count(prospects: Iterable[Prospect]) -> int:
    return sum(1 for p in prospects if p.is_lost)


def average_stage(prospects: Sequence[Prospect]) -> float:
    if not prospects:
        return 0.0
    return sum(p.current_stage for p in prospects) / len(prospects)


@dataclass(frozen=True)
class StageColumn:
    stage: int
    name: str
    prospects: list[Prospect]

    @property
    def count(self) -> int:
        return len(self.prospects)

    @property
    def value(self) -> float:
        return total_pipeline_value(self.prospects)


@dataclass(frozen=True)
class PipelineSnapshot:
    search_term: str
    view_mode: ViewMode
    filtered: list[Prospect]
    by_stage: Mapping[int, list[Prospect]]
    total_count: int
    active_count: int
    lost_count: int
    total_value: float
    average_stage: float
    columns: list[StageColumn] = field(default_factory=list)


def stage_columns(by_stage: Mapping[int, list[Prospect]]) -> list[StageColumn]:
    """All five kanban columns in order, empty where a stage has no members."""
    return [
        StageColumn(stage=stage, name=STAGE_NAMES[stage], prospects=list(by_stage.get(stage, [])))
        for stage in STAGE_NUMBERS
    ]


def build_snapshot(
    prospects: Sequence[Prospect],
    search_term: str = "",
    view_mode: ViewMode = ViewMode.KANBAN,
) -> PipelineSnapshot:
    filtered = filter_prospects(prospects, search_term)
    by_stage = group_by_stage(filtered)
    return PipelineSnapshot(
        search_term=search_term,
        view_mode=view_mode,
        filtered=filtered,
        by_stage=by_stage,
        total_count=len(prospects),
        active_count=active_count(prospects),
        lost_count=lost_count(prospects),
        total_value=total_pipeline_value(prospects),
        average_stage=average_stage(prospects),
        columns=stage_columns(by_stage),
    )
