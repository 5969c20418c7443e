"""Dashboard response schemas."""

from __future__ import annotations

from pydantic import BaseModel

from pipeline_crm.core.enums import ViewMode
from pipeline_crm.schemas.prospect import Prospect
from pipeline_crm.services.pipeline_metrics import PipelineSnapshot


class PipelineMetrics(BaseModel):
    total_count: int
    active_count: int
    lost_count: int
    total_value: float
    average_stage: float


class StageColumnResponse(BaseModel):
    stage: int
    name: str
    count: int
    value: float
    prospects: list[Prospect]


class DashboardResponse(BaseModel):
    search: str
    view: ViewMode
    metrics: PipelineMetrics
    columns: list[StageColumnResponse]
    prospects: list[Prospect]

    @classmethod
    def from_snapshot(cls, snapshot: PipelineSnapshot) -> "DashboardResponse":
        return cls(
            search=snapshot.search_term,
            view=snapshot.view_mode,
            metrics=PipelineMetrics(
                total_count=snapshot.total_count,
                active_count=snapshot.active_count,
                lost_count=snapshot.lost_count,
                total_value=snapshot.total_value,
                average_stage=round(snapshot.average_stage, 2),
            ),
            columns=[
                StageColumnResponse(
                    stage=column.stage,
                    name=column.name,
                    count=column.count,
                    value=column.value,
                    prospects=column.prospects,
                )
                for column in snapshot.columns
            ],
            prospects=snapshot.filtered,
        )
