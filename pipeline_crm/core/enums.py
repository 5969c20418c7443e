"""Enums for the Pipeline CRM application."""

from enum import Enum, IntEnum


class ProspectStage(IntEnum):
    """Fixed, sequential qualification stages of the pipeline."""

    RESEARCH = 1
    INITIAL_MEETING = 2
    ROADMAP = 3
    COMMERCIAL_PROPOSAL = 4
    TECHNICAL_HANDOFF = 5

    @property
    def display_name(self) -> str:
        return STAGE_NAMES[self.value]

    @classmethod
    def first(cls) -> "ProspectStage":
        return cls.RESEARCH


STAGE_NAMES = {
    1: "Pre-Meeting Research",
    2: "Initial Meeting (BANT+)",
    3: "Roadmap and Value Proposition",
    4: "Commercial Proposal",
    5: "Technical Handoff",
}


class PriorityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityType(str, Enum):
    """Audit-trail entry kinds written by the prospect repository."""

    PROSPECT_CREATED = "prospect_created"
    STAGE_UPDATED = "stage_updated"


class ViewMode(str, Enum):
    KANBAN = "kanban"
    LIST = "list"
    CALENDAR = "calendar"


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class AuthEvent(str, Enum):
    """Session state transitions emitted by the auth session manager."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


# Convenience accessors
ACTIVITY_PROSPECT_CREATED = ActivityType.PROSPECT_CREATED.value
ACTIVITY_STAGE_UPDATED = ActivityType.STAGE_UPDATED.value
STAGE_NUMBERS = tuple(stage.value for stage in ProspectStage)
