"""Best-effort audit trail for prospect lifecycle events."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.gateway.base import PROSPECT_ACTIVITIES, PersistenceGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityFailure:
    prospect_id: str
    activity_type: str
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ActivityLog:
    """Writes activity rows after the primary mutation has been confirmed.

    A write failure is logged and kept in `failures`; it is never raised to the
    caller and never undoes the mutation that triggered it.
    """

    def __init__(self, gateway: PersistenceGateway, failure_history: int = 100) -> None:
        self.gateway = gateway
        self.failures: deque[ActivityFailure] = deque(maxlen=failure_history)

    def record(
        self,
        prospect_id: str,
        activity_type: str,
        description: str,
        context: UserContext,
        stage: int | None = None,
    ) -> bool:
        row = {
            "prospect_id": prospect_id,
            "activity_type": activity_type,
            "description": description,
            "stage": stage,
            "created_by": context.display_name,
        }
        try:
            self.gateway.insert(PROSPECT_ACTIVITIES, row)
        except Exception as exc:
            logger.exception(
                "activity.log_failed",
                extra={
                    "event": "activity.log_failed",
                    "prospect_id": prospect_id,
                    "activity_type": activity_type,
                },
            )
            self.failures.append(ActivityFailure(prospect_id=prospect_id, activity_type=activity_type, error=str(exc)))
            return False

        logger.info(
            "activity.logged",
            extra={"event": "activity.logged", "prospect_id": prospect_id, "activity_type": activity_type},
        )
        return True
