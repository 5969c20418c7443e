"""Prospect repository: gateway CRUD, the session cache and the audit trail."""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.core.enums import (
    ACTIVITY_PROSPECT_CREATED,
    ACTIVITY_STAGE_UPDATED,
    NotificationVariant,
    PriorityLevel,
    ProspectStage,
)
from pipeline_crm.core.exceptions import GatewayError, ValidationError
from pipeline_crm.gateway.base import PROSPECT_ACTIVITIES, PROSPECT_FILES, PROSPECTS, PersistenceGateway
from pipeline_crm.schemas.prospect import Prospect, ProspectActivity, ProspectCreate, ProspectFile, ProspectUpdate
from pipeline_crm.services.activity_log import ActivityLog
from pipeline_crm.services.notifications import Notification, NotificationCenter, Notifier

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_placeholder_prospect(context: UserContext, today: date | None = None) -> ProspectCreate:
    """Seed record used by the dashboard's one-click "create prospect" action."""
    return ProspectCreate(
        company_name="New Company",
        contact_name="Primary Contact",
        contact_email="contact@company.com",
        first_contact_date=today or date.today(),
        assigned_to=context.display_name,
        stage_progress={},
        is_lost=False,
        priority_level=PriorityLevel.MEDIUM,
    )


class ProspectRepository:
    """Single point of truth for prospect records in the current session.

    `prospects` is ordered most-recent-first and is only mutated after the
    gateway confirms a write. Activity rows are written best-effort after the
    primary write and are fetched on demand, never cached.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifier: Notifier | None = None,
        activity_log: ActivityLog | None = None,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier or NotificationCenter()
        self.activity_log = activity_log or ActivityLog(gateway)
        self.prospects: list[Prospect] = []
        self.loading = False
        self.error: str | None = None

    @contextmanager
    def _loading_state(self) -> Generator[None, None, None]:
        self.loading = True
        try:
            yield
        finally:
            self.loading = False

    def _announce(self, title: str, description: str, variant: NotificationVariant = NotificationVariant.DEFAULT) -> None:
        self.notifier.notify(Notification(title=title, description=description, variant=variant))

    def _announce_error(self, message: str) -> None:
        self._announce("Error", message, NotificationVariant.DESTRUCTIVE)

    def _validate(self, model: type[ModelT], payload: ModelT | Mapping[str, Any]) -> ModelT:
        if isinstance(payload, model):
            return payload
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            message = f"Invalid {model.__name__}: " + "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}" for error in exc.errors()
            )
            self._announce_error(message)
            raise ValidationError(message) from exc

    @staticmethod
    def _to_model(model: type[ModelT], row: Mapping[str, Any], table: str) -> ModelT:
        try:
            return model.model_validate(dict(row))
        except PydanticValidationError as exc:
            raise GatewayError(f"Gateway returned a malformed {table} row.", table=table) from exc

    def _fail(self, action: str, exc: GatewayError, prospect_id: str | None = None) -> None:
        logger.error(
            "prospect.%s_failed: %s",
            action,
            exc.message,
            extra={"event": f"prospect.{action}_failed", "prospect_id": prospect_id, "status_code": exc.status_code},
        )
        self._announce_error(exc.message)

    def get_prospect(self, prospect_id: str) -> Prospect | None:
        return next((p for p in self.prospects if p.id == prospect_id), None)

    def fetch_prospects(self) -> list[Prospect]:
        """Reload the cache newest-first; on failure keep the last known state."""
        with self._loading_state():
            try:
                rows = self.gateway.select(PROSPECTS, order_by="created_at", descending=True)
                prospects = [self._to_model(Prospect, row, PROSPECTS) for row in rows]
            except GatewayError as exc:
                self.error = exc.message or "Error fetching prospects"
                self._fail("fetch", exc)
                return list(self.prospects)

            self.prospects = prospects
            self.error = None
            logger.info("prospect.fetched", extra={"event": "prospect.fetched", "table": PROSPECTS})
        return list(self.prospects)

    refetch = fetch_prospects

    def create_prospect(self, payload: ProspectCreate | Mapping[str, Any], context: UserContext) -> Prospect:
        data = self._validate(ProspectCreate, payload)
        row = data.model_dump(mode="json")
        row["current_stage"] = ProspectStage.first().value

        try:
            prospect = self._to_model(Prospect, self.gateway.insert(PROSPECTS, row), PROSPECTS)
        except GatewayError as exc:
            self._fail("create", exc)
            raise

        self.prospects.insert(0, prospect)
        self.activity_log.record(
            prospect.id,
            ACTIVITY_PROSPECT_CREATED,
            f"Prospect created: {prospect.company_name}",
            context,
            stage=prospect.current_stage,
        )
        logger.info("prospect.created", extra={"event": "prospect.created", "prospect_id": prospect.id})
        self._announce("Success", "Prospect created successfully")
        return prospect

    def update_prospect(
        self,
        prospect_id: str,
        updates: ProspectUpdate | Mapping[str, Any],
        context: UserContext,
    ) -> Prospect:
        changes = self._validate(ProspectUpdate, updates).changes()
        if not changes:
            self._announce_error("No fields to update.")
            raise ValidationError("No fields to update.")
        try:
            prospect = self._to_model(Prospect, self.gateway.update(PROSPECTS, prospect_id, changes), PROSPECTS)
        except GatewayError as exc:
            self._fail("update", exc, prospect_id=prospect_id)
            raise

        self.prospects = [prospect if p.id == prospect_id else p for p in self.prospects]

        new_stage = changes.get("current_stage")
        if new_stage is not None:
            self.activity_log.record(
                prospect_id,
                ACTIVITY_STAGE_UPDATED,
                f"Prospect moved to stage {new_stage} ({ProspectStage(new_stage).display_name})",
                context,
                stage=new_stage,
            )
        logger.info("prospect.updated", extra={"event": "prospect.updated", "prospect_id": prospect_id})
        self._announce("Success", "Prospect updated successfully")
        return prospect

    def move_to_stage(self, prospect_id: str, stage: int, context: UserContext) -> Prospect:
        try:
            target = ProspectStage(int(stage))
        except (TypeError, ValueError) as exc:
            self._announce_error(f"Unknown stage: {stage}")
            raise ValidationError(f"Unknown stage: {stage}") from exc
        return self.update_prospect(prospect_id, {"current_stage": target.value}, context)

    def delete_prospect(self, prospect_id: str) -> None:
        try:
            self.gateway.delete(PROSPECTS, prospect_id)
        except GatewayError as exc:
            self._fail("delete", exc, prospect_id=prospect_id)
            raise

        self.prospects = [p for p in self.prospects if p.id != prospect_id]
        logger.info("prospect.deleted", extra={"event": "prospect.deleted", "prospect_id": prospect_id})
        self._announce("Success", "Prospect deleted successfully")

    def log_activity(
        self,
        prospect_id: str,
        activity_type: str,
        description: str,
        context: UserContext,
        stage: int | None = None,
    ) -> bool:
        return self.activity_log.record(prospect_id, activity_type, description, context, stage=stage)

    def get_prospect_activities(self, prospect_id: str) -> list[ProspectActivity]:
        try:
            rows = self.gateway.select(
                PROSPECT_ACTIVITIES,
                filters={"prospect_id": prospect_id},
                order_by="created_at",
                descending=True,
            )
            return [self._to_model(ProspectActivity, row, PROSPECT_ACTIVITIES) for row in rows]
        except Exception:
            logger.exception(
                "prospect.activities_fetch_failed",
                extra={"event": "prospect.activities_fetch_failed", "prospect_id": prospect_id},
            )
            return []

    def get_prospect_files(self, prospect_id: str) -> list[ProspectFile]:
        try:
            rows = self.gateway.select(
                PROSPECT_FILES,
                filters={"prospect_id": prospect_id},
                order_by="uploaded_at",
                descending=True,
            )
            return [self._to_model(ProspectFile, row, PROSPECT_FILES) for row in rows]
        except Exception:
            logger.exception(
                "prospect.files_fetch_failed",
                extra={"event": "prospect.files_fetch_failed", "prospect_id": prospect_id},
            )
            return []
