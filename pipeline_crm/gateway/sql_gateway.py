"""SQLAlchemy-backed gateway used for local runs and tests."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, DateTime, Table, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from pipeline_crm.core.exceptions import GatewayError, RowNotFoundError
from pipeline_crm.database.db import verify_database_connection
from pipeline_crm.database.models import TABLES, new_id
from pipeline_crm.gateway.base import PersistenceGateway, Row

logger = logging.getLogger(__name__)


def _parse_datetime(value: str) -> datetime:
    if value.endswith("Z"):
        value = f"{value[:-1]}+00:00"
    return datetime.fromisoformat(value)


class SqlGateway(PersistenceGateway):
    """Gateway over the local SQL schema, one short-lived session per call."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _table(self, name: str) -> Table:
        table = TABLES.get(name)
        if table is None:
            raise GatewayError(f"Unknown table: {name}", status_code=404, table=name)
        return table

    def _coerce(self, table: Table, values: Mapping[str, Any]) -> dict[str, Any]:
        coerced: dict[str, Any] = {}
        for key, value in values.items():
            if key not in table.c:
                raise GatewayError(
                    f"Column '{key}' does not exist on table '{table.name}'.",
                    status_code=400,
                    table=table.name,
                )
            column_type = table.c[key].type
            try:
                if isinstance(value, str) and isinstance(column_type, DateTime):
                    value = _parse_datetime(value)
                elif isinstance(value, str) and isinstance(column_type, Date):
                    value = date.fromisoformat(value)
            except ValueError as exc:
                raise GatewayError(
                    f"Invalid value for column '{key}': {value!r}",
                    status_code=400,
                    table=table.name,
                ) from exc
            coerced[key] = value
        return coerced

    def _fetch_by_id(self, session, table: Table, row_id: str) -> Row | None:
        result = session.execute(select(table).where(table.c.id == row_id)).mappings().first()
        return dict(result) if result is not None else None

    def _fail(self, table: Table, action: str, exc: SQLAlchemyError) -> GatewayError:
        logger.error(
            "gateway.sql.%s_failed",
            action,
            extra={"event": f"gateway.sql.{action}_failed", "table": table.name},
        )
        if isinstance(exc, IntegrityError):
            detail = str(exc.orig) if exc.orig is not None else str(exc)
            return GatewayError(f"Constraint violation on {table.name}: {detail}", status_code=409, table=table.name)
        return GatewayError(f"Database error on {table.name}: {exc}", status_code=500, table=table.name)

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        target = self._table(table)
        criteria = self._coerce(target, filters or {})
        statement = select(target)
        for key, value in criteria.items():
            statement = statement.where(target.c[key] == value)
        if order_by is not None:
            if order_by not in target.c:
                raise GatewayError(f"Cannot order by unknown column '{order_by}'.", status_code=400, table=table)
            column = target.c[order_by]
            statement = statement.order_by(column.desc() if descending else column.asc())

        try:
            with self._session_factory() as session:
                return [dict(row) for row in session.execute(statement).mappings().all()]
        except SQLAlchemyError as exc:
            raise self._fail(target, "select", exc) from exc

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        target = self._table(table)
        values = self._coerce(target, row)
        values.setdefault("id", new_id())

        try:
            with self._session_factory() as session, session.begin():
                session.execute(insert(target).values(**values))
                stored = self._fetch_by_id(session, target, values["id"])
        except SQLAlchemyError as exc:
            raise self._fail(target, "insert", exc) from exc

        if stored is None:  # pragma: no cover - row vanished inside its own transaction.
            raise GatewayError(f"Inserted row missing from {table}.", status_code=500, table=table)
        return stored

    def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> Row:
        target = self._table(table)
        if "id" in values:
            raise GatewayError("Row identity cannot be updated.", status_code=400, table=table)
        changes = self._coerce(target, values)
        if not changes:
            raise GatewayError("Update requires at least one column.", status_code=400, table=table)

        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(update(target).where(target.c.id == row_id).values(**changes))
                if result.rowcount == 0:
                    raise RowNotFoundError(f"No row with id {row_id} in {table}.", status_code=404, table=table)
                stored = self._fetch_by_id(session, target, row_id)
        except SQLAlchemyError as exc:
            raise self._fail(target, "update", exc) from exc

        return stored

    def delete(self, table: str, row_id: str) -> None:
        target = self._table(table)
        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(delete(target).where(target.c.id == row_id))
                if result.rowcount == 0:
                    raise RowNotFoundError(f"No row with id {row_id} in {table}.", status_code=404, table=table)
        except SQLAlchemyError as exc:
            raise self._fail(target, "delete", exc) from exc

    def ping(self) -> bool:
        return verify_database_connection(self._session_factory.kw.get("bind"))
