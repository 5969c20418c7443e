"""Table-scoped persistence contract shared by every gateway backend.

The gateway owns durability, uniqueness and referential cleanup. Callers hand
it JSON-compatible rows (ISO dates, plain dicts and lists) exactly as they would
travel over the hosted query protocol, and get rows back as dictionaries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

PROSPECTS = "prospects"
PROSPECT_ACTIVITIES = "prospect_activities"
PROSPECT_FILES = "prospect_files"
KNOWN_TABLES = frozenset({PROSPECTS, PROSPECT_ACTIVITIES, PROSPECT_FILES})

Row = dict[str, Any]


class PersistenceGateway(ABC):
    """Create/read/update/delete against a named table."""

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        """Return every row matching the equality filters, optionally ordered."""

    @abstractmethod
    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored (with id and timestamps)."""

    @abstractmethod
    def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> Row:
        """Apply a partial update by id and return the updated row."""

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete one row by id."""

    def ping(self) -> bool:
        """Connectivity probe used at startup."""
        return True
