from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pipeline_crm.auth.user_context import UserContext
from pipeline_crm.core.exceptions import GatewayError
from pipeline_crm.database.db import enable_sqlite_foreign_keys
from pipeline_crm.database.models import Base
from pipeline_crm.gateway.base import PersistenceGateway
from pipeline_crm.gateway.sql_gateway import SqlGateway


class FlakyGateway(PersistenceGateway):
    """Wraps a real gateway and rejects selected operations.

    `fail_on` holds method names ("insert") or (method, table) pairs
    (("insert", "prospect_activities")).
    """

    def __init__(self, inner: PersistenceGateway, fail_on=()) -> None:
        self.inner = inner
        self.fail_on = set(fail_on)

    def _check(self, method: str, table: str) -> None:
        if method in self.fail_on or (method, table) in self.fail_on:
            raise GatewayError(f"{method} on {table} rejected", status_code=500, table=table)

    def select(self, table, *, filters=None, order_by=None, descending=False):
        self._check("select", table)
        return self.inner.select(table, filters=filters, order_by=order_by, descending=descending)

    def insert(self, table, row):
        self._check("insert", table)
        return self.inner.insert(table, row)

    def update(self, table, row_id, values):
        self._check("update", table)
        return self.inner.update(table, row_id, values)

    def delete(self, table, row_id):
        self._check("delete", table)
        return self.inner.delete(table, row_id)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def gateway(session_factory):
    return SqlGateway(session_factory)


@pytest.fixture
def user():
    return UserContext(user_id="user-1", email="owner@example.com")


@pytest.fixture
def flaky(gateway):
    """Factory for a gateway that rejects the given operations."""

    def _build(fail_on=()):
        return FlakyGateway(gateway, fail_on=fail_on)

    return _build
