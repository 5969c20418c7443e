"""Hosted gateway client speaking the PostgREST query protocol over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests
from pydantic_core import to_jsonable_python

from pipeline_crm.core.exceptions import GatewayError, RowNotFoundError
from pipeline_crm.gateway.base import KNOWN_TABLES, PersistenceGateway, Row

logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class RestGateway(PersistenceGateway):
    """Gateway backed by a hosted Postgres exposed through PostgREST.

    Requests carry the project's anon key; when the caller supplies a user
    access token it is forwarded so row-level policies apply to that user.
    No retries are attempted and no timeout is set unless configured.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.http = session or requests.Session()

    def with_access_token(self, access_token: str | None) -> "RestGateway":
        """Return a gateway sharing this connection pool but acting as another user."""
        return RestGateway(
            base_url=self.base_url,
            api_key=self.api_key,
            access_token=access_token,
            timeout=self.timeout,
            session=self.http,
        )

    def _headers(self, prefer_representation: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Accept": "application/json",
        }
        if prefer_representation:
            headers["Prefer"] = "return=representation"
        return headers

    def _url(self, table: str) -> str:
        if table not in KNOWN_TABLES:
            raise GatewayError(f"Unknown table: {table}", status_code=404, table=table)
        return f"{self.base_url}/rest/v1/{table}"

    def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str],
        payload: Any = None,
        prefer_representation: bool = False,
    ) -> Any:
        url = self._url(table)
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=to_jsonable_python(payload) if payload is not None else None,
                headers=self._headers(prefer_representation=prefer_representation),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error(
                "gateway.request_failed",
                extra={"event": "gateway.request_failed", "table": table},
            )
            raise GatewayError(f"Gateway request failed: {exc}", table=table) from exc

        if not response.ok:
            raise self._error_from_response(response, table)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError("Gateway returned a non-JSON response.", status_code=response.status_code, table=table) from exc

    @staticmethod
    def _error_from_response(response: requests.Response, table: str) -> GatewayError:
        message = response.reason or "Gateway error"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or message
            if body.get("details"):
                message = f"{message} ({body['details']})"
        logger.warning(
            "gateway.response_error",
            extra={"event": "gateway.response_error", "table": table, "status_code": response.status_code},
        )
        return GatewayError(message, status_code=response.status_code, table=table)

    @staticmethod
    def _single(rows: Any, table: str, row_id: str | None = None) -> Row:
        if not isinstance(rows, list) or not rows:
            if row_id is not None:
                raise RowNotFoundError(f"No row with id {row_id} in {table}.", status_code=404, table=table)
            raise GatewayError(f"Gateway returned no row for {table}.", table=table)
        return dict(rows[0])

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": "*"}
        for key, value in (filters or {}).items():
            params[key] = f"eq.{_filter_value(value)}"
        if order_by is not None:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        rows = self._request("GET", table, params)
        return [dict(row) for row in rows or []]

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        rows = self._request(
            "POST",
            table,
            params={"select": "*"},
            payload=[dict(row)],
            prefer_representation=True,
        )
        return self._single(rows, table)

    def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> Row:
        if "id" in values:
            raise GatewayError("Row identity cannot be updated.", status_code=400, table=table)
        rows = self._request(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}", "select": "*"},
            payload=dict(values),
            prefer_representation=True,
        )
        return self._single(rows, table, row_id=row_id)

    def delete(self, table: str, row_id: str) -> None:
        rows = self._request(
            "DELETE",
            table,
            params={"id": f"eq.{row_id}"},
            prefer_representation=True,
        )
        self._single(rows, table, row_id=row_id)

    def ping(self) -> bool:
        try:
            response = self.http.get(f"{self.base_url}/rest/v1/", headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.error("gateway.ping_failed: %s", exc, extra={"event": "gateway.ping_failed"})
            return False
        return response.ok
