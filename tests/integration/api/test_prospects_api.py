from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from pipeline_crm.api import prospects as prospects_endpoints
from pipeline_crm.api._authz import get_gateway, get_repository
from pipeline_crm.auth.jwt import decode_jwt
from pipeline_crm.core.config import get_config
from pipeline_crm.main import app
from pipeline_crm.services.prospect_repository import ProspectRepository

PREFIX = "/api/v1"


@pytest.fixture
def client(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    response = client.post(f"{PREFIX}/auth/login", json={"email": "Owner@Example.com", "password": "correct-horse"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_requests_without_token_are_rejected(client):
    assert client.get(f"{PREFIX}/prospects").status_code == 401
    assert client.get(f"{PREFIX}/dashboard", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get(f"{PREFIX}/dashboard", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_health_reports_gateway_backend(client):
    body = client.get(f"{PREFIX}/health").json()

    assert body["status"] == "ok"
    assert body["gateway"] in {"sql", "rest"}


def test_login_does_not_check_password_and_derives_user_from_email(client):
    secret = get_config().JWT_SECRET
    first = client.post(f"{PREFIX}/auth/login", json={"email": "owner@example.com", "password": "correct-horse"})
    second = client.post(f"{PREFIX}/auth/login", json={"email": "OWNER@example.com", "password": "anything-else"})

    first_claims = decode_jwt(first.json()["access_token"], secret=secret)
    second_claims = decode_jwt(second.json()["access_token"], secret=secret)
    assert first.status_code == second.status_code == 200
    assert first_claims["sub"] == second_claims["sub"]
    assert second_claims["email"] == "owner@example.com"


def test_refresh_issues_new_access_token(client):
    tokens = client.post(f"{PREFIX}/auth/login", json={"email": "owner@example.com", "password": "correct-horse"}).json()

    refreshed = client.post(f"{PREFIX}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    rejected = client.post(f"{PREFIX}/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]
    assert rejected.status_code == 401


def test_prospect_lifecycle(client, auth_headers):
    created = client.post(f"{PREFIX}/prospects", headers=auth_headers)
    assert created.status_code == 201
    prospect = created.json()
    assert prospect["company_name"] == "New Company"
    assert prospect["assigned_to"] == "owner@example.com"
    assert prospect["current_stage"] == 1
    prospect_id = prospect["id"]

    moved = client.patch(f"{PREFIX}/prospects/{prospect_id}", json={"current_stage": 2}, headers=auth_headers)
    assert moved.status_code == 200
    assert moved.json()["current_stage"] == 2

    activities = client.get(f"{PREFIX}/prospects/{prospect_id}/activities", headers=auth_headers).json()
    assert sorted(a["activity_type"] for a in activities) == ["prospect_created", "stage_updated"]
    assert all(a["created_by"] == "owner@example.com" for a in activities)

    saved = client.put(
        f"{PREFIX}/prospects/{prospect_id}/stages/2",
        json={"budget_range": "50k-80k", "qualification_score": 70},
        headers=auth_headers,
    )
    assert saved.status_code == 200
    assert saved.json()["stage_progress"]["stage2"]["budget_range"] == "50k-80k"

    stage = client.get(f"{PREFIX}/prospects/{prospect_id}/stages/2", headers=auth_headers).json()
    assert stage["data"]["qualification_score"] == 70
    assert client.get(f"{PREFIX}/prospects/{prospect_id}/stages/6", headers=auth_headers).status_code == 422

    dashboard = client.get(f"{PREFIX}/dashboard", params={"search": "new co"}, headers=auth_headers).json()
    assert dashboard["metrics"]["total_count"] == 1
    assert dashboard["metrics"]["active_count"] == 1
    assert [column["count"] for column in dashboard["columns"]] == [0, 1, 0, 0, 0]

    assert client.delete(f"{PREFIX}/prospects/{prospect_id}", headers=auth_headers).status_code == 204
    assert client.get(f"{PREFIX}/prospects/{prospect_id}", headers=auth_headers).status_code == 404
    assert client.get(f"{PREFIX}/prospects/{prospect_id}/activities", headers=auth_headers).json() == []


def test_create_with_payload_and_search(client, auth_headers):
    payload = {
        "company_name": "ACME Corp",
        "contact_name": "Jane Doe",
        "first_contact_date": "2026-02-01",
        "assigned_to": "owner@example.com",
        "estimated_value": 15000,
    }
    assert client.post(f"{PREFIX}/prospects", json=payload, headers=auth_headers).status_code == 201
    client.post(f"{PREFIX}/prospects", headers=auth_headers)

    listed = client.get(f"{PREFIX}/prospects", params={"search": "acme"}, headers=auth_headers).json()

    assert [p["company_name"] for p in listed] == ["ACME Corp"]


def test_update_errors_map_to_http_status(client, auth_headers):
    missing = client.patch(f"{PREFIX}/prospects/missing", json={"next_step": "call"}, headers=auth_headers)
    unknown = client.patch(f"{PREFIX}/prospects/missing", json={"favourite_colour": "blue"}, headers=auth_headers)

    assert missing.status_code == 404
    assert unknown.status_code == 422


def test_get_prospect_raises_not_found_when_called_directly(gateway, user):
    repository = ProspectRepository(gateway)

    with pytest.raises(HTTPException) as exc:
        prospects_endpoints.get_prospect("missing", user=user, repository=repository)
    assert exc.value.status_code == 404


def test_dashboard_reports_gateway_failure(client, auth_headers, flaky):
    app.dependency_overrides[get_repository] = lambda: ProspectRepository(flaky({"select"}))

    response = client.get(f"{PREFIX}/dashboard", headers=auth_headers)

    assert response.status_code == 502
