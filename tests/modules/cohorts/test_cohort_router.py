"""
Tests for the cohort session endpoints.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from academy.core.database import get_db
from academy.core.session import ADMIN_COOKIE_NAME, get_admin_sessions
from academy.modules.cohorts import admin_router, router
from academy.modules.cohorts.models import CohortSession, CohortSessionStatus
from academy.modules.cohorts.service import (
    BulkGenerationSummary,
    CohortGenerationResult,
    CohortNotFoundError,
    InvalidCohortDatesError,
)

SERVICE = "academy.modules.cohorts.service"


@pytest.fixture
def client(mock_db, admin_sessions):
    app = FastAPI()
    app.include_router(admin_router, prefix="/api/admin/cohorts")
    app.include_router(router, prefix="/api/cohorts")
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_admin_sessions] = lambda: admin_sessions
    return TestClient(app, base_url="https://testserver")


@pytest.fixture
def admin_cookie(admin_sessions):
    token = admin_sessions.sign(admin_sessions.new_payload("admin-1", "ops@example.com"))
    return {"Cookie": f"{ADMIN_COOKIE_NAME}={token}"}


class TestGenerateSessions:
    """Tests for POST /admin/cohorts/{id}/generate-sessions."""

    def test_requires_admin(self, client):
        """Anonymous requests are rejected."""
        response = client.post(f"/api/admin/cohorts/{uuid4()}/generate-sessions")
        assert response.status_code == 401

    def test_success(self, client, admin_cookie):
        """Returns the generation result."""
        cohort_id = str(uuid4())
        with patch(
            f"{SERVICE}.regenerate_sessions_for_cohort", new_callable=AsyncMock
        ) as mock_generate:
            mock_generate.return_value = CohortGenerationResult(
                cohort_id=cohort_id, cohort_name="Spring", sessions_generated=6
            )

            response = client.post(
                f"/api/admin/cohorts/{cohort_id}/generate-sessions", headers=admin_cookie
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "result": {
                "cohort_id": cohort_id,
                "cohort_name": "Spring",
                "sessions_generated": 6,
                "error": None,
            },
        }

    def test_not_found(self, client, admin_cookie):
        """Unknown cohorts are 404."""
        with patch(
            f"{SERVICE}.regenerate_sessions_for_cohort", new_callable=AsyncMock
        ) as mock_generate:
            mock_generate.side_effect = CohortNotFoundError()

            response = client.post(
                f"/api/admin/cohorts/{uuid4()}/generate-sessions", headers=admin_cookie
            )

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "COHORT_NOT_FOUND"

    def test_invalid_dates(self, client, admin_cookie):
        """Invalid cohort dates are 400 with the reason."""
        with patch(
            f"{SERVICE}.regenerate_sessions_for_cohort", new_callable=AsyncMock
        ) as mock_generate:
            mock_generate.side_effect = InvalidCohortDatesError("Start date must be before end date")

            response = client.post(
                f"/api/admin/cohorts/{uuid4()}/generate-sessions", headers=admin_cookie
            )

        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Start date must be before end date"

    def test_malformed_id(self, client, admin_cookie):
        """Non-UUID ids fail validation."""
        response = client.post("/api/admin/cohorts/not-a-uuid/generate-sessions", headers=admin_cookie)
        assert response.status_code == 422


class TestListSessions:
    """Tests for GET /admin/cohorts/{id}/sessions."""

    def test_lists_sessions(self, client, admin_cookie):
        """Sessions are returned in order with the cohort details."""
        cohort = MagicMock()
        cohort.id = str(uuid4())
        cohort.name = "Spring"
        cohort.start_date = date(2024, 1, 1)
        cohort.end_date = date(2024, 1, 7)

        session = MagicMock(spec=CohortSession)
        session.id = str(uuid4())
        session.session_number = 1
        session.session_date = date(2024, 1, 1)
        session.status = CohortSessionStatus.SCHEDULED

        with patch(f"{SERVICE}.list_sessions", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = (cohort, [session])

            response = client.get(f"/api/admin/cohorts/{cohort.id}/sessions", headers=admin_cookie)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["start_date"] == "2024-01-01"
        assert body["sessions"][0]["session_date"] == "2024-01-01"
        assert body["sessions"][0]["status"] == "scheduled"


class TestGenerateAllSessions:
    """Tests for POST /cohorts/generate-all-sessions."""

    def test_summary(self, client, admin_cookie):
        """The bulk summary is returned as-is."""
        summary = BulkGenerationSummary(
            total_cohorts=2,
            successful=1,
            failed=1,
            total_sessions_generated=6,
            results=[
                CohortGenerationResult(cohort_id="a", cohort_name="A", sessions_generated=6),
                CohortGenerationResult(
                    cohort_id="b",
                    cohort_name="B",
                    error="No valid session dates could be generated",
                ),
            ],
        )
        with patch(f"{SERVICE}.regenerate_all_sessions", new_callable=AsyncMock) as mock_all:
            mock_all.return_value = summary

            response = client.post("/api/cohorts/generate-all-sessions", headers=admin_cookie)

        assert response.status_code == 200
        body = response.json()
        assert body["total_cohorts"] == 2
        assert body["failed"] == 1
        assert body["results"][1]["error"] == "No valid session dates could be generated"

    def test_requires_admin(self, client):
        """Anonymous requests are rejected."""
        assert client.post("/api/cohorts/generate-all-sessions").status_code == 401
