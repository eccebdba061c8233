"""Tests for the HTTP API with mocked services."""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from standup_tracker.agents.field_draft_agent import FieldDraftAgent
from standup_tracker.api.v1.deps import (
    get_field_draft_agent,
    get_pipeline,
    get_report_store,
    get_standup_service,
)
from standup_tracker.exceptions import InvalidWeekRangeError, StoreQueryError
from standup_tracker.main import app
from standup_tracker.schemas.report import ReportStatus, StandupDay, WeeklyReport, WeeklyReportSummary
from standup_tracker.services.report_pipeline import WeeklyReportPipeline
from standup_tracker.services.report_store import ReportStore
from standup_tracker.services.standup_service import StandupService
from standup_tracker.utils import dates


@pytest.fixture
def sample_report(make_update):
    return WeeklyReport(
        id=7,
        week_start=date(2024, 1, 8),
        week_end=date(2024, 1, 14),
        total_updates=1,
        unique_members=1,
        entries=[StandupDay(date=date(2024, 1, 9), team_members=[make_update("Alice")])],
        summary=WeeklyReportSummary(team_insights="Good week"),
        status=ReportStatus.GENERATED,
    )


@pytest.fixture
def mock_pipeline(sample_report):
    pipeline = Mock(spec=WeeklyReportPipeline)
    pipeline.generate_for_week = AsyncMock(return_value=sample_report)
    pipeline.regenerate_report = AsyncMock(return_value=sample_report)
    return pipeline


@pytest.fixture
def mock_report_store(sample_report):
    store = Mock(spec=ReportStore)
    store.get = AsyncMock(return_value=sample_report)
    store.list_reports = AsyncMock(return_value=[sample_report])
    return store


@pytest.fixture
def mock_standup_service(make_update):
    service = Mock(spec=StandupService)
    service.save_update = AsyncMock(return_value=make_update("Alice"))
    service.get_updates_for_date = AsyncMock(return_value=[make_update("Alice"), make_update("Bob")])
    return service


@pytest.fixture
def mock_draft_agent():
    agent = Mock(spec=FieldDraftAgent)
    agent.generate_field = AsyncMock(return_value="<p>Draft</p>")
    agent.generate_full_report = AsyncMock(
        return_value={"yesterday": "<p>Y</p>", "today": "<p>T</p>", "blockers": "<p>B</p>"}
    )
    return agent


@pytest.fixture
def client(mock_pipeline, mock_report_store, mock_standup_service, mock_draft_agent):
    app.dependency_overrides[get_pipeline] = lambda: mock_pipeline
    app.dependency_overrides[get_report_store] = lambda: mock_report_store
    app.dependency_overrides[get_standup_service] = lambda: mock_standup_service
    app.dependency_overrides[get_field_draft_agent] = lambda: mock_draft_agent
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestStandupEndpoints:

    def test_save_update(self, client, mock_standup_service):
        response = client.post("/api/v1/standups/updates", json={
            "memberId": "alice-1",
            "name": "Alice",
            "role": "Developer",
            "today": "<p>Payments</p>",
            "date": "2024-01-09",
        })

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Alice"
        kwargs = mock_standup_service.save_update.call_args.kwargs
        assert kwargs["member_key"] == "alice-1"
        assert kwargs["on_date"] == date(2024, 1, 9)

    def test_save_update_validation_error(self, client, mock_standup_service):
        mock_standup_service.save_update.side_effect = ValueError("Team member role is required")

        response = client.post("/api/v1/standups/updates", json={"memberId": "a", "name": "A", "role": ""})

        assert response.status_code == 400
        assert response.json()["detail"] == "Team member role is required"

    def test_save_update_store_error(self, client, mock_standup_service):
        mock_standup_service.save_update.side_effect = StoreQueryError("save_standup_update", Exception("down"))

        response = client.post("/api/v1/standups/updates", json={"memberId": "a", "name": "A", "role": "R", "today": "x"})

        assert response.status_code == 500

    def test_today(self, client, mock_standup_service):
        response = client.get("/api/v1/standups/today")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [m["name"] for m in data["teamMembers"]] == ["Alice", "Bob"]
        mock_standup_service.get_updates_for_date.assert_awaited_once_with(dates.reference_date())

    def test_by_date(self, client, mock_standup_service):
        response = client.get("/api/v1/standups/date/2024-01-09")

        assert response.status_code == 200
        assert response.json()["date"] == "2024-01-09"

    def test_draft_all_fields(self, client, mock_draft_agent):
        response = client.post("/api/v1/standups/draft", json={"name": "Alice", "role": "Developer"})

        assert response.status_code == 200
        assert set(response.json()["data"]) == {"yesterday", "today", "blockers"}
        mock_draft_agent.generate_full_report.assert_awaited_once()

    def test_draft_single_field(self, client, mock_draft_agent):
        response = client.post("/api/v1/standups/draft", json={
            "name": "Alice", "role": "Developer", "field": "today", "context": "Sprint 4",
        })

        assert response.json()["data"] == {"today": "<p>Draft</p>"}
        assert mock_draft_agent.generate_field.call_args.kwargs["context"] == "Sprint 4"

    def test_draft_unknown_field(self, client):
        response = client.post("/api/v1/standups/draft", json={"name": "A", "role": "R", "field": "tomorrow"})

        assert response.status_code == 400


class TestGenerateReport:

    def test_generate_explicit_week(self, client, mock_pipeline):
        response = client.post("/api/v1/reports/generate", json={
            "weekStart": "2024-01-08",
            "weekEnd": "2024-01-14",
            "useAi": False,
            "force": True,
        })

        assert response.status_code == 201
        body = response.json()
        assert body["skipped"] is False
        assert body["data"]["weekStart"] == "2024-01-08"
        assert body["data"]["summary"]["teamInsights"] == "Good week"

        args, kwargs = mock_pipeline.generate_for_week.call_args
        assert args[0].week_start == date(2024, 1, 8)
        assert kwargs["use_ai"] is False
        assert kwargs["force"] is True

    def test_defaults_to_current_week(self, client, mock_pipeline):
        response = client.post("/api/v1/reports/generate", json={})

        assert response.status_code == 201
        args, kwargs = mock_pipeline.generate_for_week.call_args
        assert args[0] == dates.current_week()
        assert kwargs["use_ai"] is True
        assert kwargs["force"] is False

    def test_existing_report_skipped(self, client, mock_pipeline):
        mock_pipeline.generate_for_week.return_value = None

        response = client.post("/api/v1/reports/generate", json={})

        assert response.status_code == 200
        assert response.json()["skipped"] is True
        assert response.json()["data"] is None

    def test_inverted_range(self, client, mock_pipeline):
        response = client.post("/api/v1/reports/generate", json={
            "weekStart": "2024-01-14",
            "weekEnd": "2024-01-08",
        })

        assert response.status_code == 400
        mock_pipeline.generate_for_week.assert_not_called()

    def test_half_open_range(self, client):
        response = client.post("/api/v1/reports/generate", json={"weekStart": "2024-01-08"})

        assert response.status_code == 400

    def test_range_too_long(self, client, mock_pipeline):
        mock_pipeline.generate_for_week.side_effect = InvalidWeekRangeError("Date range cannot exceed 14 days")

        response = client.post("/api/v1/reports/generate", json={
            "weekStart": "2024-01-01",
            "weekEnd": "2024-02-01",
        })

        assert response.status_code == 400
        assert "14 days" in response.json()["detail"]

    def test_store_failure(self, client, mock_pipeline):
        mock_pipeline.generate_for_week.side_effect = StoreQueryError("fetch_standup_updates", Exception("down"))

        response = client.post("/api/v1/reports/generate", json={})

        assert response.status_code == 500


class TestReportEndpoints:

    def test_list(self, client, mock_report_store):
        response = client.get("/api/v1/reports?limit=5")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["reports"][0]["id"] == 7
        mock_report_store.list_reports.assert_awaited_once_with(limit=5, offset=0)

    def test_get(self, client):
        response = client.get("/api/v1/reports/7")

        assert response.status_code == 200
        assert response.json()["entries"][0]["teamMembers"][0]["name"] == "Alice"

    def test_get_missing(self, client, mock_report_store):
        mock_report_store.get.return_value = None

        response = client.get("/api/v1/reports/99")

        assert response.status_code == 404

    def test_csv_export(self, client):
        response = client.get("/api/v1/reports/7/csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "weekly-report-2024-01-08-2024-01-14.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == '"Date","Team Member","Role","Yesterday","Today","Blockers"'
        assert lines[1].startswith('"2024-01-09","Alice","Developer"')

    def test_regenerate(self, client, mock_pipeline):
        response = client.post("/api/v1/reports/7/regenerate", json={"customPrompt": "Focus on risks"})

        assert response.status_code == 200
        mock_pipeline.regenerate_report.assert_awaited_once_with(7, custom_prompt="Focus on risks")

    def test_regenerate_missing(self, client, mock_pipeline):
        mock_pipeline.regenerate_report.side_effect = ValueError("Weekly report 99 not found")

        response = client.post("/api/v1/reports/99/regenerate")

        assert response.status_code == 404
