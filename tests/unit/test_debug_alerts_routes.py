"""Tests for the database debug check and the alerts summary."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from supportdesk.api.routes.debug import CREDENTIALS_HINT, UNREACHABLE_HINT, connection_hint

REPOS = "supportdesk.api.routes.debug._get_repositories"


def _repos(users: int = 0, calls: int = 0) -> tuple[MagicMock, MagicMock]:
    user_repo, call_repo = MagicMock(), MagicMock()
    user_repo.count.return_value = users
    call_repo.count.return_value = calls
    return user_repo, call_repo


class TestDbTest:
    @patch(REPOS)
    def test_success_shape(self, mock_repos: MagicMock, client: TestClient) -> None:
        mock_repos.return_value = _repos(users=12, calls=7)
        resp = client.get("/api/debug/db-test")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Database connection successful"
        assert body["stats"]["userCount"] == 12
        assert body["stats"]["callLogCount"] == 7
        assert body["stats"]["responseTimeMs"] >= 0
        assert body["databaseUrl"] == "Not configured (using DB_* vars)"

    @patch(REPOS)
    def test_failure_shape(self, mock_repos: MagicMock, client: TestClient) -> None:
        mock_repos.side_effect = RuntimeError("DPY-6005: cannot connect to database")
        resp = client.get("/api/debug/db-test")
        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "Database connection failed"
        assert "DPY-6005" in body["error"]
        assert body["hint"] == UNREACHABLE_HINT


class TestConnectionHint:
    def test_unreachable(self) -> None:
        assert connection_hint("ORA-12541: TNS:no listener") == UNREACHABLE_HINT

    def test_other_errors(self) -> None:
        assert connection_hint("ORA-01017: invalid username/password") == CREDENTIALS_HINT


class TestAlertsSummary:
    def test_requires_auth(self, client: TestClient) -> None:
        resp = client.get("/api/alerts/summary")
        assert resp.status_code == 401

    def test_zeroed_summary(self, client: TestClient, agent_headers: dict[str, str]) -> None:
        resp = client.get("/api/alerts/summary", headers=agent_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "summary": {"total": 0, "unread": 0, "critical": 0, "warning": 0, "info": 0},
            "alerts": [],
        }
