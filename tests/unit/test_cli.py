"""
Unit tests for the ingestion and user-management CLIs.
"""

from unittest.mock import patch

import pytest

from app import models
from app.auth import hash_api_key
from app.cli import ingest as ingest_cli
from app.cli import users as users_cli


def summary(status="completed", errors=None):
    return {
        "status": status,
        "trace_id": "t",
        "duration_ms": 1,
        "provider_results": [
            {"provider": "NewsAPI", "status": "completed", "fetched": 1, "inserted": 1, "updated": 0, "error": None},
        ],
        "errors": errors or [],
    }


class TestIngestCli:
    def test_exit_zero_when_all_succeed(self, capsys):
        with patch("app.services.ingestion.IngestionService.ingest_all", return_value=summary()) as mock_run:
            code = ingest_cli.main(["--provider", "NewsAPI", "--sequential", "--text-logs"])

        assert code == 0
        mock_run.assert_called_once_with(provider_names=["NewsAPI"], concurrent=False)
        assert "NewsAPI: completed" in capsys.readouterr().out

    def test_exit_one_on_provider_errors(self):
        result = summary(status="partial", errors=["The Guardian: fetch failed (HTTP 500)"])

        with patch("app.services.ingestion.IngestionService.ingest_all", return_value=result):
            assert ingest_cli.main(["--text-logs"]) == 1

    def test_exception_never_escapes(self):
        with patch("app.services.ingestion.IngestionService.ingest_all", side_effect=RuntimeError("db down")):
            assert ingest_cli.main(["--text-logs"]) == 1


class TestUsersCli:
    def test_create_user_stores_only_key_hash(self, db):
        user, api_key = users_cli.create_user(db, "Ada", "ada@example.com", ["articles.view"])

        stored = db.query(models.User).one()
        assert stored.api_key_hash == hash_api_key(api_key)
        assert api_key not in stored.api_key_hash
        assert [p.name for p in stored.permissions] == ["articles.view"]

    def test_create_command_defaults_to_all_permissions(self, db, capsys):
        users_cli.main(["create", "--name", "Ada", "--email", "ada@example.com"])

        user = db.query(models.User).filter_by(email="ada@example.com").one()
        assert sorted(p.name for p in user.permissions) == sorted(p.value for p in models.Permission)
        assert "API key (shown once)" in capsys.readouterr().out

    def test_duplicate_email_exits(self, db):
        users_cli.main(["create", "--name", "Ada", "--email", "ada@example.com"])

        with pytest.raises(SystemExit):
            users_cli.main(["create", "--name", "Ada", "--email", "ada@example.com"])

    def test_grant(self, db):
        users_cli.create_user(db, "Ada", "ada@example.com", [])

        users_cli.main(["grant", "ada@example.com", "preferences.view"])

        db.expire_all()
        user = db.query(models.User).one()
        assert user.has_permission("preferences.view")
