"""Tests for settings, logging setup and session handling."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import structlog
from pydantic import ValidationError

from auditable.config import Settings, get_settings
from auditable.core.database import session as session_module
from auditable.core.errors import AppException, EntityNotFoundError, NotFoundError
from auditable.core.logging import configure_logging


SRC_PATH = Path(__file__).parent.parent.parent / "src"


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.audit_ignore_fields == [
            "created",
            "updated",
            "modified",
            "created_at",
            "updated_at",
        ]
        assert settings.audit_loose_comparison is False
        assert settings.audit_atomic_writes is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AUDITABLE_AUDIT_LOOSE_COMPARISON", "true")
        monkeypatch.setenv("AUDITABLE_AUDIT_IGNORE_FIELDS", '["stamp"]')
        monkeypatch.setenv("AUDITABLE_ENVIRONMENT", "production")

        settings = Settings()

        assert settings.audit_loose_comparison is True
        assert settings.audit_ignore_fields == ["stamp"]
        assert settings.is_production is True

    def test_ignores_unprefixed_host_variables(self, monkeypatch):
        """Test a host application's own LOG_LEVEL and DATABASE_URL are not read."""
        monkeypatch.setenv("LOG_LEVEL", "trace")
        monkeypatch.setenv("DATABASE_URL", "mysql://u:p@h/db")

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.database_url == "sqlite:///./auditable.db"

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configures_structlog(self):
        configure_logging(Settings(log_level="WARNING"))

        config = structlog.get_config()
        assert structlog.contextvars.merge_contextvars in config["processors"]
        assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_production_renders_json(self):
        configure_logging(Settings(environment="production"))

        renderer = structlog.get_config()["processors"][-1]
        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def teardown_method(self):
        structlog.reset_defaults()


class TestGetSession:
    """Tests for get_session."""

    def test_commits_and_closes(self):
        session = MagicMock()

        with patch.object(
            session_module, "get_session_factory", return_value=MagicMock(return_value=session)
        ):
            sessions = session_module.get_session()
            assert next(sessions) is session
            with pytest.raises(StopIteration):
                next(sessions)

        session.commit.assert_called_once()
        session.rollback.assert_not_called()
        session.close.assert_called_once()

    def test_rolls_back_on_error(self):
        session = MagicMock()

        with patch.object(
            session_module, "get_session_factory", return_value=MagicMock(return_value=session)
        ):
            sessions = session_module.get_session()
            next(sessions)
            with pytest.raises(RuntimeError):
                sessions.throw(RuntimeError("boom"))

        session.commit.assert_not_called()
        session.rollback.assert_called_once()
        session.close.assert_called_once()


class TestGetEngine:
    """Tests for the lazily built engine."""

    def setup_method(self):
        session_module.get_engine.cache_clear()
        session_module.get_session_factory.cache_clear()

    def teardown_method(self):
        session_module.get_engine.cache_clear()
        session_module.get_session_factory.cache_clear()

    def test_engine_uses_configured_url(self):
        settings = Settings(database_url="sqlite://")

        with patch.object(session_module, "get_settings", return_value=settings):
            engine = session_module.get_engine()
            factory = session_module.get_session_factory()

        assert str(engine.url) == "sqlite://"
        assert factory.kw["bind"] is engine
        assert session_module.get_engine() is engine
        engine.dispose()


class TestImport:
    """Tests that importing the package does not depend on host settings."""

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("LOG_LEVEL", "trace"),
            ("DATABASE_URL", "mysql://u:p@h/db"),
            ("AUDITABLE_DATABASE_URL", "mysql://u:p@h/db"),
        ],
    )
    def test_import_with_host_environment(self, tmp_path, name, value):
        """Test the audit engine imports whatever the host environment holds."""
        env = {
            **os.environ,
            "PYTHONPATH": os.pathsep.join([str(SRC_PATH), os.environ.get("PYTHONPATH", "")]),
            name: value,
        }

        result = subprocess.run(
            [sys.executable, "-c", "import auditable.audit"],
            cwd=tmp_path,
            env=env,
            capture_output=True,
            text=True,
        )

        assert result.returncode == 0, result.stderr


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_entity_not_found(self):
        error = EntityNotFoundError(resource="Post", resource_id="42")

        assert isinstance(error, NotFoundError)
        assert isinstance(error, AppException)
        assert error.error_code == "entity_not_found"
        assert error.details == {"resource": "Post", "resource_id": "42"}
        assert str(error) == "Entity to delete was not found"
