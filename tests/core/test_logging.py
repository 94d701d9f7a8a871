"""Tests for evaluation context, logging setup and settings."""

import logging
from logging.handlers import RotatingFileHandler

import pytest
import structlog
from structlog.testing import capture_logs

from progression.config.settings import Settings
from progression.core.context import (
    clear_context,
    evaluation_context,
    get_context,
    get_track_id,
    get_user_id,
    set_request_id,
)
from progression.core.exceptions import (
    CatalogValidationError,
    InvalidPolicyError,
    InvalidTransitionError,
    LessonLockedError,
    NotFoundError,
    ProgressionError,
)
from progression.core.logging import (
    add_app_info_processor,
    add_context_processor,
    configure_structlog,
)


@pytest.fixture(autouse=True)
def _reset_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def restore_logging():
    """Undo global logging configuration after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestEvaluationContext:
    """Tests for contextvars binding."""

    def test_binds_and_restores(self):
        with evaluation_context(user_id="u1", track_id="T1"):
            assert get_user_id() == "u1"
            assert get_track_id() == "T1"
        assert get_user_id() is None
        assert get_track_id() is None

    def test_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with evaluation_context(user_id="u1"):
                raise RuntimeError("boom")
        assert get_user_id() is None

    def test_nested_contexts(self):
        with evaluation_context(user_id="u1", track_id="T1"):
            with evaluation_context(user_id="u1", track_id="T2"):
                assert get_track_id() == "T2"
            assert get_track_id() == "T1"

    def test_get_context_omits_empty_values(self):
        assert get_context() == {}
        request_id = set_request_id()
        with evaluation_context(user_id="u1"):
            assert get_context() == {"request_id": request_id, "user_id": "u1"}

    def test_set_request_id_keeps_given_value(self):
        assert set_request_id("req-1") == "req-1"
        assert get_context() == {"request_id": "req-1"}


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_context_processor_adds_bound_values(self):
        with evaluation_context(user_id="u1", track_id="T1"):
            event = add_context_processor(None, "info", {"event": "x"})
        assert event["user_id"] == "u1"
        assert event["track_id"] == "T1"

    def test_context_processor_keeps_explicit_values(self):
        with evaluation_context(user_id="u1"):
            event = add_context_processor(None, "info", {"event": "x", "user_id": "u2"})
        assert event["user_id"] == "u2"

    def test_app_info_processor(self):
        processor = add_app_info_processor("progression", "testing")
        event = processor(None, "info", {"event": "x"})
        assert event["app"] == "progression"
        assert event["environment"] == "testing"


class TestConfigureStructlog:
    """Tests for logging configuration."""

    def test_console_only(self, restore_logging):
        configure_structlog(Settings(log_format="console", log_to_file=False))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO
        assert logging.getLogger("cassandra").level == logging.WARNING

    def test_json_with_file_output(self, restore_logging, tmp_path):
        settings = Settings(
            log_format="json",
            log_to_file=True,
            log_level="DEBUG",
            app_name="progression-test",
        )

        configure_structlog(settings, log_dir=tmp_path / "logs")

        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert (tmp_path / "logs" / "progression-test.log").exists()


class TestServiceLogging:
    """The write path logs accepted and rejected changes."""

    @pytest.mark.asyncio
    async def test_status_change_logged(self, progress_service):
        with capture_logs() as logs:
            await progress_service.complete_lesson("u1", "T1", "m0", "L1")

        changed = [e for e in logs if e["event"] == "lesson_status_changed"]
        assert len(changed) == 1
        assert changed[0]["lesson_id"] == "L1"
        assert changed[0]["previous"] == "not_started"
        assert changed[0]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_locked_rejection_logged(self, progress_service):
        with capture_logs() as logs:
            with pytest.raises(LessonLockedError):
                await progress_service.complete_lesson("u1", "T1", "m0", "L2")

        (rejected,) = [e for e in logs if e["event"] == "lesson_status_rejected"]
        assert rejected["reason"] == "locked"
        assert rejected["log_level"] == "warning"


class TestSettings:
    """Tests for settings defaults."""

    def test_defaults(self):
        settings = Settings()
        assert settings.recommendation_limit == 6
        assert settings.default_min_completion_percentage == 100
        assert settings.is_production is False

    def test_environment_flags(self):
        assert Settings(environment="production").is_production is True
        assert Settings(environment="testing").is_testing is True


class TestExceptions:
    """Tests for error codes."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (NotFoundError(), "not_found"),
            (CatalogValidationError(), "invalid_catalog"),
            (InvalidTransitionError(), "invalid_transition"),
            (LessonLockedError(), "lesson_locked"),
            (InvalidPolicyError(), "invalid_policy"),
        ],
    )
    def test_codes(self, error, code):
        assert isinstance(error, ProgressionError)
        assert error.code == code
        assert str(error) == error.message

    def test_locked_is_a_transition_error(self):
        assert issubclass(LessonLockedError, InvalidTransitionError)
