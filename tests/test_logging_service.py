"""Tests for the logging service."""

import json
import logging
import os
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import structlog
from hypothesis import given, settings, strategies as st

from steam_group_stats.services.logging import LoggingService, setup_logging


RESERVED_KEYS = {"event", "level", "logger", "timestamp", "exc_info", "stack_info", "exception"}


def read_json_lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


class TestLoggingService:
    """Test cases for LoggingService."""

    def test_development_logging_format(self) -> None:
        """Development logging uses the console renderer."""
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
                service = LoggingService(log_level="INFO")
                service.configure()

                logger = service.get_logger("test")
                logger.info("test message", key="value")

                output = mock_stdout.getvalue()

            assert "test message" in output
            assert not output.strip().startswith("{")

    def test_file_logging_setup(self) -> None:
        """File logging writes JSON lines to app.log and creates error.log."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
                service = LoggingService(log_level="INFO", log_dir=log_dir)
                service.configure()

                logger = service.get_logger("test")
                logger.info("test file message", group_id="mygroup")

                app_log = log_dir / "app.log"
                assert app_log.exists()
                assert (log_dir / "error.log").exists()

                parsed = read_json_lines(app_log)[-1]
                assert parsed["event"] == "test file message"
                assert parsed["group_id"] == "mygroup"

    def test_error_file_logging(self) -> None:
        """Errors are also written to error.log."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
                service = LoggingService(log_level="DEBUG", log_dir=log_dir)
                service.configure()

                logger = service.get_logger("test")
                logger.info("not an error")
                logger.error("Member resolution failed", group_id="missing")

                entries = read_json_lines(log_dir / "error.log")
                assert [entry["event"] for entry in entries] == ["Member resolution failed"]
                assert entries[0]["level"] == "error"
                assert entries[0]["group_id"] == "missing"

    def test_bound_run_id_is_attached(self) -> None:
        """Context bound with contextvars reaches every event."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
                service = LoggingService(log_level="INFO", log_dir=log_dir)
                service.configure()

                logger = service.get_logger("test")
                with structlog.contextvars.bound_contextvars(run_id="run-1"):
                    logger.info("Wave completed", wave=1)
                logger.info("After run")

                first, second = read_json_lines(log_dir / "app.log")[-2:]
                assert first["run_id"] == "run-1"
                assert "run_id" not in second

    def test_configure_clears_stale_context(self) -> None:
        structlog.contextvars.bind_contextvars(run_id="stale")

        LoggingService(log_level="INFO", tui_mode=True).configure()

        assert structlog.contextvars.get_contextvars() == {}

    def test_tui_mode_has_no_console_handler(self) -> None:
        LoggingService(log_level="INFO", tui_mode=True).configure()

        handlers = logging.getLogger().handlers
        assert not any(type(handler) is logging.StreamHandler for handler in handlers)

    def test_httpx_request_logs_are_quieted(self) -> None:
        LoggingService(log_level="DEBUG", tui_mode=True).configure()
        assert logging.getLogger("httpx").level == logging.WARNING

        LoggingService(log_level="ERROR", tui_mode=True).configure()
        assert logging.getLogger("httpx").level == logging.ERROR


class TestStructuredLoggingProperties:
    """Property-based tests for structured logging consistency."""

    @given(
        log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        logger_name=st.text(min_size=1, max_size=50).filter(lambda x: x.isidentifier() and x != "httpx"),
        message=st.text(min_size=1, max_size=200),
        context_data=st.dictionaries(
            keys=st.text(min_size=1, max_size=20).filter(lambda x: x.isidentifier() and x not in RESERVED_KEYS),
            values=st.one_of(
                st.text(max_size=100),
                st.integers(),
                st.booleans()
            ),
            max_size=5
        )
    )
    @settings(deadline=None, max_examples=30)
    def test_structured_logging_consistency(
        self,
        log_level: str,
        logger_name: str,
        message: str,
        context_data: dict[str, str | int | bool]
    ) -> None:
        """Every event carries its level, logger name and context."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
                service = LoggingService(log_level="DEBUG", log_dir=log_dir, tui_mode=True)
                service.configure()

                logger = service.get_logger(logger_name)
                getattr(logger, log_level.lower())(message, **context_data)

                parsed = read_json_lines(log_dir / "app.log")[-1]

            assert parsed["event"] == message
            assert parsed["level"].upper() == log_level
            assert parsed["logger"] == logger_name
            assert "T" in parsed["timestamp"]
            for key, value in context_data.items():
                assert parsed[key] == value

    @given(
        error_message=st.text(min_size=1, max_size=200),
        exception_type=st.sampled_from([ValueError, RuntimeError, TypeError, OSError]),
    )
    @settings(deadline=None, max_examples=20)
    def test_error_logging_completeness(
        self,
        error_message: str,
        exception_type: type[Exception],
    ) -> None:
        """Exceptions logged with exc_info keep their traceback."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir)
            with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
                service = LoggingService(log_level="DEBUG", log_dir=log_dir, tui_mode=True)
                service.configure()

                logger = service.get_logger("errors")
                try:
                    raise exception_type(error_message)
                except exception_type:
                    logger.error("Error occurred during operation", exc_info=True, error_type=exception_type.__name__)

                parsed = read_json_lines(log_dir / "error.log")[-1]

            assert parsed["level"] == "error"
            assert parsed["error_type"] == exception_type.__name__
            assert "Traceback" in parsed["exception"]
            assert exception_type.__name__ in parsed["exception"]


def test_setup_logging_function() -> None:
    """Test the setup_logging convenience function."""
    with tempfile.TemporaryDirectory() as temp_dir:
        log_dir = Path(temp_dir)

        with patch.dict(os.environ, {}):
            service = setup_logging(
                log_level="DEBUG",
                log_dir=log_dir,
                environment="production",
                tui_mode=True,
            )

            assert isinstance(service, LoggingService)
            assert os.environ["ENVIRONMENT"] == "production"
            assert service.tui_mode is True

        logger = service.get_logger("test_setup")
        logger.info("setup test", component="test")

        parsed = read_json_lines(log_dir / "app.log")[-1]
        assert parsed["event"] == "setup test"
