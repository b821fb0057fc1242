"""Tests for logging setup module."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from imgdrop.logging_setup import configure_logging, reset_request_id, set_request_id

QUIET = ("boto3", "botocore", "s3transfer", "urllib3")


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo configure_logging so other tests keep pytest's capture handlers."""
    root = logging.getLogger()
    saved = (root.level, root.handlers[:], {name: logging.getLogger(name).level for name in QUIET})

    yield

    level, handlers, quiet_levels = saved
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)


class TestRequestIdInjection:
    def test_injects_request_id(self, capsys: pytest.CaptureFixture[str]) -> None:
        # Given: Logging configured with a formatter showing request_id
        configure_logging(log_level="INFO")
        logging.getLogger().handlers[0].setFormatter(logging.Formatter("%(request_id)s %(message)s"))
        token = set_request_id("req42")

        # When: Logging a message
        try:
            logging.getLogger("test").info("hello")
        finally:
            reset_request_id(token)

        # Then: Output includes the request id
        captured = capsys.readouterr().out.strip().splitlines()
        assert any("req42 hello" in line for line in captured)

    def test_placeholder_outside_requests(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="INFO")
        logging.getLogger().handlers[0].setFormatter(logging.Formatter("%(request_id)s %(message)s"))

        logging.getLogger("test").info("startup")

        captured = capsys.readouterr().out.strip().splitlines()
        assert any("- startup" in line for line in captured)


class TestLoggingExtras:
    def test_extras_render_as_json_without_request_id(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        # Given: Logging configured with the JSON extras formatter
        configure_logging(log_level="INFO")

        # When: Logging with extra fields
        logging.getLogger("test").info("stored", extra={"key": "a/B.png", "size": 8})

        # Then: Extras are appended as JSON and request_id is not repeated
        lines = capsys.readouterr().out.strip().splitlines()
        json_start = next(index for index, line in enumerate(lines) if line.strip().startswith("{"))
        extras = json.loads("\n".join(lines[json_start:]))
        assert extras == {"key": "a/B.png", "size": 8}


class TestConfigureLogging:
    def test_level_filters_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="WARNING")

        logging.getLogger("test").info("quiet")
        logging.getLogger("test").warning("loud")

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "loud" in out

    def test_suppresses_third_party_loggers(self) -> None:
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("botocore").level == logging.WARNING

    def test_console_format_env_override(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("CONSOLE_LOG_FORMAT", "CUSTOM %(levelname)s %(message)s")
        configure_logging(log_level="INFO")

        logging.getLogger("test").info("hi")

        assert "CUSTOM INFO hi" in capsys.readouterr().out
