"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from runctl.config.logging import bind_command, bind_service, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    runctl = logging.getLogger("runctl")
    runctl_level = runctl.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    runctl.setLevel(runctl_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("runctl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger("runctl").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("runctl.test").warning("json test", service="demo")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["service"] == "demo"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "runctl.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("runctl.runtime.local").debug("Local runtime started")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Local runtime started"
        assert parsed["level"] == "debug"

    def test_httpx_info_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("httpx").info("HTTP Request: POST /runtime/list")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestCommandContext:
    def test_bound_fields_on_every_record(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        bind_command("kill", local="true")
        bind_service("demo", "1.0")
        logging.getLogger("runctl.services").debug("Deleting")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["op"] == "kill"
        assert parsed["local"] == "true"
        assert parsed["service"] == "demo"
        assert parsed["version"] == "1.0"
        structlog.contextvars.clear_contextvars()

    def test_new_command_clears_previous_service(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        bind_command("run")
        bind_service("old")
        bind_command("ps")
        logging.getLogger("runctl.services").debug("Listing")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["op"] == "ps"
        assert "service" not in parsed
        structlog.contextvars.clear_contextvars()
