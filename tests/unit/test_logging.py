"""Unit tests for logging setup and context binding."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
import structlog

from hal_mapper.domain.model.mapping import Configuration
from hal_mapper.observability.logging import LogContext, bind_project, setup_logging


@pytest.fixture(autouse=True)
def clean_context() -> Iterator[None]:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestBindProject:
    """Tests for tagging log lines with the loaded configuration."""

    def test_binds_configuration(self, config: Configuration) -> None:
        bind_project(config)

        assert structlog.contextvars.get_contextvars() == {
            "project": "prj_1",
            "config_id": config.id,
            "config_version": "0.1",
        }

    def test_falls_back_to_config_id(self, config: Configuration) -> None:
        config.project_id = ""
        bind_project(config)
        assert structlog.contextvars.get_contextvars()["project"] == config.id

    def test_rebinding_replaces_values(self, config: Configuration) -> None:
        bind_project(config)
        config.version = "0.2"
        bind_project(config)
        assert structlog.contextvars.get_contextvars()["config_version"] == "0.2"


class TestLogContext:
    """Tests for scoped context binding."""

    def test_unbinds_on_exit(self, config: Configuration) -> None:
        bind_project(config)
        with LogContext(export_format="xml"):
            assert structlog.contextvars.get_contextvars()["export_format"] == "xml"

        context = structlog.contextvars.get_contextvars()
        assert "export_format" not in context
        assert context["project"] == "prj_1"


class TestSetupLogging:
    """Tests for rendered output."""

    def test_json_lines_carry_project(
        self, config: Configuration, capsys: pytest.CaptureFixture[str]
    ) -> None:
        setup_logging(level="INFO", log_format="json")
        bind_project(config)

        structlog.get_logger("hal_mapper.test").info("Exported", rows=3)

        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "Exported"
        assert line["project"] == "prj_1"
        assert line["config_version"] == "0.1"
        assert line["level"] == "info"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="WARNING", log_format="json")
        structlog.get_logger("hal_mapper.test").info("Hidden")
        assert capsys.readouterr().err == ""
