"""Unit tests for the command line interface."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import yaml
from typer.testing import CliRunner

from hal_mapper import __version__
from hal_mapper.cli.app import app
from hal_mapper.config.loader import generate_example_project, load_project

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    path = tmp_path / "project.yaml"
    path.write_text(generate_example_project(), encoding="utf-8")
    return path


class TestVersion:
    """Tests for version output."""

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"hal-mapper {__version__}" in result.output

    def test_version_command(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestValidate:
    """Tests for the validate command."""

    def test_valid_project(self, project_file: Path) -> None:
        result = runner.invoke(app, ["validate", str(project_file)])

        assert result.exit_code == 0
        assert "Errors: 0" in result.output
        assert "Project valid!" in result.output

    def test_errors_exit_nonzero(self, project_file: Path) -> None:
        data = yaml.safe_load(project_file.read_text(encoding="utf-8"))
        # DI channel bound to the AI feedback signal
        data["config"]["mappings"][0]["hwChannelId"] = "mod_1_ch2"
        project_file.write_text(yaml.safe_dump(data), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(project_file)])
        assert result.exit_code == 1
        assert "Validation failed" in result.output

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("config:\n  name: no id\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Project invalid" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code != 0


class TestExport:
    """Tests for the export command."""

    def test_xml_to_stdout(self, project_file: Path) -> None:
        result = runner.invoke(app, ["export", str(project_file), "--deterministic"])

        assert result.exit_code == 0
        assert result.stdout.startswith('<?xml version="1.0" encoding="utf-8"?>')
        assert 'exported="2000-01-01T00:00:00Z"' in result.stdout

    def test_gvl_project_name(self, project_file: Path) -> None:
        result = runner.invoke(
            app,
            ["export", str(project_file), "-f", "gvl", "--project-name", "Skid 7", "-d"],
        )
        assert result.exit_code == 0
        assert "// Project: Skid 7 v0.1" in result.stdout

    def test_json_to_file(self, project_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "snapshot.json"
        result = runner.invoke(
            app, ["export", str(project_file), "-f", "json", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert "JSON exported" in result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["config"]["id"] == "cfg_example"

    def test_binary_defaults_to_file(
        self, project_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["export", str(project_file), "-f", "xlsx"])

        assert result.exit_code == 0
        assert (tmp_path / "Pump_Skid_HAL_IO_List_v0.1.xlsx").is_file()

    def test_unknown_format(self, project_file: Path) -> None:
        result = runner.invoke(app, ["export", str(project_file), "-f", "pdf"])
        assert result.exit_code == 1
        assert "Unknown export format" in result.output


class TestSuggest:
    """Tests for the suggest command."""

    def test_lists_suggestions(self, project_file: Path) -> None:
        result = runner.invoke(app, ["suggest", str(project_file)])

        assert result.exit_code == 0
        assert "Suggested Bindings" in result.output
        assert "80%" in result.output

    def test_accept_writes_project(self, project_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "accepted.yaml"
        result = runner.invoke(
            app, ["suggest", str(project_file), "--accept", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert "1 bindings written" in result.output
        config, _ = load_project(output).to_domain()
        mapping = config.mapping_for_signal("sig_gen_power")
        assert mapping.com_register_id == "dev_1_reg2"

    def test_no_suggestions(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("config:\n  id: c\n", encoding="utf-8")

        result = runner.invoke(app, ["suggest", str(path)])
        assert result.exit_code == 0
        assert "No suggestions found" in result.output


class TestTemplatesAndExample:
    """Tests for catalog listing and example generation."""

    def test_modules(self) -> None:
        result = runner.invoke(app, ["templates", "--type", "AO"])
        assert result.exit_code == 0
        assert "750-550" in result.output
        assert "750-402" not in result.output

    def test_devices(self) -> None:
        result = runner.invoke(app, ["templates", "--kind", "devices"])
        assert result.exit_code == 0
        assert "DEIF-AGC-4" in result.output

    def test_unknown_catalog(self) -> None:
        result = runner.invoke(app, ["templates", "--kind", "cables"])
        assert result.exit_code == 1

    def test_generate_example(self, tmp_path: Path) -> None:
        output = tmp_path / "example.yaml"
        result = runner.invoke(app, ["generate-example", "-o", str(output)])

        assert result.exit_code == 0
        assert load_project(output).config.id == "cfg_example"


class TestSchemaCommands:
    """Tests for the schema command group."""

    def test_export_stdout(self) -> None:
        result = runner.invoke(app, ["schema", "export"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["title"]

    def test_validate(self, project_file: Path, tmp_path: Path) -> None:
        assert runner.invoke(app, ["schema", "validate", str(project_file)]).exit_code == 0

        bad = tmp_path / "bad.yaml"
        bad.write_text("random: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["schema", "validate", str(bad)])
        assert result.exit_code == 1
        assert "Schema validation failed" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["schema", "version"])
        assert result.exit_code == 0
        assert "Project schema version" in result.output
