"""Unit tests for JSON Schema export functionality."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from hal_mapper.config.schema import SCHEMA_VERSION
from hal_mapper.config.schema_export import (
    export_json_schema,
    export_json_schema_string,
    get_schema_version,
    validate_project_against_schema,
)


class TestExportJsonSchema:
    """Tests for JSON Schema export."""

    def test_export_includes_schema_keyword(self) -> None:
        schema = export_json_schema()
        assert "json-schema.org" in schema["$schema"]

    def test_export_includes_title(self) -> None:
        schema = export_json_schema()
        assert schema["title"] == "HAL Mapper Project Schema"

    def test_export_includes_metadata(self) -> None:
        schema = export_json_schema()
        metadata = schema["x-hal-mapper"]
        assert metadata["version"] == SCHEMA_VERSION
        assert metadata["generator"] == "hal-mapper"
        assert "generated_at" in metadata

    def test_fixed_generation_time(self) -> None:
        when = datetime(2000, 1, 1, tzinfo=UTC)
        schema = export_json_schema(generated_at=when)
        assert schema["x-hal-mapper"]["generated_at"] == "2000-01-01T00:00:00+00:00"

    def test_export_without_metadata(self) -> None:
        schema = export_json_schema(include_metadata=False)
        assert "$schema" not in schema
        assert "x-hal-mapper" not in schema

    def test_export_with_custom_version(self) -> None:
        schema = export_json_schema(version="2.0.0")
        assert schema["x-hal-mapper"]["version"] == "2.0.0"
        assert schema["$id"].endswith("/v2.0.0")

    def test_properties_use_wire_names(self) -> None:
        schema = export_json_schema()
        assert set(schema["properties"]) == {"schemaVersion", "config", "appSignals"}
        assert "comDevices" in schema["$defs"]["ConfigurationModel"]["properties"]

    def test_export_is_valid_json(self) -> None:
        schema = export_json_schema()
        assert json.loads(json.dumps(schema)) == schema


class TestExportJsonSchemaString:
    """Tests for JSON Schema string export."""

    def test_export_is_valid_json_string(self) -> None:
        schema = json.loads(export_json_schema_string())
        assert schema["title"] == "HAL Mapper Project Schema"

    def test_export_with_custom_indent(self) -> None:
        result = export_json_schema_string(indent=4)
        assert any(line.startswith("    ") for line in result.split("\n"))


class TestGetSchemaVersion:
    """Tests for schema version retrieval."""

    def test_returns_version_string(self) -> None:
        assert get_schema_version() == SCHEMA_VERSION

    def test_version_is_semver_like(self) -> None:
        assert len(get_schema_version().split(".")) == 3


class TestValidateProjectAgainstSchema:
    """Tests for project validation."""

    def test_valid_minimal_project(self) -> None:
        assert validate_project_against_schema({"config": {"id": "cfg_1"}}) == []

    def test_valid_project_with_inventory(self) -> None:
        project = {
            "config": {
                "id": "cfg_1",
                "comDevices": [
                    {
                        "id": "dev_1",
                        "templateModel": "Generic-Modbus",
                        "instanceName": "Meter-1",
                        "protocol": "modbus_tcp",
                        "ipAddress": "10.0.0.20",
                    }
                ],
                "mappings": [
                    {"id": "m1", "appSignalId": "s1", "grounded": True, "groundValue": "0"}
                ],
            },
            "appSignals": [
                {"id": "s1", "componentName": "Tank_01", "signalName": "Level",
                 "signalType": "AI"},
            ],
        }
        assert validate_project_against_schema(project) == []

    def test_missing_required_field(self) -> None:
        errors = validate_project_against_schema({"config": {"name": "No id"}})
        assert errors == ["config.id: Field required"]

    def test_invalid_enum(self) -> None:
        project = {
            "config": {"id": "c"},
            "appSignals": [
                {"id": "s1", "componentName": "P", "signalName": "X", "signalType": "PWM"}
            ],
        }
        errors = validate_project_against_schema(project)
        assert len(errors) == 1
        assert errors[0].startswith("appSignals.0.signalType:")

    def test_unknown_key(self) -> None:
        errors = validate_project_against_schema({"config": {"id": "c"}, "random": "data"})
        assert errors == ["random: Extra inputs are not permitted"]

    def test_empty_project(self) -> None:
        assert validate_project_against_schema({}) == ["config: Field required"]
