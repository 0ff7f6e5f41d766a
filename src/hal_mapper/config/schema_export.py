"""JSON Schema export for HAL Mapper project files.

Exports the project file schema for editor integration and external
validation of hand-written projects.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from hal_mapper.config.schema import SCHEMA_VERSION, ProjectFile


def export_json_schema(
    *,
    version: str | None = None,
    include_metadata: bool = True,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Export ProjectFile as JSON Schema with optional metadata.

    Args:
        version: Schema version to embed. Defaults to SCHEMA_VERSION.
        include_metadata: Whether to include $schema, title, and metadata.
        generated_at: Timestamp recorded in the metadata. Defaults to now.

    Returns:
        JSON Schema dictionary compatible with JSON Schema Draft 2020-12.
    """
    schema = ProjectFile.model_json_schema(by_alias=True, mode="validation")

    if include_metadata:
        schema_version = version or SCHEMA_VERSION
        schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
        schema["$id"] = f"https://hal-mapper.example.com/schemas/project/v{schema_version}"
        schema["title"] = "HAL Mapper Project Schema"
        schema["description"] = (
            "Project file schema for HAL Mapper - bindings between hardware I/O "
            "channels, fieldbus registers and application signals."
        )
        schema["x-hal-mapper"] = {
            "version": schema_version,
            "generated_at": (generated_at or datetime.now(UTC)).isoformat(),
            "generator": "hal-mapper",
        }

    return schema


def export_json_schema_string(
    *,
    version: str | None = None,
    include_metadata: bool = True,
    indent: int = 2,
) -> str:
    """Export ProjectFile as formatted JSON Schema string."""
    schema = export_json_schema(version=version, include_metadata=include_metadata)
    return json.dumps(schema, indent=indent, sort_keys=False, ensure_ascii=False)


def get_schema_version() -> str:
    """Get the current schema version.

    Returns:
        Schema version string in semver format.
    """
    return SCHEMA_VERSION


def validate_project_against_schema(project_dict: dict[str, Any]) -> list[str]:
    """Validate a project dictionary against the schema.

    Args:
        project_dict: Project dictionary to validate.

    Returns:
        List of validation error messages. Empty if valid.
    """
    errors: list[str] = []

    try:
        ProjectFile.model_validate(project_dict)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", []))
            msg = err.get("msg", str(err))
            errors.append(f"{loc}: {msg}" if loc else msg)

    return errors
