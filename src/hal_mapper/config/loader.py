"""Project file loading and validation for HAL Mapper."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from pathlib import Path

    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration

import structlog
import yaml
from pydantic import ValidationError

from hal_mapper.config.schema import ApplicationSignalModel, ConfigurationModel, ProjectFile

logger = structlog.get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when project file loading or validation fails."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML (or JSON) file and return its contents as a dictionary.

    Args:
        path: Path to the project file

    Returns:
        Dictionary containing the parsed document

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigurationError(f"Project file not found: {path}")

    if not path.is_file():
        raise ConfigurationError(f"Project path is not a file: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
            if content is None:
                return {}
            if not isinstance(content, dict):
                raise ConfigurationError(
                    f"Project file must be a YAML mapping, got {type(content)}"
                )
            return content
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read project file {path}: {e}") from e


def expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand environment variables in string values.

    Supports $VAR and ${VAR} syntax; unknown variables are left untouched.

    Args:
        config: Project dictionary

    Returns:
        Project dictionary with environment variables expanded
    """

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return os.path.expandvars(value)
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        return value

    return cast("dict[str, Any]", expand_value(config))


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two project dictionaries.

    Override values take precedence. Lists are replaced, not merged.

    Args:
        base: Base project
        override: Override project

    Returns:
        Merged project
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def format_validation_errors(error: ValidationError) -> tuple[str, list[dict[str, Any]]]:
    """Flatten pydantic errors into ``loc: msg`` lines."""
    errors = cast("list[dict[str, Any]]", error.errors())
    lines = []
    for err in errors:
        loc = ".".join(str(x) for x in err["loc"])
        lines.append(f"  - {loc}: {err['msg']}" if loc else f"  - {err['msg']}")
    return "\n".join(lines), errors


def parse_project(data: dict[str, Any]) -> ProjectFile:
    """Validate a project dictionary.

    Raises:
        ConfigurationError: If the dictionary does not match the schema
    """
    try:
        return ProjectFile.model_validate(data)
    except ValidationError as e:
        details, errors = format_validation_errors(e)
        raise ConfigurationError(
            "Project validation failed:\n" + details,
            errors=errors,
        ) from e


def load_project(
    project_path: Path,
    *,
    override_path: Path | None = None,
    expand_env: bool = True,
) -> ProjectFile:
    """Load and validate a project from YAML/JSON file(s).

    Args:
        project_path: Path to the main project file
        override_path: Optional path to an override file
        expand_env: Whether to expand environment variables

    Returns:
        Validated ProjectFile instance

    Raises:
        ConfigurationError: If the project is invalid
    """
    logger.info("Loading project", path=str(project_path))

    project_dict = load_yaml_file(project_path)

    if override_path:
        logger.info("Loading project override", path=str(override_path))
        override_dict = load_yaml_file(override_path)
        project_dict = merge_configs(project_dict, override_dict)

    if expand_env:
        project_dict = expand_env_vars(project_dict)

    project = parse_project(project_dict)

    logger.info(
        "Project loaded successfully",
        name=project.config.name,
        version=project.config.version,
        modules=len(project.config.modules),
        devices=len(project.config.com_devices),
        mappings=len(project.config.mappings),
        app_signals=len(project.app_signals),
    )

    return project


def validate_project_file(project_path: Path) -> list[str]:
    """Validate a project file without keeping the result.

    Args:
        project_path: Path to the project file

    Returns:
        List of validation error messages (empty if valid)
    """
    errors: list[str] = []

    try:
        load_project(project_path)
    except ConfigurationError as e:
        errors.append(str(e))

    return errors


def generate_example_project() -> str:
    """Generate an example project YAML string.

    One DI card, one AI card, a Modbus genset controller and five
    application signals; two bindings and one grounded signal.

    Returns:
        YAML string with an example project
    """

    def channel(module: str, rack: str, slot: int, number: int, kind: str, electrical: str,
                tag: str = "") -> dict[str, Any]:
        return {
            "id": f"{module}_ch{number}",
            "channelNumber": number,
            "signalType": kind,
            "electricalType": electrical,
            "terminal": f"{rack}:{slot}.{number}",
            "tag": tag,
        }

    example = {
        "schemaVersion": "1.0.0",
        "config": {
            "id": "cfg_example",
            "projectId": "prj_example",
            "name": "Pump Skid HAL",
            "version": "0.1",
            "description": "Example I/O binding for a pump skid",
            "modules": [
                {
                    "id": "mod_1",
                    "templateModel": "750-402",
                    "manufacturer": "WAGO",
                    "name": "4-ch DI 24VDC",
                    "rackId": "X100",
                    "rackPosition": 1,
                    "channels": [
                        channel("mod_1", "X100", 1, 1, "DI", "24VDC", "PS-101"),
                        channel("mod_1", "X100", 1, 2, "DI", "24VDC"),
                        channel("mod_1", "X100", 1, 3, "DI", "24VDC"),
                        channel("mod_1", "X100", 1, 4, "DI", "24VDC"),
                    ],
                },
                {
                    "id": "mod_2",
                    "templateModel": "750-455",
                    "manufacturer": "WAGO",
                    "name": "4-ch AI 4-20mA",
                    "rackId": "X100",
                    "rackPosition": 2,
                    "channels": [
                        channel("mod_2", "X100", 2, 1, "AI", "4-20mA", "PT-101"),
                        channel("mod_2", "X100", 2, 2, "AI", "4-20mA"),
                        channel("mod_2", "X100", 2, 3, "AI", "4-20mA"),
                        channel("mod_2", "X100", 2, 4, "AI", "4-20mA"),
                    ],
                },
            ],
            "comDevices": [
                {
                    "id": "dev_1",
                    "templateModel": "DEIF-AGC-4",
                    "manufacturer": "DEIF",
                    "name": "AGC-4 Genset Controller",
                    "instanceName": "DEIF-AGC-4-1",
                    "protocol": "modbus_tcp",
                    "ipAddress": "192.168.1.50",
                    "port": 502,
                    "unitId": 1,
                    "pollRateMs": 1000,
                    "registers": [
                        {
                            "id": "dev_1_reg1",
                            "name": "GenRunning",
                            "signalType": "DI",
                            "dataType": "BOOL",
                            "registerType": "coil",
                            "address": 100,
                            "description": "Generator running",
                        },
                        {
                            "id": "dev_1_reg2",
                            "name": "GenActivePower",
                            "signalType": "AI",
                            "dataType": "FLOAT32",
                            "registerType": "input_register",
                            "address": 1020,
                            "description": "Active power [kW]",
                        },
                    ],
                }
            ],
            "mappings": [
                {
                    "id": "map_1",
                    "source": "hw",
                    "hwChannelId": "mod_2_ch1",
                    "appSignalId": "sig_feedback",
                    "scaling": {"rawMin": 4, "rawMax": 20, "engMin": 0, "engMax": 10,
                                "unit": "bar"},
                },
                {
                    "id": "map_2",
                    "source": "com",
                    "comRegisterId": "dev_1_reg1",
                    "appSignalId": "sig_gen_running",
                },
                {
                    "id": "map_3",
                    "source": "hw",
                    "appSignalId": "sig_enable",
                    "grounded": True,
                    "groundValue": "FALSE",
                    "status": "grounded",
                    "notes": "Grounded - no HW connection",
                },
            ],
        },
        "appSignals": [
            {"id": "sig_feedback", "componentName": "PumpC_01", "signalName": "Feedback",
             "signalType": "AI", "dataType": "REAL", "required": True},
            {"id": "sig_enable", "componentName": "PumpC_01", "signalName": "Enable",
             "signalType": "DO", "dataType": "BOOL", "required": True},
            {"id": "sig_running", "componentName": "PumpC_01", "signalName": "Running",
             "signalType": "DI", "required": True},
            {"id": "sig_gen_running", "componentName": "Genset_01", "signalName": "Running",
             "signalType": "DI", "dataType": "BOOL"},
            {"id": "sig_gen_power", "componentName": "Genset_01", "signalName": "ActivePower",
             "signalType": "AI", "dataType": "REAL"},
        ],
    }

    return yaml.dump(example, default_flow_style=False, sort_keys=False, allow_unicode=True)


def dump_project(config: Configuration, signals: list[ApplicationSignal]) -> str:
    """Serialize a configuration and signal catalog as project YAML.

    Writes whatever the configuration holds. A configuration that passes
    schema validation loads back through ``load_project`` unchanged.
    """
    project = ProjectFile.model_construct(
        config=ConfigurationModel.from_domain(config),
        app_signals=[ApplicationSignalModel.from_domain(s) for s in signals],
    )
    data = project.model_dump(mode="json", by_alias=True, exclude_none=True)
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
