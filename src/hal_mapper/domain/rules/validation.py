"""Validation rules for I/O bindings.

A pure pass over (configuration, application signals) producing an ordered
list of issues. Rules run in a fixed order so output is reproducible:

1. type_mismatch     (error)   source and target signal types differ
2. unmapped_required (warning) required signal has no mapping at all
3. unmapped_hw/com   (info)    channel or register without a mapping
4. duplicate         (error)   source bound by more than one mapping
5. scaling           (warning) analog source bound without scaling
6. com_config        (warning) fieldbus device network or register address invalid

Issues are never persisted; they are recomputed after every mutation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from hal_mapper.config.validators import IPv4AddressValidator, validate_register_address
from hal_mapper.domain.model.catalog import MappingSource

if TYPE_CHECKING:
    from hal_mapper.domain.model.hardware import ApplicationSignal
    from hal_mapper.domain.model.mapping import Configuration

logger = structlog.get_logger(__name__)


class Severity(str, Enum):
    """Issue severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(str, Enum):
    """Issue categories, one per rule."""

    TYPE_MISMATCH = "type_mismatch"
    UNMAPPED_REQUIRED = "unmapped_required"
    UNMAPPED_HW = "unmapped_hw"
    UNMAPPED_COM = "unmapped_com"
    DUPLICATE = "duplicate"
    SCALING = "scaling"
    COM_CONFIG = "com_config"


@dataclass(frozen=True, slots=True)
class Issue:
    """A detected inconsistency.

    Carries the ids of every offending record so a consumer can highlight
    them; ids that do not apply are None.
    """

    severity: Severity
    category: IssueCategory
    message: str
    mapping_id: str | None = None
    hw_channel_id: str | None = None
    com_register_id: str | None = None
    app_signal_id: str | None = None
    device_id: str | None = None


def validate(config: Configuration, signals: list[ApplicationSignal]) -> list[Issue]:
    """Run every rule over the configuration.

    Args:
        config: Configuration to check
        signals: Application signal catalog

    Returns:
        Issues in rule order, then in entity order within each rule
    """
    issues: list[Issue] = []
    issues.extend(_check_type_mismatch(config, signals))
    issues.extend(_check_unmapped_required(config, signals))
    issues.extend(_check_unmapped_sources(config))
    issues.extend(_check_duplicates(config))
    issues.extend(_check_scaling(config))
    issues.extend(_check_com_config(config))

    logger.debug("Validation complete", **summarize(issues))
    return issues


def summarize(issues: list[Issue]) -> dict[str, int]:
    """Count issues per severity (all severities present, possibly zero)."""
    counts = Counter(issue.severity for issue in issues)
    return {severity.value: counts.get(severity, 0) for severity in Severity}


def _check_type_mismatch(
    config: Configuration, signals: list[ApplicationSignal]
) -> list[Issue]:
    channels = {c.id: c for c in config.channels()}
    registers = {r.id: r for r in config.registers()}
    app_by_id = {s.id: s for s in signals}
    issues: list[Issue] = []

    for mapping in config.mappings:
        if mapping.grounded:
            continue
        app = app_by_id.get(mapping.app_signal_id)
        if app is None:
            continue

        if mapping.source is MappingSource.COM:
            register = registers.get(mapping.com_register_id)
            if register and register.signal_type is not app.signal_type:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        category=IssueCategory.TYPE_MISMATCH,
                        message=(
                            f"Type mismatch: COM {register.name} ({register.signal_type.value})"
                            f" → {app.signal_name} ({app.signal_type.value})"
                        ),
                        mapping_id=mapping.id,
                        com_register_id=register.id,
                        app_signal_id=app.id,
                    )
                )
        else:
            channel = channels.get(mapping.hw_channel_id)
            if channel and channel.signal_type is not app.signal_type:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        category=IssueCategory.TYPE_MISMATCH,
                        message=(
                            f"Type mismatch: {channel.terminal} ({channel.signal_type.value})"
                            f" → {app.signal_name} ({app.signal_type.value})"
                        ),
                        mapping_id=mapping.id,
                        hw_channel_id=channel.id,
                        app_signal_id=app.id,
                    )
                )
    return issues


def _check_unmapped_required(
    config: Configuration, signals: list[ApplicationSignal]
) -> list[Issue]:
    # Grounding satisfies a required signal, so any mapping counts.
    mapped = {m.app_signal_id for m in config.mappings}
    return [
        Issue(
            severity=Severity.WARNING,
            category=IssueCategory.UNMAPPED_REQUIRED,
            message=f"Required signal unmapped: {signal.path}",
            app_signal_id=signal.id,
        )
        for signal in signals
        if signal.required and signal.id not in mapped
    ]


def _check_unmapped_sources(config: Configuration) -> list[Issue]:
    issues = [
        Issue(
            severity=Severity.INFO,
            category=IssueCategory.UNMAPPED_HW,
            message=f"HW channel unused: {channel.terminal}",
            hw_channel_id=channel.id,
        )
        for channel in config.unmapped_channels()
    ]

    device_names = {d.id: d.instance_name for d in config.devices}
    issues.extend(
        Issue(
            severity=Severity.INFO,
            category=IssueCategory.UNMAPPED_COM,
            message=(
                f"COM register unused: {device_names.get(register.device_id, '?')}.{register.name}"
            ),
            com_register_id=register.id,
        )
        for register in config.unmapped_registers()
    )
    return issues


def _check_duplicates(config: Configuration) -> list[Issue]:
    seen: dict[str, str] = {}
    issues: list[Issue] = []

    for mapping in config.mappings:
        if mapping.grounded:
            continue
        key = mapping.source_key
        if key in seen:
            issues.append(
                Issue(
                    severity=Severity.ERROR,
                    category=IssueCategory.DUPLICATE,
                    message=f"Source mapped twice: {key} (first by {seen[key]})",
                    mapping_id=mapping.id,
                    hw_channel_id=mapping.hw_channel_id or None,
                    com_register_id=mapping.com_register_id or None,
                    app_signal_id=mapping.app_signal_id,
                )
            )
        else:
            seen[key] = mapping.id
    return issues


def _check_scaling(config: Configuration) -> list[Issue]:
    channel_types = {c.id: c.signal_type for c in config.channels()}
    register_types = {r.id: r.signal_type for r in config.registers()}
    issues: list[Issue] = []

    for mapping in config.mappings:
        if mapping.grounded or mapping.scaling is not None:
            continue
        if mapping.source is MappingSource.COM:
            signal_type = register_types.get(mapping.com_register_id)
        else:
            signal_type = channel_types.get(mapping.hw_channel_id)
        if signal_type is not None and signal_type.is_analog:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    category=IssueCategory.SCALING,
                    message="Analog signal without scaling",
                    mapping_id=mapping.id,
                    hw_channel_id=mapping.hw_channel_id or None,
                    com_register_id=mapping.com_register_id or None,
                    app_signal_id=mapping.app_signal_id,
                )
            )
    return issues


def _check_com_config(config: Configuration) -> list[Issue]:
    ip_validator = IPv4AddressValidator()
    issues: list[Issue] = []

    for device in config.devices:
        message: str | None = None
        if device.protocol.is_serial:
            pass
        elif not device.ip_address:
            message = f'COM device "{device.instance_name}" has no IP address'
        else:
            result = ip_validator(device.ip_address)
            if not result.valid:
                message = f'COM device "{device.instance_name}": {result.error}'
        if message:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    category=IssueCategory.COM_CONFIG,
                    message=message,
                    device_id=device.id,
                )
            )

        for register in device.registers:
            result = validate_register_address(register.address, device.protocol.value)
            if not result.valid:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=IssueCategory.COM_CONFIG,
                        message=f"{device.instance_name}.{register.name}: {result.error}",
                        com_register_id=register.id,
                        device_id=device.id,
                    )
                )
    return issues
