"""Mapping Manager for HAL Mapper.

Owns one in-memory Configuration and is its single writer. Every mutation
is applied atomically and followed by a full validation pass, so ``issues``
always reflects the current bindings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from hal_mapper.domain.errors import MappingError, MappingNotFoundError, UnknownEntityError
from hal_mapper.domain.model.catalog import (
    DEFAULT_RACK,
    ByteOrder,
    MappingSource,
    MappingStatus,
)
from hal_mapper.domain.model.hardware import (
    FieldbusDevice,
    FieldbusRegister,
    HardwareChannel,
    HardwareModule,
)
from hal_mapper.domain.model.mapping import (
    Configuration,
    IdFactory,
    Mapping,
    SignalScaling,
    next_version,
    uuid_ids,
)
from hal_mapper.domain.rules.validation import Issue, Severity, summarize, validate

if TYPE_CHECKING:
    from hal_mapper.domain.model.catalog import DeviceTemplate, ModuleTemplate
    from hal_mapper.domain.model.hardware import ApplicationSignal

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

GROUNDED_NOTE = "Grounded - no HW connection"

# Device fields that update_device may change
DEVICE_FIELDS = frozenset(
    {"instance_name", "ip_address", "port", "unit_id", "poll_rate_ms", "name"}
)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class VersionEntry:
    """A version bump recorded by ``bump_version``."""

    version: str
    changes: str
    created_at: datetime


class MappingManager:
    """CRUD over bindings with uniqueness enforcement.

    Responsibilities:
    - Bind channels/registers to application signals, superseding conflicts
    - Ground application signals to fixed default values
    - Maintain the hardware and fieldbus inventory with cascading removal
    - Revalidate after every mutation
    """

    def __init__(
        self,
        config: Configuration,
        signals: Iterable[ApplicationSignal] = (),
        *,
        id_factory: IdFactory = uuid_ids,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the manager.

        Args:
            config: Configuration to manage; mutated in place
            signals: Application signal catalog (read-only)
            id_factory: Source of new entity ids
            clock: Source of timestamps
        """
        self._config = config
        self._signals: list[ApplicationSignal] = list(signals)
        self._ids = id_factory
        self._clock = clock
        self._issues: list[Issue] = []
        self._history: list[VersionEntry] = []
        self._revalidate()

    @classmethod
    def create(
        cls,
        *,
        name: str = "HAL Configuration",
        project_id: str = "",
        signals: Iterable[ApplicationSignal] = (),
        id_factory: IdFactory = uuid_ids,
        clock: Clock = utc_now,
    ) -> MappingManager:
        """Create a manager over a new, empty configuration."""
        now = clock()
        config = Configuration(
            id=id_factory(),
            project_id=project_id,
            name=name,
            created_at=now,
            updated_at=now,
        )
        return cls(config, signals, id_factory=id_factory, clock=clock)

    # -- read side ------------------------------------------------------------

    @property
    def config(self) -> Configuration:
        """The live configuration. Use ``snapshot()`` before exporting."""
        return self._config

    @property
    def signals(self) -> list[ApplicationSignal]:
        return list(self._signals)

    @property
    def issues(self) -> list[Issue]:
        """Issues from the last validation pass."""
        return list(self._issues)

    @property
    def history(self) -> list[VersionEntry]:
        return list(self._history)

    def issues_by_severity(self, severity: Severity) -> list[Issue]:
        return [issue for issue in self._issues if issue.severity is severity]

    def snapshot(self) -> Configuration:
        """Deep copy of the configuration, safe to hand to exporters."""
        return self._config.copy()

    def set_signals(self, signals: Iterable[ApplicationSignal]) -> None:
        """Replace the application signal catalog and revalidate."""
        self._signals = list(signals)
        self._revalidate()

    # -- bindings -------------------------------------------------------------

    def bind(
        self,
        source_id: str,
        source: MappingSource | str,
        app_signal_id: str,
        *,
        notes: str = "",
    ) -> Mapping:
        """Bind a channel or register to an application signal.

        Any mapping already using the source, and any mapping already
        targeting the signal, is superseded. Analog sources get the default
        4..20 -> 0..100 scaling.

        Args:
            source_id: Channel id (HW) or register id (COM)
            source: Source kind
            app_signal_id: Target application signal id
            notes: Free-text notes stored on the mapping

        Returns:
            The new mapping

        Raises:
            UnknownEntityError: If the source id does not resolve
        """
        source = MappingSource(source)
        endpoint: HardwareChannel | FieldbusRegister | None
        if source is MappingSource.COM:
            endpoint = self._config.find_register(source_id)
            if endpoint is None:
                raise UnknownEntityError("register", source_id)
        else:
            endpoint = self._config.find_channel(source_id)
            if endpoint is None:
                raise UnknownEntityError("channel", source_id)

        now = self._clock()
        mapping = Mapping(
            id=self._ids(),
            source=source,
            app_signal_id=app_signal_id,
            hw_channel_id=source_id if source is MappingSource.HW else "",
            com_register_id=source_id if source is MappingSource.COM else "",
            scaling=SignalScaling.default() if endpoint.signal_type.is_analog else None,
            notes=notes,
            status=MappingStatus.MAPPED,
            created_at=now,
            updated_at=now,
        )

        def conflicts(m: Mapping) -> bool:
            if m.app_signal_id == app_signal_id:
                return True
            if source is MappingSource.COM:
                return m.references_register(source_id)
            return m.references_channel(source_id)

        superseded = self._replace_mappings(conflicts, mapping)
        logger.info(
            "Signal bound",
            mapping_id=mapping.id,
            source=source.value,
            source_id=source_id,
            app_signal_id=app_signal_id,
            superseded=superseded,
        )
        self._touch()
        return mapping

    def ground(self, app_signal_id: str, value: str = "") -> Mapping:
        """Ground an application signal to a fixed default value.

        Any existing mapping for the signal is superseded.

        Args:
            app_signal_id: Target application signal id
            value: Free-text default, e.g. "FALSE" or "0.0"

        Returns:
            The grounded mapping
        """
        now = self._clock()
        mapping = Mapping(
            id=self._ids(),
            source=MappingSource.HW,
            app_signal_id=app_signal_id,
            grounded=True,
            ground_value=value,
            notes=GROUNDED_NOTE,
            status=MappingStatus.GROUNDED,
            created_at=now,
            updated_at=now,
        )
        superseded = self._replace_mappings(lambda m: m.app_signal_id == app_signal_id, mapping)
        logger.info(
            "Signal grounded",
            mapping_id=mapping.id,
            app_signal_id=app_signal_id,
            value=value,
            superseded=superseded,
        )
        self._touch()
        return mapping

    def unbind(self, mapping_id: str) -> bool:
        """Delete a mapping. Unknown ids are a no-op.

        Returns:
            True if a mapping was removed
        """
        before = len(self._config.mappings)
        self._config.mappings = [m for m in self._config.mappings if m.id != mapping_id]
        if len(self._config.mappings) == before:
            logger.debug("Unbind of unknown mapping ignored", mapping_id=mapping_id)
            return False

        logger.info("Mapping removed", mapping_id=mapping_id)
        self._touch()
        return True

    def set_scaling(self, mapping_id: str, scaling: SignalScaling | None) -> Mapping:
        """Replace the scaling of a bound mapping.

        Args:
            mapping_id: Mapping to update
            scaling: New scaling, or None to remove it

        Returns:
            The updated mapping

        Raises:
            MappingNotFoundError: If the mapping does not exist
            MappingError: If the mapping is grounded
            ScalingError: If either range has zero span
        """
        mapping = self._get_mapping(mapping_id)
        if mapping.grounded:
            raise MappingError(f"Cannot scale grounded mapping '{mapping_id}'")
        if scaling is not None:
            scaling.validate()

        mapping.scaling = scaling
        mapping.updated_at = self._clock()
        logger.info("Scaling updated", mapping_id=mapping_id, scaling=scaling)
        self._touch()
        return mapping

    def set_notes(self, mapping_id: str, notes: str) -> Mapping:
        mapping = self._get_mapping(mapping_id)
        mapping.notes = notes
        mapping.updated_at = self._clock()
        self._touch()
        return mapping

    def retag_channel(
        self, channel_id: str, tag: str, description: str | None = None
    ) -> HardwareChannel:
        """Set the plant tag (and optionally description) of a channel."""
        channel = self._config.find_channel(channel_id)
        if channel is None:
            raise UnknownEntityError("channel", channel_id)
        channel.tag = tag
        if description is not None:
            channel.description = description
        self._touch()
        return channel

    def retag_register(
        self, register_id: str, tag: str, description: str | None = None
    ) -> FieldbusRegister:
        """Set the plant tag (and optionally description) of a register."""
        register = self._config.find_register(register_id)
        if register is None:
            raise UnknownEntityError("register", register_id)
        register.tag = tag
        if description is not None:
            register.description = description
        self._touch()
        return register

    # -- inventory ------------------------------------------------------------

    def add_module(self, template: ModuleTemplate, rack_id: str = DEFAULT_RACK) -> HardwareModule:
        """Instantiate a module template in the next free rack position.

        Channels are numbered 1..n across the template's channel groups and
        labelled ``<rack>:<position>.<n>``.
        """
        position = max((m.rack_position for m in self._config.modules), default=0) + 1
        module_id = self._ids()

        channels: list[HardwareChannel] = []
        for group in template.channels:
            for _ in range(group.count):
                number = len(channels) + 1
                channels.append(
                    HardwareChannel(
                        id=self._ids(),
                        module_id=module_id,
                        channel_number=number,
                        signal_type=group.signal_type,
                        electrical_type=group.electrical_type,
                        terminal=f"{rack_id}:{position}.{number}",
                    )
                )

        module = HardwareModule(
            id=module_id,
            template_model=template.model,
            manufacturer=template.manufacturer,
            name=template.name,
            rack_id=rack_id,
            rack_position=position,
            channels=channels,
            color=template.color,
        )
        self._config.modules.append(module)
        logger.info(
            "Module added",
            module_id=module_id,
            model=template.model,
            rack_id=rack_id,
            position=position,
            channels=len(channels),
        )
        self._touch()
        return module

    def remove_module(self, module_id: str) -> None:
        """Remove a module and every mapping sourced from its channels.

        Raises:
            UnknownEntityError: If the module does not exist
        """
        module = self._config.find_module(module_id)
        if module is None:
            raise UnknownEntityError("module", module_id)

        channel_ids = {ch.id for ch in module.channels}
        removed = self._drop_mappings(
            lambda m: m.source is not MappingSource.COM and m.hw_channel_id in channel_ids
        )
        self._config.modules.remove(module)
        logger.info("Module removed", module_id=module_id, mappings_removed=removed)
        self._touch()

    def add_device(self, template: DeviceTemplate) -> FieldbusDevice:
        """Instantiate a fieldbus device template.

        The instance name is ``<model>-<k>`` where k counts devices of the
        same model; registers without an address take their index.
        """
        existing = sum(1 for d in self._config.devices if d.template_model == template.model)
        device_id = self._ids()

        registers = [
            FieldbusRegister(
                id=self._ids(),
                device_id=device_id,
                name=reg.name,
                signal_type=reg.signal_type,
                data_type=reg.data_type,
                address=reg.address if reg.address is not None else index,
                register_type=reg.register_type,
                slot=reg.slot,
                subslot=reg.subslot,
                description=reg.description,
                byte_order=reg.byte_order or ByteOrder.BIG,
                bit_offset=reg.bit_offset,
                scale_factor=reg.scale_factor,
            )
            for index, reg in enumerate(template.default_registers)
        ]

        device = FieldbusDevice(
            id=device_id,
            template_model=template.model,
            manufacturer=template.manufacturer,
            name=template.name,
            instance_name=f"{template.model}-{existing + 1}",
            protocol=template.protocol,
            port=template.protocol.default_port,
            registers=registers,
            color=template.color,
        )
        self._config.devices.append(device)
        logger.info(
            "Device added",
            device_id=device_id,
            model=template.model,
            instance_name=device.instance_name,
            registers=len(registers),
        )
        self._touch()
        return device

    def remove_device(self, device_id: str) -> None:
        """Remove a device and every mapping sourced from its registers.

        Raises:
            UnknownEntityError: If the device does not exist
        """
        device = self._config.find_device(device_id)
        if device is None:
            raise UnknownEntityError("device", device_id)

        register_ids = {r.id for r in device.registers}
        removed = self._drop_mappings(
            lambda m: m.source is MappingSource.COM and m.com_register_id in register_ids
        )
        self._config.devices.remove(device)
        logger.info("Device removed", device_id=device_id, mappings_removed=removed)
        self._touch()

    def update_device(self, device_id: str, **fields: Any) -> FieldbusDevice:
        """Update network settings of a device.

        Args:
            device_id: Device to update
            **fields: Any of instance_name, name, ip_address, port, unit_id,
                poll_rate_ms

        Raises:
            UnknownEntityError: If the device does not exist
            ValueError: If an unsupported field is given
        """
        device = self._config.find_device(device_id)
        if device is None:
            raise UnknownEntityError("device", device_id)

        unknown = set(fields) - DEVICE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update device field(s): {', '.join(sorted(unknown))}")

        for name, value in fields.items():
            setattr(device, name, value)
        logger.info("Device updated", device_id=device_id, fields=sorted(fields))
        self._touch()
        return device

    def bump_version(self, changes: str = "") -> str:
        """Advance the configuration version and record it in the history.

        Returns:
            The new version string
        """
        version = next_version(self._config.version)
        self._config.version = version
        now = self._clock()
        self._config.updated_at = now
        self._history.append(VersionEntry(version=version, changes=changes, created_at=now))
        logger.info("Version created", version=version, changes=changes)
        return version

    # -- internals ------------------------------------------------------------

    def _get_mapping(self, mapping_id: str) -> Mapping:
        mapping = self._config.find_mapping(mapping_id)
        if mapping is None:
            raise MappingNotFoundError(mapping_id)
        return mapping

    def _replace_mappings(self, predicate: Callable[[Mapping], bool], new: Mapping) -> int:
        removed = self._drop_mappings(predicate)
        self._config.mappings.append(new)
        return removed

    def _drop_mappings(self, predicate: Callable[[Mapping], bool]) -> int:
        kept = [m for m in self._config.mappings if not predicate(m)]
        removed = len(self._config.mappings) - len(kept)
        self._config.mappings = kept
        return removed

    def _touch(self) -> None:
        self._config.updated_at = self._clock()
        self._revalidate()

    def _revalidate(self) -> None:
        self._issues = validate(self._config, self._signals)
        logger.debug("Configuration revalidated", **summarize(self._issues))
