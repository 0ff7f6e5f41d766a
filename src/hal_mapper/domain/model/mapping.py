"""Mapping domain models: scaling, bindings and the configuration aggregate.

A Mapping binds one physical source (hardware channel or fieldbus register)
to one application signal, or grounds an application signal to a fixed
default value. "Unmapped" is never stored; it is the absence of any mapping
referencing an entity and is exposed here as derived views.
"""

from __future__ import annotations

import copy
import itertools
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from hal_mapper.domain.errors import ScalingError
from hal_mapper.domain.model.catalog import MappingSource, MappingStatus, SignalType

if TYPE_CHECKING:
    from hal_mapper.domain.model.hardware import (
        ApplicationSignal,
        FieldbusDevice,
        FieldbusRegister,
        HardwareChannel,
        HardwareModule,
    )

# Produces a new unique id on each call
IdFactory = Callable[[], str]


def uuid_ids() -> str:
    """Default id factory: random UUID4 strings."""
    return str(uuid.uuid4())


class SequentialIds:
    """Monotonic id factory yielding ``<prefix>_1``, ``<prefix>_2``, ...

    Gives reproducible ids for tests and generated example projects.
    """

    def __init__(self, prefix: str = "hal", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}_{next(self._counter)}"


@dataclass(frozen=True, slots=True)
class SignalScaling:
    """Linear raw-to-engineering conversion for analog signals.

    Maps ``raw_min..raw_max`` onto ``eng_min..eng_max``. The filter time
    constant is carried for the PLC runtime and not applied here.
    """

    raw_min: float = 4.0
    raw_max: float = 20.0
    eng_min: float = 0.0
    eng_max: float = 100.0
    unit: str = ""
    clamp_enabled: bool = True
    filter_ms: float = 0.0

    @classmethod
    def default(cls) -> SignalScaling:
        """4..20 mA mapped to 0..100, unitless, clamped, unfiltered."""
        return cls()

    def validate(self) -> SignalScaling:
        """Reject degenerate ranges that produce an undefined linear map.

        Raises:
            ScalingError: If either span is zero or the filter is negative
        """
        if self.raw_min == self.raw_max:
            raise ScalingError(f"Raw range has zero span ({self.raw_min}..{self.raw_max})")
        if self.eng_min == self.eng_max:
            raise ScalingError(
                f"Engineering range has zero span ({self.eng_min}..{self.eng_max})"
            )
        if self.filter_ms < 0:
            raise ScalingError(f"Filter time must not be negative, got {self.filter_ms}")
        return self

    @property
    def gain(self) -> float:
        return (self.eng_max - self.eng_min) / (self.raw_max - self.raw_min)

    def apply(self, raw_value: float) -> float:
        """Convert a raw value to engineering units."""
        eng = self.eng_min + (float(raw_value) - self.raw_min) * self.gain
        if self.clamp_enabled:
            low, high = sorted((self.eng_min, self.eng_max))
            eng = min(max(eng, low), high)
        return eng

    def reverse(self, eng_value: float) -> float:
        """Convert an engineering value back to raw units."""
        return self.raw_min + (float(eng_value) - self.eng_min) / self.gain


@dataclass(slots=True)
class Mapping:
    """A binding between a physical source and an application signal.

    Exactly one of ``hw_channel_id``/``com_register_id`` is set on a bound
    mapping; a grounded mapping has neither and carries ``ground_value``.
    """

    id: str
    source: MappingSource
    app_signal_id: str
    hw_channel_id: str = ""
    com_register_id: str = ""
    scaling: SignalScaling | None = None
    grounded: bool = False
    ground_value: str = ""
    notes: str = ""
    status: MappingStatus = MappingStatus.MAPPED
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def source_id(self) -> str:
        """Id of the physical source, empty for grounded mappings."""
        if self.grounded:
            return ""
        if self.source is MappingSource.COM:
            return self.com_register_id
        return self.hw_channel_id

    @property
    def source_key(self) -> str:
        """Source identity qualified by kind, e.g. ``hw:<id>``."""
        return f"{self.source.value}:{self.source_id}"

    def references_channel(self, channel_id: str) -> bool:
        return self.source is not MappingSource.COM and self.hw_channel_id == channel_id

    def references_register(self, register_id: str) -> bool:
        return self.source is MappingSource.COM and self.com_register_id == register_id


def next_version(current: str) -> str:
    """Bump a ``major.minor`` version string.

    ``"0.1" -> "0.2"``; anything else bumps the major: ``"3" -> "4.0"``.
    """
    parts = current.split(".")
    if len(parts) == 2 and parts[0].isdigit():
        minor = int(parts[1]) if parts[1].isdigit() else 0
        return f"{parts[0]}.{minor + 1}"
    major = int(current) if current.isdigit() else 0
    return f"{major + 1}.0"


@dataclass(slots=True)
class Configuration:
    """Aggregate root: the whole I/O binding of one project."""

    id: str
    project_id: str = ""
    name: str = "HAL Configuration"
    version: str = "0.1"
    description: str = ""
    modules: list[HardwareModule] = field(default_factory=list)
    devices: list[FieldbusDevice] = field(default_factory=list)
    mappings: list[Mapping] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # -- traversal ------------------------------------------------------------

    def channels(self) -> Iterator[HardwareChannel]:
        for module in self.modules:
            yield from module.channels

    def registers(self) -> Iterator[FieldbusRegister]:
        for device in self.devices:
            yield from device.registers

    def sorted_modules(self) -> list[HardwareModule]:
        """Modules ordered by (rack_id, rack_position)."""
        return sorted(self.modules, key=lambda m: (m.rack_id, m.rack_position))

    # -- lookup ---------------------------------------------------------------

    def find_module(self, module_id: str) -> HardwareModule | None:
        return next((m for m in self.modules if m.id == module_id), None)

    def find_device(self, device_id: str) -> FieldbusDevice | None:
        return next((d for d in self.devices if d.id == device_id), None)

    def find_channel(self, channel_id: str) -> HardwareChannel | None:
        return next((c for c in self.channels() if c.id == channel_id), None)

    def find_register(self, register_id: str) -> FieldbusRegister | None:
        return next((r for r in self.registers() if r.id == register_id), None)

    def find_mapping(self, mapping_id: str) -> Mapping | None:
        return next((m for m in self.mappings if m.id == mapping_id), None)

    def mapping_for_channel(self, channel_id: str) -> Mapping | None:
        return next((m for m in self.mappings if m.references_channel(channel_id)), None)

    def mapping_for_register(self, register_id: str) -> Mapping | None:
        return next((m for m in self.mappings if m.references_register(register_id)), None)

    def mapping_for_signal(self, app_signal_id: str) -> Mapping | None:
        return next((m for m in self.mappings if m.app_signal_id == app_signal_id), None)

    def source_signal_type(self, mapping: Mapping) -> SignalType | None:
        """Resolve the signal type of a mapping's physical source."""
        if mapping.grounded:
            return None
        if mapping.source is MappingSource.COM:
            register = self.find_register(mapping.com_register_id)
            return register.signal_type if register else None
        channel = self.find_channel(mapping.hw_channel_id)
        return channel.signal_type if channel else None

    # -- derived "unmapped" views ---------------------------------------------

    def unmapped_channels(self) -> list[HardwareChannel]:
        used = {m.hw_channel_id for m in self.mappings if m.source is not MappingSource.COM}
        return [c for c in self.channels() if c.id not in used]

    def unmapped_registers(self) -> list[FieldbusRegister]:
        used = {m.com_register_id for m in self.mappings if m.source is MappingSource.COM}
        return [r for r in self.registers() if r.id not in used]

    def unmapped_signals(self, signals: list[ApplicationSignal]) -> list[ApplicationSignal]:
        used = {m.app_signal_id for m in self.mappings}
        return [s for s in signals if s.id not in used]

    def copy(self) -> Configuration:
        """Deep value copy, safe to hand to exporters."""
        return copy.deepcopy(self)
