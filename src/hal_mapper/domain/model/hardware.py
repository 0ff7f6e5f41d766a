"""Inventory models: hardware modules, fieldbus devices and application signals.

Modules and devices own their channels and registers. Application signals
come from the external component model and are read-only to this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hal_mapper.domain.model.catalog import (
    ByteOrder,
    Protocol,
    RegisterType,
    SignalType,
)


@dataclass(slots=True)
class HardwareChannel:
    """One physical terminal on a hardware module.

    Attributes:
        id: Unique channel id
        module_id: Owning module; a channel never moves between modules
        channel_number: 1-based position within the module
        signal_type: DI/DO/AI/AO
        electrical_type: Electrical interface (e.g. "24VDC", "4-20mA")
        terminal: Terminal label "<rack>:<slot>.<channel>"
        tag: Free-text plant tag
        description: Free-text description
    """

    id: str
    module_id: str
    channel_number: int
    signal_type: SignalType
    electrical_type: str
    terminal: str
    tag: str = ""
    description: str = ""


@dataclass(slots=True)
class HardwareModule:
    """A physical I/O card in a rack slot."""

    id: str
    template_model: str
    manufacturer: str
    name: str
    rack_id: str
    rack_position: int
    channels: list[HardwareChannel] = field(default_factory=list)
    color: str = ""

    def count(self, signal_type: SignalType) -> int:
        """Number of channels of the given signal type."""
        return sum(1 for ch in self.channels if ch.signal_type is signal_type)


@dataclass(slots=True)
class FieldbusRegister:
    """One addressable value on a fieldbus device."""

    id: str
    device_id: str
    name: str
    signal_type: SignalType
    data_type: str
    address: int
    register_type: RegisterType | None = None
    slot: int | None = None
    subslot: int | None = None
    description: str = ""
    byte_order: ByteOrder = ByteOrder.BIG
    bit_offset: int | None = None
    scale_factor: float | None = None
    tag: str = ""


@dataclass(slots=True)
class FieldbusDevice:
    """A networked device (drive, genset controller, meter, ...)."""

    id: str
    template_model: str
    manufacturer: str
    name: str
    instance_name: str
    protocol: Protocol
    ip_address: str = ""
    port: int = 502
    unit_id: int = 1
    poll_rate_ms: int = 1000
    registers: list[FieldbusRegister] = field(default_factory=list)
    color: str = ""


@dataclass(frozen=True, slots=True)
class ApplicationSignal:
    """A software-side I/O point from the application model."""

    id: str
    component_name: str
    signal_name: str
    signal_type: SignalType
    data_type: str = ""
    description: str = ""
    required: bool = False
    node_id: str = ""
    component_family: str = ""

    @property
    def path(self) -> str:
        """Dotted signal path, e.g. ``PumpC_01.Feedback``."""
        return f"{self.component_name}.{self.signal_name}"
