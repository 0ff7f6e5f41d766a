"""Catalog vocabulary shared by the whole mapping engine.

Defines the signal and protocol enumerations plus the immutable templates
that hardware modules and fieldbus devices are instantiated from. Templates
are copied on add and never referenced by a configuration afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Rack assigned to modules added without an explicit rack
DEFAULT_RACK = "Rack-1"


class SignalType(str, Enum):
    """I/O signal types for channels, registers and application signals."""

    DI = "DI"  # Digital input
    DO = "DO"  # Digital output
    AI = "AI"  # Analog input
    AO = "AO"  # Analog output

    @property
    def is_analog(self) -> bool:
        """Check if the signal carries an analog value."""
        return self in (SignalType.AI, SignalType.AO)


class MappingSource(str, Enum):
    """Physical origin of a bound mapping."""

    HW = "hw"
    COM = "com"


class MappingStatus(str, Enum):
    """Status of an I/O point.

    UNMAPPED is never stored on a mapping; it is only reported by exporters
    for points without any referencing mapping.
    """

    MAPPED = "mapped"
    GROUNDED = "grounded"
    UNMAPPED = "unmapped"


class Protocol(str, Enum):
    """Supported fieldbus protocols."""

    MODBUS_TCP = "modbus_tcp"
    MODBUS_RTU = "modbus_rtu"
    PROFINET = "profinet"
    CANOPEN = "canopen"
    ETHERCAT = "ethercat"
    OPC_UA = "opc_ua"

    @property
    def is_serial(self) -> bool:
        """Serial protocols carry no IP address."""
        return self is Protocol.MODBUS_RTU

    @property
    def default_port(self) -> int:
        """Default network port used when a device is added."""
        return PROTOCOL_DEFAULT_PORTS[self]


PROTOCOL_DEFAULT_PORTS: dict[Protocol, int] = {
    Protocol.MODBUS_TCP: 502,
    Protocol.MODBUS_RTU: 502,
    Protocol.PROFINET: 34962,
    Protocol.CANOPEN: 0,
    Protocol.ETHERCAT: 0,
    Protocol.OPC_UA: 4840,
}


class RegisterType(str, Enum):
    """Modbus register tables."""

    COIL = "coil"
    DISCRETE_INPUT = "discrete_input"
    HOLDING_REGISTER = "holding_register"
    INPUT_REGISTER = "input_register"


class ByteOrder(str, Enum):
    """Byte order for multi-byte register values."""

    BIG = "big_endian"
    LITTLE = "little_endian"


# =============================================================================
# TEMPLATES
# =============================================================================


@dataclass(frozen=True, slots=True)
class ChannelGroupTemplate:
    """A run of identical channels on a module template."""

    count: int
    signal_type: SignalType
    electrical_type: str
    resolution: str | None = None


@dataclass(frozen=True, slots=True)
class ModuleTemplate:
    """Catalog entry for a hardware I/O module.

    Attributes:
        model: Vendor order number (e.g. "750-455")
        manufacturer: Vendor name
        name: Human-readable module name
        channels: Channel groups, expanded in order when the module is added
        color: Display color used by editors
        bus_coupler: Module is the fieldbus coupler heading a rack
        end_module: Module terminates a rack
    """

    model: str
    manufacturer: str
    name: str
    channels: tuple[ChannelGroupTemplate, ...]
    color: str = ""
    bus_coupler: bool = False
    end_module: bool = False

    @property
    def channel_count(self) -> int:
        return sum(group.count for group in self.channels)


@dataclass(frozen=True, slots=True)
class RegisterTemplate:
    """Default register definition of a fieldbus device template."""

    name: str
    signal_type: SignalType
    data_type: str
    description: str = ""
    register_type: RegisterType | None = None
    address: int | None = None
    slot: int | None = None
    subslot: int | None = None
    byte_order: ByteOrder | None = None
    bit_offset: int | None = None
    scale_factor: float | None = None


@dataclass(frozen=True, slots=True)
class DeviceTemplate:
    """Catalog entry for a networked fieldbus device."""

    model: str
    manufacturer: str
    name: str
    protocol: Protocol
    default_registers: tuple[RegisterTemplate, ...] = field(default_factory=tuple)
    color: str = ""
    icon: str = ""
