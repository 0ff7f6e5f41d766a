"""Project file schema for HAL Mapper.

Uses Pydantic v2 for validation, serialization, and documentation.
Project files (YAML or JSON) and JSON snapshots share these models; field
names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hal_mapper.domain.model.catalog import (
    DEFAULT_RACK,
    ByteOrder,
    MappingSource,
    MappingStatus,
    Protocol,
    RegisterType,
    SignalType,
)
from hal_mapper.domain.model.hardware import (
    ApplicationSignal,
    FieldbusDevice,
    FieldbusRegister,
    HardwareChannel,
    HardwareModule,
)
from hal_mapper.domain.model.mapping import Configuration, Mapping, SignalScaling

SCHEMA_VERSION = "1.0.0"


class _CamelModel(BaseModel):
    """Base model with camelCase aliases; unknown keys are rejected."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# SCALING
# =============================================================================


class ScalingModel(_CamelModel):
    """Linear raw-to-engineering scaling."""

    raw_min: float = Field(default=4.0, description="Raw range lower bound")
    raw_max: float = Field(default=20.0, description="Raw range upper bound")
    eng_min: float = Field(default=0.0, description="Engineering range lower bound")
    eng_max: float = Field(default=100.0, description="Engineering range upper bound")
    unit: str = Field(default="", max_length=32, description="Engineering unit")
    clamp_enabled: bool = Field(default=True, description="Clamp to engineering range")
    filter_ms: float = Field(default=0.0, ge=0, description="Low-pass filter time (ms)")

    @model_validator(mode="after")
    def validate_spans(self) -> ScalingModel:
        if self.raw_min == self.raw_max:
            raise ValueError(f"Raw range has zero span ({self.raw_min}..{self.raw_max})")
        if self.eng_min == self.eng_max:
            raise ValueError(
                f"Engineering range has zero span ({self.eng_min}..{self.eng_max})"
            )
        return self

    def to_domain(self) -> SignalScaling:
        return SignalScaling(
            raw_min=self.raw_min,
            raw_max=self.raw_max,
            eng_min=self.eng_min,
            eng_max=self.eng_max,
            unit=self.unit,
            clamp_enabled=self.clamp_enabled,
            filter_ms=self.filter_ms,
        )

    @classmethod
    def from_domain(cls, scaling: SignalScaling) -> ScalingModel:
        return cls.model_construct(
            raw_min=float(scaling.raw_min),
            raw_max=float(scaling.raw_max),
            eng_min=float(scaling.eng_min),
            eng_max=float(scaling.eng_max),
            unit=scaling.unit,
            clamp_enabled=scaling.clamp_enabled,
            filter_ms=float(scaling.filter_ms),
        )


# =============================================================================
# HARDWARE INVENTORY
# =============================================================================


class ChannelModel(_CamelModel):
    """A terminal on a hardware module."""

    id: str = Field(..., min_length=1)
    module_id: str = Field(default="", description="Owning module; filled from the parent")
    channel_number: int = Field(..., ge=1)
    signal_type: SignalType
    electrical_type: str = Field(default="")
    terminal: str = Field(default="")
    tag: str = Field(default="")
    description: str = Field(default="")


class ModuleModel(_CamelModel):
    """A hardware I/O module in a rack slot."""

    id: str = Field(..., min_length=1)
    template_model: str = Field(..., description="Template model number, e.g. 750-455")
    manufacturer: str = Field(default="")
    name: str = Field(default="")
    rack_id: str = Field(default=DEFAULT_RACK)
    rack_position: int = Field(..., ge=0)
    channels: list[ChannelModel] = Field(default_factory=list)
    color: str = Field(default="")

    def to_domain(self) -> HardwareModule:
        return HardwareModule(
            id=self.id,
            template_model=self.template_model,
            manufacturer=self.manufacturer,
            name=self.name,
            rack_id=self.rack_id,
            rack_position=self.rack_position,
            channels=[
                HardwareChannel(
                    id=ch.id,
                    module_id=self.id,
                    channel_number=ch.channel_number,
                    signal_type=ch.signal_type,
                    electrical_type=ch.electrical_type,
                    terminal=ch.terminal,
                    tag=ch.tag,
                    description=ch.description,
                )
                for ch in self.channels
            ],
            color=self.color,
        )

    @classmethod
    def from_domain(cls, module: HardwareModule) -> ModuleModel:
        return cls.model_construct(
            id=module.id,
            template_model=module.template_model,
            manufacturer=module.manufacturer,
            name=module.name,
            rack_id=module.rack_id,
            rack_position=module.rack_position,
            channels=[
                ChannelModel.model_construct(
                    id=ch.id,
                    module_id=ch.module_id,
                    channel_number=ch.channel_number,
                    signal_type=ch.signal_type,
                    electrical_type=ch.electrical_type,
                    terminal=ch.terminal,
                    tag=ch.tag,
                    description=ch.description,
                )
                for ch in module.channels
            ],
            color=module.color,
        )


# =============================================================================
# FIELDBUS INVENTORY
# =============================================================================


class RegisterModel(_CamelModel):
    """An addressable value on a fieldbus device."""

    id: str = Field(..., min_length=1)
    device_id: str = Field(default="", description="Owning device; filled from the parent")
    name: str = Field(..., min_length=1)
    signal_type: SignalType
    data_type: str = Field(default="")
    address: int = Field(default=0, ge=0)
    register_type: RegisterType | None = None
    slot: int | None = None
    subslot: int | None = None
    description: str = Field(default="")
    byte_order: ByteOrder = Field(default=ByteOrder.BIG)
    bit_offset: int | None = None
    scale_factor: float | None = None
    tag: str = Field(default="")


class DeviceModel(_CamelModel):
    """A networked fieldbus device."""

    id: str = Field(..., min_length=1)
    template_model: str = Field(...)
    manufacturer: str = Field(default="")
    name: str = Field(default="")
    instance_name: str = Field(..., min_length=1)
    protocol: Protocol
    ip_address: str = Field(default="")
    port: int = Field(default=502, ge=0, le=65535)
    unit_id: int = Field(default=1, ge=0, le=255)
    poll_rate_ms: int = Field(default=1000, ge=1)
    registers: list[RegisterModel] = Field(default_factory=list)
    color: str = Field(default="")

    def to_domain(self) -> FieldbusDevice:
        return FieldbusDevice(
            id=self.id,
            template_model=self.template_model,
            manufacturer=self.manufacturer,
            name=self.name,
            instance_name=self.instance_name,
            protocol=self.protocol,
            ip_address=self.ip_address,
            port=self.port,
            unit_id=self.unit_id,
            poll_rate_ms=self.poll_rate_ms,
            registers=[
                FieldbusRegister(
                    id=reg.id,
                    device_id=self.id,
                    name=reg.name,
                    signal_type=reg.signal_type,
                    data_type=reg.data_type,
                    address=reg.address,
                    register_type=reg.register_type,
                    slot=reg.slot,
                    subslot=reg.subslot,
                    description=reg.description,
                    byte_order=reg.byte_order,
                    bit_offset=reg.bit_offset,
                    scale_factor=reg.scale_factor,
                    tag=reg.tag,
                )
                for reg in self.registers
            ],
            color=self.color,
        )

    @classmethod
    def from_domain(cls, device: FieldbusDevice) -> DeviceModel:
        return cls.model_construct(
            id=device.id,
            template_model=device.template_model,
            manufacturer=device.manufacturer,
            name=device.name,
            instance_name=device.instance_name,
            protocol=device.protocol,
            ip_address=device.ip_address,
            port=device.port,
            unit_id=device.unit_id,
            poll_rate_ms=device.poll_rate_ms,
            registers=[
                RegisterModel.model_construct(
                    id=reg.id,
                    device_id=reg.device_id,
                    name=reg.name,
                    signal_type=reg.signal_type,
                    data_type=reg.data_type,
                    address=reg.address,
                    register_type=reg.register_type,
                    slot=reg.slot,
                    subslot=reg.subslot,
                    description=reg.description,
                    byte_order=reg.byte_order,
                    bit_offset=reg.bit_offset,
                    scale_factor=None if reg.scale_factor is None else float(reg.scale_factor),
                    tag=reg.tag,
                )
                for reg in device.registers
            ],
            color=device.color,
        )


# =============================================================================
# MAPPINGS
# =============================================================================


class MappingModel(_CamelModel):
    """A binding between a physical source and an application signal."""

    id: str = Field(..., min_length=1)
    source: MappingSource = Field(default=MappingSource.HW)
    hw_channel_id: str = Field(default="")
    com_register_id: str = Field(default="")
    app_signal_id: str = Field(..., min_length=1)
    scaling: ScalingModel | None = None
    grounded: bool = Field(default=False)
    ground_value: str = Field(default="")
    notes: str = Field(default="")
    status: MappingStatus = Field(default=MappingStatus.MAPPED)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def validate_source(self) -> MappingModel:
        """A grounded mapping has no source id; a bound one has exactly one."""
        if self.grounded:
            if self.hw_channel_id or self.com_register_id:
                raise ValueError(f"Grounded mapping '{self.id}' must not reference a source")
            return self
        if self.hw_channel_id and self.com_register_id:
            raise ValueError(
                f"Mapping '{self.id}' references both a channel and a register"
            )
        if self.source is MappingSource.COM and not self.com_register_id:
            raise ValueError(f"COM mapping '{self.id}' has no comRegisterId")
        if self.source is MappingSource.HW and not self.hw_channel_id:
            raise ValueError(f"HW mapping '{self.id}' has no hwChannelId")
        return self

    def to_domain(self) -> Mapping:
        return Mapping(
            id=self.id,
            source=self.source,
            app_signal_id=self.app_signal_id,
            hw_channel_id=self.hw_channel_id,
            com_register_id=self.com_register_id,
            scaling=self.scaling.to_domain() if self.scaling else None,
            grounded=self.grounded,
            ground_value=self.ground_value,
            notes=self.notes,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_domain(cls, mapping: Mapping) -> MappingModel:
        return cls.model_construct(
            id=mapping.id,
            source=mapping.source,
            hw_channel_id=mapping.hw_channel_id,
            com_register_id=mapping.com_register_id,
            app_signal_id=mapping.app_signal_id,
            scaling=ScalingModel.from_domain(mapping.scaling) if mapping.scaling else None,
            grounded=mapping.grounded,
            ground_value=mapping.ground_value,
            notes=mapping.notes,
            status=mapping.status,
            created_at=mapping.created_at,
            updated_at=mapping.updated_at,
        )


# =============================================================================
# APPLICATION SIGNALS
# =============================================================================


class ApplicationSignalModel(_CamelModel):
    """A software-side I/O point from the application model."""

    id: str = Field(..., min_length=1)
    node_id: str = Field(default="")
    component_name: str = Field(..., min_length=1)
    component_family: str = Field(default="")
    signal_name: str = Field(..., min_length=1)
    signal_type: SignalType
    data_type: str = Field(default="")
    description: str = Field(default="")
    required: bool = Field(default=False)

    def to_domain(self) -> ApplicationSignal:
        return ApplicationSignal(
            id=self.id,
            component_name=self.component_name,
            signal_name=self.signal_name,
            signal_type=self.signal_type,
            data_type=self.data_type,
            description=self.description,
            required=self.required,
            node_id=self.node_id,
            component_family=self.component_family,
        )

    @classmethod
    def from_domain(cls, signal: ApplicationSignal) -> ApplicationSignalModel:
        return cls.model_construct(
            id=signal.id,
            node_id=signal.node_id,
            component_name=signal.component_name,
            component_family=signal.component_family,
            signal_name=signal.signal_name,
            signal_type=signal.signal_type,
            data_type=signal.data_type,
            description=signal.description,
            required=signal.required,
        )


# =============================================================================
# ROOT MODELS
# =============================================================================


class ConfigurationModel(_CamelModel):
    """The whole I/O binding of one project."""

    id: str = Field(..., min_length=1)
    project_id: str = Field(default="")
    name: str = Field(default="HAL Configuration", min_length=1)
    version: str = Field(default="0.1")
    description: str = Field(default="")
    modules: list[ModuleModel] = Field(default_factory=list)
    com_devices: list[DeviceModel] = Field(default_factory=list)
    mappings: list[MappingModel] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def validate_unique_ids(self) -> ConfigurationModel:
        """Entity ids must be unique within their kind."""
        kinds = {
            "module": [m.id for m in self.modules],
            "channel": [c.id for m in self.modules for c in m.channels],
            "device": [d.id for d in self.com_devices],
            "register": [r.id for d in self.com_devices for r in d.registers],
            "mapping": [m.id for m in self.mappings],
        }
        for kind, ids in kinds.items():
            seen: set[str] = set()
            for entity_id in ids:
                if entity_id in seen:
                    raise ValueError(f"Duplicate {kind} id '{entity_id}'")
                seen.add(entity_id)
        return self

    def to_domain(self) -> Configuration:
        return Configuration(
            id=self.id,
            project_id=self.project_id,
            name=self.name,
            version=self.version,
            description=self.description,
            modules=[m.to_domain() for m in self.modules],
            devices=[d.to_domain() for d in self.com_devices],
            mappings=[m.to_domain() for m in self.mappings],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_domain(cls, config: Configuration) -> ConfigurationModel:
        return cls.model_construct(
            id=config.id,
            project_id=config.project_id,
            name=config.name,
            version=config.version,
            description=config.description,
            modules=[ModuleModel.from_domain(m) for m in config.modules],
            com_devices=[DeviceModel.from_domain(d) for d in config.devices],
            mappings=[MappingModel.from_domain(m) for m in config.mappings],
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class ProjectFile(_CamelModel):
    """Root model of a project file: configuration plus signal catalog."""

    schema_version: str = Field(default=SCHEMA_VERSION, description="Project file schema version")
    config: ConfigurationModel
    app_signals: list[ApplicationSignalModel] = Field(default_factory=list)

    @field_validator("app_signals")
    @classmethod
    def validate_unique_signals(
        cls, v: list[ApplicationSignalModel]
    ) -> list[ApplicationSignalModel]:
        """Application signal ids must be unique."""
        seen: set[str] = set()
        for signal in v:
            if signal.id in seen:
                raise ValueError(f"Duplicate application signal id '{signal.id}'")
            seen.add(signal.id)
        return v

    def to_domain(self) -> tuple[Configuration, list[ApplicationSignal]]:
        return self.config.to_domain(), [s.to_domain() for s in self.app_signals]


class SnapshotFile(_CamelModel):
    """Full-fidelity JSON snapshot with export timestamp and generator tag."""

    exported: str = Field(..., description="ISO-8601 export timestamp")
    generator: str = Field(..., description="Producing tool and version")
    config: ConfigurationModel
    app_signals: list[ApplicationSignalModel] = Field(default_factory=list)

    def to_domain(self) -> tuple[Configuration, list[ApplicationSignal]]:
        return self.config.to_domain(), [s.to_domain() for s in self.app_signals]
