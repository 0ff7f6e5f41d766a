"""Shared fixtures for unit tests.

The fixture plant is a small pump skid: one AI, one DI and one AO card in
rack X100 plus a Modbus genset controller, with six application signals.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.domain.model.catalog import Protocol, RegisterType, SignalType
from hal_mapper.domain.model.hardware import (
    ApplicationSignal,
    FieldbusDevice,
    FieldbusRegister,
    HardwareChannel,
    HardwareModule,
)
from hal_mapper.domain.model.mapping import Configuration, SequentialIds

FIXED_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        item.add_marker(pytest.mark.unit)


def make_module(
    module_id: str,
    model: str,
    slot: int,
    signal_type: SignalType,
    electrical: str,
    count: int = 4,
    rack: str = "X100",
) -> HardwareModule:
    return HardwareModule(
        id=module_id,
        template_model=model,
        manufacturer="WAGO",
        name=f"{count}-ch {signal_type.value} {electrical}",
        rack_id=rack,
        rack_position=slot,
        channels=[
            HardwareChannel(
                id=f"{module_id}_ch{n}",
                module_id=module_id,
                channel_number=n,
                signal_type=signal_type,
                electrical_type=electrical,
                terminal=f"{rack}:{slot}.{n}",
            )
            for n in range(1, count + 1)
        ],
    )


def make_signal(
    signal_id: str,
    component: str,
    name: str,
    signal_type: SignalType,
    data_type: str = "",
    required: bool = False,
) -> ApplicationSignal:
    return ApplicationSignal(
        id=signal_id,
        component_name=component,
        signal_name=name,
        signal_type=signal_type,
        data_type=data_type,
        required=required,
    )


@pytest.fixture
def ai_module() -> HardwareModule:
    return make_module("mod_ai", "750-455", 1, SignalType.AI, "4-20mA")


@pytest.fixture
def di_module() -> HardwareModule:
    return make_module("mod_di", "750-402", 2, SignalType.DI, "24VDC")


@pytest.fixture
def ao_module() -> HardwareModule:
    return make_module("mod_ao", "750-550", 3, SignalType.AO, "0-10V", count=2)


@pytest.fixture
def genset() -> FieldbusDevice:
    return FieldbusDevice(
        id="dev_gen",
        template_model="DEIF-AGC-4",
        manufacturer="DEIF",
        name="AGC-4 Genset Controller",
        instance_name="DEIF-AGC-4-1",
        protocol=Protocol.MODBUS_TCP,
        ip_address="192.168.1.50",
        registers=[
            FieldbusRegister(
                id="reg_run",
                device_id="dev_gen",
                name="GenRunning",
                signal_type=SignalType.DI,
                data_type="BOOL",
                address=100,
                register_type=RegisterType.COIL,
            ),
            FieldbusRegister(
                id="reg_power",
                device_id="dev_gen",
                name="GenActivePower",
                signal_type=SignalType.AI,
                data_type="FLOAT32",
                address=1020,
                register_type=RegisterType.INPUT_REGISTER,
                scale_factor=0.1,
                description="Active power [kW]",
            ),
        ],
    )


@pytest.fixture
def signals() -> list[ApplicationSignal]:
    return [
        make_signal("sig_feedback", "PumpC_01", "Feedback", SignalType.AI, "REAL", required=True),
        make_signal("sig_enable", "PumpC_01", "Enable", SignalType.DO, "BOOL", required=True),
        make_signal("sig_running", "PumpC_01", "Running", SignalType.DI, "BOOL", required=True),
        make_signal("sig_speed", "PumpC_01", "SpeedRef", SignalType.AO),
        make_signal("sig_gen_running", "Genset_01", "Running", SignalType.DI, "BOOL"),
        make_signal("sig_gen_power", "Genset_01", "ActivePower", SignalType.AI, "REAL"),
    ]


@pytest.fixture
def config(
    ai_module: HardwareModule,
    di_module: HardwareModule,
    ao_module: HardwareModule,
    genset: FieldbusDevice,
) -> Configuration:
    return Configuration(
        id="cfg_1",
        project_id="prj_1",
        name="Pump Skid HAL",
        version="0.1",
        description="Unit test plant",
        modules=[ai_module, di_module, ao_module],
        devices=[genset],
    )


@pytest.fixture
def manager(config: Configuration, signals: list[ApplicationSignal]) -> MappingManager:
    return MappingManager(
        config,
        signals,
        id_factory=SequentialIds("id"),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def bound_manager(manager: MappingManager) -> MappingManager:
    """Manager with one HW binding, one COM binding and one grounded signal."""
    manager.bind("mod_ai_ch1", "hw", "sig_feedback")
    manager.bind("reg_run", "com", "sig_gen_running")
    manager.ground("sig_enable", "FALSE")
    return manager


@pytest.fixture
def module_factory() -> Callable[..., HardwareModule]:
    return make_module


@pytest.fixture
def signal_factory() -> Callable[..., ApplicationSignal]:
    return make_signal
