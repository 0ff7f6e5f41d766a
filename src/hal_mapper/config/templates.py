"""Built-in hardware and fieldbus templates.

WAGO 750-series I/O modules, common marine/industrial fieldbus devices and
named scaling presets. Templates are copied when a module or device is added
to a configuration.
"""

from __future__ import annotations

from hal_mapper.domain.model.catalog import (
    ChannelGroupTemplate,
    DeviceTemplate,
    ModuleTemplate,
    Protocol,
    RegisterTemplate,
    RegisterType,
    SignalType,
)
from hal_mapper.domain.model.mapping import SignalScaling

DI = SignalType.DI
DO = SignalType.DO
AI = SignalType.AI
AO = SignalType.AO

COIL = RegisterType.COIL
DISCRETE = RegisterType.DISCRETE_INPUT
HOLDING = RegisterType.HOLDING_REGISTER
INPUT = RegisterType.INPUT_REGISTER


def _wago(
    model: str,
    name: str,
    *groups: ChannelGroupTemplate,
    color: str,
    bus_coupler: bool = False,
    end_module: bool = False,
) -> ModuleTemplate:
    return ModuleTemplate(
        model=model,
        manufacturer="WAGO",
        name=name,
        channels=groups,
        color=color,
        bus_coupler=bus_coupler,
        end_module=end_module,
    )


def _group(
    count: int, signal_type: SignalType, electrical: str, resolution: str | None = None
) -> ChannelGroupTemplate:
    return ChannelGroupTemplate(count, signal_type, electrical, resolution)


# =============================================================================
# HARDWARE MODULES
# =============================================================================

WAGO_MODULES: tuple[ModuleTemplate, ...] = (
    # Digital inputs
    _wago("750-400", "2-ch DI 24VDC", _group(2, DI, "24VDC"), color="#3b82f6"),
    _wago("750-402", "4-ch DI 24VDC", _group(4, DI, "24VDC"), color="#3b82f6"),
    _wago(
        "750-405",
        "2-ch DI 24VDC (Diagnostic)",
        _group(2, DI, "24VDC", "diagnostic"),
        color="#3b82f6",
    ),
    _wago("750-410", "2-ch DI 230VAC", _group(2, DI, "230VAC"), color="#6366f1"),
    # Digital outputs
    _wago("750-501", "2-ch DO 24VDC", _group(2, DO, "24VDC / 0.5A"), color="#22c55e"),
    _wago("750-504", "4-ch DO 24VDC", _group(4, DO, "24VDC / 0.5A"), color="#22c55e"),
    _wago("750-512", "2-ch Relay Output", _group(2, DO, "Relay 230V/6A"), color="#16a34a"),
    _wago("750-517", "2-ch Relay CO", _group(2, DO, "Relay CO 230V/8A"), color="#16a34a"),
    # Analog inputs
    _wago("750-455", "4-ch AI 4-20mA", _group(4, AI, "4-20mA", "16-bit"), color="#f59e0b"),
    _wago(
        "750-456",
        "2-ch AI 4-20mA (HART)",
        _group(2, AI, "4-20mA HART", "16-bit"),
        color="#f59e0b",
    ),
    _wago("750-459", "4-ch AI 0-10V", _group(4, AI, "0-10V", "16-bit"), color="#eab308"),
    _wago("750-461", "2-ch AI ±10V", _group(2, AI, "±10V", "16-bit"), color="#eab308"),
    _wago(
        "750-469",
        "2-ch AI Thermocouple",
        _group(2, AI, "TC K/J/T", "16-bit"),
        color="#d97706",
    ),
    _wago("750-470", "2-ch AI RTD Pt100", _group(2, AI, "Pt100 RTD", "16-bit"), color="#d97706"),
    # Analog outputs
    _wago("750-550", "2-ch AO 4-20mA", _group(2, AO, "4-20mA", "16-bit"), color="#ef4444"),
    _wago("750-554", "2-ch AO 0-10V", _group(2, AO, "0-10V", "16-bit"), color="#ef4444"),
    # Special
    _wago("750-652", "RS-232/485 Serial", _group(1, DI, "RS-485/232"), color="#8b5cf6"),
    _wago("750-600", "End Module", color="#94a3b8", end_module=True),
    _wago("750-352", "Ethernet Fieldbus Coupler", color="#0ea5e9", bus_coupler=True),
)


# =============================================================================
# FIELDBUS DEVICES
# =============================================================================


def _reg(
    name: str,
    signal_type: SignalType,
    data_type: str,
    address: int,
    description: str,
    register_type: RegisterType | None = None,
    **extra: int | float,
) -> RegisterTemplate:
    return RegisterTemplate(
        name=name,
        signal_type=signal_type,
        data_type=data_type,
        description=description,
        register_type=register_type,
        address=address,
        **extra,  # type: ignore[arg-type]
    )


COM_DEVICES: tuple[DeviceTemplate, ...] = (
    DeviceTemplate(
        model="DEIF-AGC-4",
        manufacturer="DEIF",
        name="AGC-4 Genset Controller",
        protocol=Protocol.MODBUS_TCP,
        color="#ef4444",
        default_registers=(
            _reg("GenFrequency", AI, "FLOAT32", 1000, "Generator frequency [Hz]", INPUT,
                 scale_factor=0.01),
            _reg("GenVoltageL1L2", AI, "FLOAT32", 1002, "Voltage L1-L2 [V]", INPUT),
            _reg("GenCurrentL1", AI, "FLOAT32", 1010, "Current L1 [A]", INPUT),
            _reg("GenActivePower", AI, "FLOAT32", 1020, "Active power [kW]", INPUT),
            _reg("GenReactivePower", AI, "FLOAT32", 1022, "Reactive power [kVAr]", INPUT),
            _reg("EngineRPM", AI, "UINT16", 1030, "Engine speed [RPM]", INPUT),
            _reg("EngineTemp", AI, "INT16", 1032, "Engine coolant temp [°C]", INPUT,
                 scale_factor=0.1),
            _reg("OilPressure", AI, "UINT16", 1034, "Oil pressure [kPa]", INPUT),
            _reg("FuelLevel", AI, "UINT16", 1036, "Fuel level [%]", INPUT),
            _reg("GenRunning", DI, "BOOL", 100, "Generator running", COIL),
            _reg("GenReady", DI, "BOOL", 101, "Generator ready", COIL),
            _reg("GenAlarm", DI, "BOOL", 110, "Common alarm", COIL),
            _reg("GenTrip", DI, "BOOL", 111, "Generator trip", COIL),
            _reg("CmdStart", DO, "BOOL", 200, "Start command", COIL),
            _reg("CmdStop", DO, "BOOL", 201, "Stop command", COIL),
            _reg("CmdBreakerClose", DO, "BOOL", 210, "Breaker close cmd", COIL),
            _reg("SetpointPower", AO, "UINT16", 300, "Power setpoint [%]", HOLDING),
        ),
    ),
    DeviceTemplate(
        model="ComAp-InteliGen",
        manufacturer="ComAp",
        name="InteliGen Genset Controller",
        protocol=Protocol.MODBUS_TCP,
        color="#f59e0b",
        default_registers=(
            _reg("GenFrequency", AI, "FLOAT32", 1100, "Generator frequency [Hz]", INPUT),
            _reg("GenVoltage", AI, "FLOAT32", 1102, "Generator voltage [V]", INPUT),
            _reg("GenPower", AI, "FLOAT32", 1108, "Active power [kW]", INPUT),
            _reg("EngineSpeed", AI, "UINT16", 1120, "Engine RPM", INPUT),
            _reg("CoolantTemp", AI, "INT16", 1122, "Coolant temp [°C]", INPUT),
            _reg("Running", DI, "BOOL", 200, "Engine running", DISCRETE),
            _reg("Alarm", DI, "BOOL", 210, "Common alarm", DISCRETE),
            _reg("CmdStart", DO, "BOOL", 300, "Start command", COIL),
            _reg("CmdStop", DO, "BOOL", 301, "Stop command", COIL),
        ),
    ),
    DeviceTemplate(
        model="ABB-ACS880",
        manufacturer="ABB",
        name="ACS880 Variable Freq. Drive",
        protocol=Protocol.PROFINET,
        color="#3b82f6",
        default_registers=(
            _reg("ActualSpeed", AI, "INT16", 0, "Actual speed [RPM]",
                 slot=1, subslot=1, scale_factor=0.1),
            _reg("ActualTorque", AI, "INT16", 2, "Actual torque [%]",
                 slot=1, subslot=1, scale_factor=0.1),
            _reg("MotorCurrent", AI, "UINT16", 4, "Motor current [A]",
                 slot=1, subslot=1, scale_factor=0.01),
            _reg("DCVoltage", AI, "UINT16", 6, "DC bus voltage [V]", slot=1, subslot=1),
            _reg("DriveReady", DI, "BOOL", 10, "Drive ready", slot=1, subslot=1, bit_offset=0),
            _reg("DriveRunning", DI, "BOOL", 10, "Drive running", slot=1, subslot=1,
                 bit_offset=1),
            _reg("DriveFault", DI, "BOOL", 10, "Drive fault", slot=1, subslot=1, bit_offset=2),
            _reg("DriveWarning", DI, "BOOL", 10, "Drive warning", slot=1, subslot=1,
                 bit_offset=3),
            _reg("CmdRun", DO, "BOOL", 0, "Run command", slot=1, subslot=2, bit_offset=0),
            _reg("CmdReverse", DO, "BOOL", 0, "Reverse command", slot=1, subslot=2,
                 bit_offset=1),
            _reg("CmdReset", DO, "BOOL", 0, "Fault reset", slot=1, subslot=2, bit_offset=2),
            _reg("SpeedRef", AO, "INT16", 2, "Speed reference [RPM]",
                 slot=1, subslot=2, scale_factor=0.1),
        ),
    ),
    DeviceTemplate(
        model="Janitza-UMG96",
        manufacturer="Janitza",
        name="UMG 96RM Power Analyzer",
        protocol=Protocol.MODBUS_TCP,
        color="#8b5cf6",
        default_registers=(
            _reg("VoltageL1N", AI, "FLOAT32", 19000, "Voltage L1-N [V]", INPUT),
            _reg("VoltageL2N", AI, "FLOAT32", 19002, "Voltage L2-N [V]", INPUT),
            _reg("VoltageL3N", AI, "FLOAT32", 19004, "Voltage L3-N [V]", INPUT),
            _reg("CurrentL1", AI, "FLOAT32", 19012, "Current L1 [A]", INPUT),
            _reg("CurrentL2", AI, "FLOAT32", 19014, "Current L2 [A]", INPUT),
            _reg("CurrentL3", AI, "FLOAT32", 19016, "Current L3 [A]", INPUT),
            _reg("TotalPower", AI, "FLOAT32", 19026, "Total active power [kW]", INPUT),
            _reg("PowerFactor", AI, "FLOAT32", 19032, "Power factor", INPUT),
            _reg("Frequency", AI, "FLOAT32", 19050, "Frequency [Hz]", INPUT),
            _reg("TotalEnergy", AI, "FLOAT32", 19060, "Total energy [kWh]", INPUT),
        ),
    ),
    DeviceTemplate(
        model="Honeywell-Enraf",
        manufacturer="Honeywell",
        name="Enraf Tank Gauge",
        protocol=Protocol.MODBUS_RTU,
        color="#10b981",
        default_registers=(
            _reg("Level", AI, "FLOAT32", 100, "Level [mm]", INPUT),
            _reg("Temperature", AI, "FLOAT32", 102, "Product temp [°C]", INPUT),
            _reg("Volume", AI, "FLOAT32", 104, "Volume [m³]", INPUT),
            _reg("Density", AI, "FLOAT32", 106, "Density [kg/m³]", INPUT),
            _reg("SensorFault", DI, "BOOL", 10, "Sensor fault", DISCRETE),
            _reg("HighAlarm", DI, "BOOL", 11, "High level alarm", DISCRETE),
            _reg("LowAlarm", DI, "BOOL", 12, "Low level alarm", DISCRETE),
        ),
    ),
    DeviceTemplate(
        model="WAGO-750-352",
        manufacturer="WAGO",
        name="750-352 Ethernet Coupler (Dist. I/O)",
        protocol=Protocol.MODBUS_TCP,
        color="#06b6d4",
        default_registers=(
            _reg("DI_Word0", DI, "UINT16", 0, "DI word 0 (bits 0-15)", DISCRETE),
            _reg("DI_Word1", DI, "UINT16", 16, "DI word 1 (bits 16-31)", DISCRETE),
            _reg("AI_Ch0", AI, "INT16", 0, "AI channel 0", INPUT),
            _reg("AI_Ch1", AI, "INT16", 1, "AI channel 1", INPUT),
            _reg("DO_Word0", DO, "UINT16", 512, "DO word 0 (bits 0-15)", COIL),
            _reg("AO_Ch0", AO, "INT16", 512, "AO channel 0", HOLDING),
        ),
    ),
    DeviceTemplate(
        model="Autronica-BS100",
        manufacturer="Autronica",
        name="BS-100 Fire Detection",
        protocol=Protocol.MODBUS_TCP,
        color="#dc2626",
        default_registers=(
            _reg("Zone1Fire", DI, "BOOL", 100, "Zone 1 fire alarm", DISCRETE),
            _reg("Zone2Fire", DI, "BOOL", 101, "Zone 2 fire alarm", DISCRETE),
            _reg("Zone3Fire", DI, "BOOL", 102, "Zone 3 fire alarm", DISCRETE),
            _reg("Zone4Fire", DI, "BOOL", 103, "Zone 4 fire alarm", DISCRETE),
            _reg("SystemFault", DI, "BOOL", 200, "System fault", DISCRETE),
            _reg("CommonAlarm", DI, "BOOL", 201, "Common fire alarm", DISCRETE),
            _reg("CmdAck", DO, "BOOL", 300, "Acknowledge command", COIL),
            _reg("CmdReset", DO, "BOOL", 301, "Reset command", COIL),
        ),
    ),
    DeviceTemplate(
        model="Generic-Modbus",
        manufacturer="Generic",
        name="Custom Modbus TCP Device",
        protocol=Protocol.MODBUS_TCP,
        color="#64748b",
    ),
    DeviceTemplate(
        model="Generic-PROFINET",
        manufacturer="Generic",
        name="Custom PROFINET Device",
        protocol=Protocol.PROFINET,
        color="#64748b",
    ),
)


# =============================================================================
# SCALING PRESETS
# =============================================================================

SCALING_PRESETS: dict[str, SignalScaling] = {
    "pressure_bar": SignalScaling(4, 20, 0, 10, "bar"),
    "pressure_kpa": SignalScaling(4, 20, 0, 1000, "kPa"),
    "temperature_c": SignalScaling(4, 20, 0, 200, "°C"),
    "temperature_rtd": SignalScaling(0, 32767, -50, 400, "°C"),
    "level_percent": SignalScaling(4, 20, 0, 100, "%"),
    "level_m": SignalScaling(4, 20, 0, 10, "m"),
    "flow_m3h": SignalScaling(4, 20, 0, 500, "m³/h"),
    "speed_rpm": SignalScaling(4, 20, 0, 1800, "RPM"),
    "voltage_0_10": SignalScaling(0, 10, 0, 100, "%"),
    "current_a": SignalScaling(4, 20, 0, 500, "A"),
    "valve_pos": SignalScaling(4, 20, 0, 100, "%"),
}


def find_module_template(model: str) -> ModuleTemplate | None:
    """Look up a module template by model number."""
    return next((t for t in WAGO_MODULES if t.model == model), None)


def find_device_template(model: str) -> DeviceTemplate | None:
    """Look up a device template by model name."""
    return next((t for t in COM_DEVICES if t.model == model), None)


def modules_by_type(signal_type: SignalType | None = None) -> list[ModuleTemplate]:
    """Module templates carrying channels of a signal type.

    Without a type, returns every I/O module (couplers and end modules
    excluded).
    """
    if signal_type is None:
        return [t for t in WAGO_MODULES if not (t.bus_coupler or t.end_module)]
    return [t for t in WAGO_MODULES if any(g.signal_type is signal_type for g in t.channels)]
