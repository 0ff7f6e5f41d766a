"""Hierarchical XML export for WAGO e!COCKPIT / CODESYS I/O import.

Document layout::

    WAGOConfiguration
      Project
      Nodes / Node (one per rack) / Modules / Module / Channels / Channel
      COMDevices / Device / Registers / Register   (only with devices)
      MappingSummary / Map                          (flat list of bindings)

Bus couplers and end modules head and close a rack; they are emitted as
``Coupler`` and ``EndModule`` instead of regular modules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

import structlog

from hal_mapper.adapters.export.base import GENERATOR, Exporter
from hal_mapper.adapters.export.rows import format_number, format_scaling
from hal_mapper.domain.model.catalog import (
    DEFAULT_RACK,
    ByteOrder,
    MappingSource,
    RegisterType,
    SignalType,
)

if TYPE_CHECKING:
    from hal_mapper.domain.model.hardware import (
        FieldbusDevice,
        FieldbusRegister,
        HardwareChannel,
        HardwareModule,
    )
    from hal_mapper.domain.model.mapping import Mapping

logger = structlog.get_logger(__name__)

XML_FORMAT_VERSION = "1.0"
COUPLER_MODEL = "750-352"
END_MODULE_MODEL = "750-600"


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def _sub(parent: ET.Element, tag: str, text: str = "", **attrib: str) -> ET.Element:
    elem = ET.SubElement(parent, tag, attrib)
    if text:
        elem.text = text
    return elem


class XmlExporter(Exporter):
    """Renders the configuration as a ``WAGOConfiguration`` document."""

    format_name = "xml"
    extension = "xml"

    def render(self) -> str:
        root = ET.Element(
            "WAGOConfiguration",
            {
                "version": XML_FORMAT_VERSION,
                "generator": GENERATOR,
                "exported": self._timestamp(),
            },
        )

        self._add_project(root)
        self._add_nodes(root)
        if self._config.devices:
            self._add_devices(root)
        self._add_mapping_summary(root)

        return self._to_xml_string(root)

    def _add_project(self, root: ET.Element) -> None:
        project = ET.SubElement(root, "Project")
        _sub(project, "Name", self._config.name or "HAL Configuration")
        _sub(project, "Version", self._config.version)
        _sub(project, "Description", self._config.description)
        _sub(project, "ProjectId", self._config.project_id)

    # -- hardware -------------------------------------------------------------

    def _racks(self) -> dict[str, list[HardwareModule]]:
        """Modules grouped by rack, in (rack_id, rack_position) order."""
        racks: dict[str, list[HardwareModule]] = {}
        for module in self._config.sorted_modules():
            racks.setdefault(module.rack_id or DEFAULT_RACK, []).append(module)
        return racks

    def _add_nodes(self, root: ET.Element) -> None:
        nodes = ET.SubElement(root, "Nodes")

        for rack_id, modules in self._racks().items():
            node = _sub(nodes, "Node", id=rack_id)
            _sub(node, "Name", rack_id)

            coupler = next((m for m in modules if m.template_model == COUPLER_MODEL), None)
            if coupler:
                _sub(node, "Coupler", model=coupler.template_model, name=coupler.name)

            modules_elem = ET.SubElement(node, "Modules")
            for module in modules:
                if module.template_model in (COUPLER_MODEL, END_MODULE_MODEL):
                    continue
                self._add_module(modules_elem, module)

            end_module = next((m for m in modules if m.template_model == END_MODULE_MODEL), None)
            if end_module:
                _sub(
                    modules_elem,
                    "EndModule",
                    model=END_MODULE_MODEL,
                    position=str(end_module.rack_position),
                )

    def _add_module(self, parent: ET.Element, module: HardwareModule) -> None:
        module_elem = _sub(
            parent,
            "Module",
            position=str(module.rack_position),
            model=module.template_model,
            name=module.name,
        )
        _sub(
            module_elem,
            "ProcessData",
            di=str(module.count(SignalType.DI)),
            do=str(module.count(SignalType.DO)),
            ai=str(module.count(SignalType.AI)),
            ao=str(module.count(SignalType.AO)),
        )

        channels = ET.SubElement(module_elem, "Channels")
        for channel in module.channels:
            self._add_channel(channels, channel)

    def _add_channel(self, parent: ET.Element, channel: HardwareChannel) -> None:
        channel_elem = _sub(
            parent,
            "Channel",
            number=str(channel.channel_number),
            signalType=channel.signal_type.value,
        )
        _sub(channel_elem, "Terminal", channel.terminal)
        _sub(channel_elem, "Tag", channel.tag)
        _sub(channel_elem, "ElectricalType", channel.electrical_type)
        _sub(channel_elem, "Description", channel.description)

        mapping = self._config.mapping_for_channel(channel.id)
        signal = self._signals_by_id.get(mapping.app_signal_id) if mapping else None

        if mapping and signal:
            mapping_elem = _sub(channel_elem, "Mapping", status=mapping.status.value)
            _sub(mapping_elem, "AppSignal", signal.path)
            _sub(mapping_elem, "AppSignalType", signal.signal_type.value)
            _sub(mapping_elem, "AppDataType", signal.data_type or "BOOL")
            if mapping.notes:
                _sub(mapping_elem, "Notes", mapping.notes)
            if mapping.scaling:
                scaling = mapping.scaling
                scaling_elem = ET.SubElement(mapping_elem, "Scaling")
                _sub(scaling_elem, "RawMin", format_number(scaling.raw_min))
                _sub(scaling_elem, "RawMax", format_number(scaling.raw_max))
                _sub(scaling_elem, "EngMin", format_number(scaling.eng_min))
                _sub(scaling_elem, "EngMax", format_number(scaling.eng_max))
                _sub(scaling_elem, "Unit", scaling.unit)
                _sub(scaling_elem, "Clamp", _bool_text(scaling.clamp_enabled))
                _sub(scaling_elem, "Filter", format_number(scaling.filter_ms))
        elif mapping and mapping.grounded:
            _sub(channel_elem, "Grounded", value=mapping.ground_value)
        else:
            _sub(channel_elem, "Mapping", status="unmapped")

    # -- fieldbus -------------------------------------------------------------

    def _add_devices(self, root: ET.Element) -> None:
        devices = ET.SubElement(root, "COMDevices")
        for device in self._config.devices:
            self._add_device(devices, device)

    def _add_device(self, parent: ET.Element, device: FieldbusDevice) -> None:
        device_elem = _sub(
            parent,
            "Device",
            protocol=device.protocol.value,
            model=device.template_model,
            manufacturer=device.manufacturer,
        )
        _sub(device_elem, "InstanceName", device.instance_name)
        _sub(device_elem, "Name", device.name)
        _sub(
            device_elem,
            "Network",
            ip=device.ip_address,
            port=str(device.port),
            unitId=str(device.unit_id),
            pollRate=str(device.poll_rate_ms),
        )

        registers = ET.SubElement(device_elem, "Registers")
        for register in device.registers:
            self._add_register(registers, register)

    def _add_register(self, parent: ET.Element, register: FieldbusRegister) -> None:
        register_type = register.register_type or RegisterType.HOLDING_REGISTER
        register_elem = _sub(
            parent,
            "Register",
            address=str(register.address),
            type=register_type.value,
            signalType=register.signal_type.value,
        )
        _sub(register_elem, "Name", register.name)
        _sub(register_elem, "Tag", register.tag)
        _sub(register_elem, "DataType", register.data_type)
        _sub(register_elem, "ByteOrder", (register.byte_order or ByteOrder.BIG).value)
        if register.scale_factor is not None and register.scale_factor != 1:
            _sub(register_elem, "ScaleFactor", format_number(register.scale_factor))
        _sub(register_elem, "Description", register.description)

        mapping = self._config.mapping_for_register(register.id)
        signal = self._signals_by_id.get(mapping.app_signal_id) if mapping else None
        if mapping and signal:
            mapping_elem = _sub(register_elem, "Mapping", status=mapping.status.value)
            _sub(mapping_elem, "AppSignal", signal.path)
            if mapping.scaling:
                scaling = mapping.scaling
                _sub(
                    mapping_elem,
                    "Scaling",
                    rawMin=format_number(scaling.raw_min),
                    rawMax=format_number(scaling.raw_max),
                    engMin=format_number(scaling.eng_min),
                    engMax=format_number(scaling.eng_max),
                    unit=scaling.unit,
                )

    # -- summary --------------------------------------------------------------

    def _add_mapping_summary(self, root: ET.Element) -> None:
        summary = _sub(root, "MappingSummary", total=str(len(self._config.mappings)))
        for mapping in self._config.mappings:
            signal = self._signals_by_id.get(mapping.app_signal_id)
            if signal is None:
                continue
            attrib = self._source_attributes(mapping)
            attrib["signal"] = signal.path
            attrib["type"] = signal.signal_type.value
            attrib["status"] = mapping.status.value
            if mapping.scaling and mapping.source is not MappingSource.COM:
                attrib["scaling"] = format_scaling(mapping.scaling)
            ET.SubElement(summary, "Map", attrib)

    def _source_attributes(self, mapping: Mapping) -> dict[str, str]:
        if mapping.source is MappingSource.COM:
            register = self._config.find_register(mapping.com_register_id)
            device = self._config.find_device(register.device_id) if register else None
            return {
                "source": "com",
                "device": device.instance_name if device else "?",
                "register": register.name if register else "?",
            }
        channel = self._config.find_channel(mapping.hw_channel_id)
        return {
            "source": "hw",
            "terminal": channel.terminal if channel else "?",
            "tag": channel.tag if channel else "",
        }

    def _to_xml_string(self, root: ET.Element) -> str:
        """Convert element tree to formatted XML string."""
        ET.indent(root, space="  ")
        return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(
            root, encoding="unicode"
        )
