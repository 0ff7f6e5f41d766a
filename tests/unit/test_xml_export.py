"""Unit tests for the hierarchical XML export."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

import pytest

from hal_mapper.adapters.export import FIXED_TIMESTAMP, RowSource, XmlExporter, build_io_rows
from hal_mapper.application.mapping_manager import MappingManager
from hal_mapper.config.templates import find_module_template
from hal_mapper.domain.model.catalog import SignalType
from hal_mapper.domain.model.hardware import HardwareModule

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def exporter(bound_manager: MappingManager) -> XmlExporter:
    return XmlExporter(bound_manager.snapshot(), bound_manager.signals, deterministic=True)


@pytest.fixture
def root(exporter: XmlExporter) -> ET.Element:
    return ET.fromstring(exporter.render().encode("utf-8"))


class TestDocument:
    """Tests for the document envelope."""

    def test_declaration_and_root(self, exporter: XmlExporter, root: ET.Element) -> None:
        xml = exporter.render()
        assert xml.startswith('<?xml version="1.0" encoding="utf-8"?>\n<WAGOConfiguration')
        assert root.tag == "WAGOConfiguration"
        assert root.get("version") == "1.0"
        assert root.get("generator") == "hal-mapper"
        assert root.get("exported") == FIXED_TIMESTAMP

    def test_deterministic(self, exporter: XmlExporter) -> None:
        assert exporter.render() == exporter.render()

    def test_project(self, root: ET.Element) -> None:
        project = root.find("Project")
        assert project.findtext("Name") == "Pump Skid HAL"
        assert project.findtext("Version") == "0.1"
        assert project.findtext("Description") == "Unit test plant"
        assert project.findtext("ProjectId") == "prj_1"

    def test_section_order(self, root: ET.Element) -> None:
        assert [child.tag for child in root] == [
            "Project", "Nodes", "COMDevices", "MappingSummary",
        ]

    def test_generate_writes_file(self, exporter: XmlExporter, tmp_path: Path) -> None:
        output = tmp_path / "out.xml"
        content = exporter.generate(output)
        assert output.read_text(encoding="utf-8") == content
        assert exporter.default_filename() == "Pump_Skid_HAL_v0.1.xml"


class TestNodes:
    """Tests for racks, modules and channels."""

    def test_single_rack(self, root: ET.Element) -> None:
        nodes = root.findall("Nodes/Node")
        assert [n.get("id") for n in nodes] == ["X100"]
        assert nodes[0].findtext("Name") == "X100"

    def test_modules(self, root: ET.Element) -> None:
        modules = root.findall("Nodes/Node/Modules/Module")
        assert [(m.get("position"), m.get("model")) for m in modules] == [
            ("1", "750-455"), ("2", "750-402"), ("3", "750-550"),
        ]
        process_data = modules[0].find("ProcessData")
        assert process_data.attrib == {"di": "0", "do": "0", "ai": "4", "ao": "0"}

    def test_bound_channel(self, root: ET.Element) -> None:
        channel = root.find("Nodes/Node/Modules/Module/Channels/Channel")

        assert channel.attrib == {"number": "1", "signalType": "AI"}
        assert channel.findtext("Terminal") == "X100:1.1"
        assert channel.findtext("ElectricalType") == "4-20mA"
        mapping = channel.find("Mapping")
        assert mapping.get("status") == "mapped"
        assert mapping.findtext("AppSignal") == "PumpC_01.Feedback"
        assert mapping.findtext("AppSignalType") == "AI"
        assert mapping.findtext("AppDataType") == "REAL"
        scaling = mapping.find("Scaling")
        assert [scaling.findtext(t) for t in ("RawMin", "RawMax", "EngMin", "EngMax")] == [
            "4", "20", "0", "100",
        ]
        assert scaling.findtext("Clamp") == "true"
        assert scaling.findtext("Filter") == "0"

    def test_empty_elements_self_close(self, exporter: XmlExporter) -> None:
        assert "<Tag />" in exporter.render()

    def test_unbound_channel(self, root: ET.Element) -> None:
        channel = root.findall("Nodes/Node/Modules/Module/Channels/Channel")[1]
        mapping = channel.find("Mapping")
        assert mapping.attrib == {"status": "unmapped"}
        assert list(mapping) == []

    def test_data_type_defaults_to_bool(self, manager: MappingManager) -> None:
        manager.bind("mod_ao_ch1", "hw", "sig_speed")
        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        module = root.findall("Nodes/Node/Modules/Module")[2]
        assert module.findtext("Channels/Channel/Mapping/AppDataType") == "BOOL"

    def test_racks_sorted_by_rack_id(
        self, manager: MappingManager, module_factory: Callable[..., HardwareModule]
    ) -> None:
        manager.config.modules.insert(
            0, module_factory("mod_y", "750-402", 5, SignalType.DI, "24VDC", rack="Y200")
        )
        manager.config.modules.insert(
            0, module_factory("mod_a", "750-402", 1, SignalType.DI, "24VDC", rack="A050")
        )
        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        assert [n.get("id") for n in root.findall("Nodes/Node")] == ["A050", "X100", "Y200"]

    def test_rack_order_matches_csv(self, manager: MappingManager) -> None:
        manager.add_module(find_module_template("750-402"), rack_id="Rack-2")
        manager.add_module(find_module_template("750-402"), rack_id="Rack-1")

        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        xml_racks = [n.get("id") for n in root.findall("Nodes/Node")]
        rows = build_io_rows(manager.config, manager.signals)
        csv_racks = list(
            dict.fromkeys(r.rack_or_device for r in rows if r.source is RowSource.HW)
        )
        assert xml_racks == csv_racks == ["Rack-1", "Rack-2", "X100"]

    def test_coupler_and_end_module(
        self, manager: MappingManager, module_factory: Callable[..., HardwareModule]
    ) -> None:
        coupler = module_factory("cpl", "750-352", 0, SignalType.DI, "", count=0)
        end = module_factory("end", "750-600", 9, SignalType.DI, "", count=0)
        manager.config.modules.extend([coupler, end])

        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        node = root.find("Nodes/Node")
        assert node.find("Coupler").get("model") == "750-352"
        modules = node.find("Modules")
        assert [m.get("model") for m in modules.findall("Module")] == [
            "750-455", "750-402", "750-550",
        ]
        assert modules[-1].tag == "EndModule"
        assert modules[-1].get("position") == "9"


class TestDevices:
    """Tests for fieldbus devices and registers."""

    def test_device(self, root: ET.Element) -> None:
        device = root.find("COMDevices/Device")
        assert device.get("protocol") == "modbus_tcp"
        assert device.get("model") == "DEIF-AGC-4"
        assert device.findtext("InstanceName") == "DEIF-AGC-4-1"
        assert device.find("Network").attrib == {
            "ip": "192.168.1.50", "port": "502", "unitId": "1", "pollRate": "1000",
        }

    def test_registers(self, root: ET.Element) -> None:
        running, power = root.findall("COMDevices/Device/Registers/Register")

        assert running.attrib == {"address": "100", "type": "coil", "signalType": "DI"}
        assert running.findtext("ByteOrder") == "big_endian"
        assert running.find("ScaleFactor") is None
        assert running.findtext("Mapping/AppSignal") == "Genset_01.Running"

        assert power.findtext("ScaleFactor") == "0.1"
        assert power.findtext("Description") == "Active power [kW]"
        assert power.find("Mapping") is None

    def test_register_scaling_attributes(self, manager: MappingManager) -> None:
        manager.bind("reg_power", "com", "sig_gen_power")
        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        scaling = root.find("COMDevices/Device/Registers/Register[2]/Mapping/Scaling")
        assert scaling.attrib == {
            "rawMin": "4", "rawMax": "20", "engMin": "0", "engMax": "100", "unit": "",
        }

    def test_no_devices_no_section(self, bound_manager: MappingManager) -> None:
        bound_manager.remove_device("dev_gen")
        root = ET.fromstring(
            XmlExporter(bound_manager.config, bound_manager.signals).render().encode()
        )
        assert root.find("COMDevices") is None


class TestMappingSummary:
    """Tests for the flat mapping list."""

    def test_summary(self, root: ET.Element) -> None:
        summary = root.find("MappingSummary")
        assert summary.get("total") == "3"
        hw, com, grounded = summary.findall("Map")

        assert hw.attrib == {
            "source": "hw",
            "terminal": "X100:1.1",
            "tag": "",
            "signal": "PumpC_01.Feedback",
            "type": "AI",
            "status": "mapped",
            "scaling": "4..20 → 0..100",
        }
        assert com.attrib == {
            "source": "com",
            "device": "DEIF-AGC-4-1",
            "register": "GenRunning",
            "signal": "Genset_01.Running",
            "type": "DI",
            "status": "mapped",
        }
        assert grounded.get("terminal") == "?"
        assert grounded.get("status") == "grounded"

    def test_unknown_signals_skipped(self, manager: MappingManager) -> None:
        manager.bind("mod_di_ch1", "hw", "sig_elsewhere")
        root = ET.fromstring(XmlExporter(manager.config, manager.signals).render().encode())
        summary = root.find("MappingSummary")
        assert summary.get("total") == "1"
        assert summary.findall("Map") == []
