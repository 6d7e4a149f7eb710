from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from vdpabind.core import service as service_module
from vdpabind.core.errors import NetworkInfoTimeoutError, NetworkSelectionError, VmiValidationError
from vdpabind.core.network_info import read_network_info
from vdpabind.core.service import VdpaBindingService


def test_define_domain_adds_vdpa_interface(network_info_file: Path, vmi_yaml: str, domain_xml: str) -> None:
    service = VdpaBindingService(network_info_path=network_info_file)

    root = ET.fromstring(service.define_domain(vmi_yaml, domain_xml))

    interfaces = root.findall("devices/interface")
    assert [i.get("type") for i in interfaces] == ["ethernet", "vdpa"]
    vdpa = interfaces[1]
    assert vdpa.find("source").attrib == {"dev": "/dev/vhost-vdpa-0"}
    assert vdpa.find("mac").get("address") == "02:00:00:00:00:01"
    assert vdpa.find("model").get("type") == "virtio"
    assert vdpa.find("alias").get("name") == "ua-net1"
    assert interfaces[0].find("target").get("dev") == "tap0"


def test_define_domain_twice_replaces_interface(network_info_file: Path, vmi_yaml: str, domain_xml: str) -> None:
    service = VdpaBindingService(network_info_path=network_info_file)

    once = service.define_domain(vmi_yaml, domain_xml)
    twice = service.define_domain(vmi_yaml, once)

    assert once == twice
    assert len(ET.fromstring(twice).findall("devices/interface")) == 2


def test_define_domain_without_network_info(tmp_path: Path, vmi_yaml: str, domain_xml: str) -> None:
    service = VdpaBindingService(network_info_path=tmp_path / "missing")

    with pytest.raises(NetworkSelectionError, match="not found in NetworkInfo"):
        service.define_domain(vmi_yaml, domain_xml)


def test_define_domain_propagates_timeout(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, vmi_yaml: str, domain_xml: str
) -> None:
    path = tmp_path / "network-info"
    path.write_text("", encoding="utf-8")
    monkeypatch.setattr(
        service_module,
        "read_network_info",
        lambda p: read_network_info(p, interval_s=0.01, timeout_s=0.02),
    )
    service = VdpaBindingService(network_info_path=path)

    with pytest.raises(NetworkInfoTimeoutError):
        service.define_domain(vmi_yaml, domain_xml)


def test_define_domain_rejects_invalid_vmi(network_info_file: Path, domain_xml: str) -> None:
    service = VdpaBindingService(network_info_path=network_info_file)

    with pytest.raises(VmiValidationError):
        service.define_domain("kind: VirtualMachineInstance", domain_xml)


def test_network_info(network_info_file: Path) -> None:
    info = VdpaBindingService(network_info_path=network_info_file).network_info()
    assert info is not None
    assert info.interfaces[0].network == "net1"
