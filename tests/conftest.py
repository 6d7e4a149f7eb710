from __future__ import annotations

import json
from pathlib import Path

import pytest

VMI_YAML = """
apiVersion: kubevirt.io/v1
kind: VirtualMachineInstance
metadata:
  name: vmi-vdpa
spec:
  domain:
    devices:
      interfaces:
        - name: default
          masquerade: {}
        - name: net1
          binding:
            name: vdpa
  networks:
    - name: default
      pod: {}
    - name: net1
      multus:
        networkName: default/vdpa-net
"""

DOMAIN_XML = """<domain type="kvm">
  <name>default_vmi-vdpa</name>
  <devices>
    <interface type="ethernet">
      <alias name="ua-default"/>
      <target dev="tap0" managed="no"/>
    </interface>
  </devices>
</domain>"""

NETWORK_INFO = {
    "interfaces": [
        {
            "network": "net1",
            "mac": "02:00:00:00:00:01",
            "deviceInfo": {"type": "vdpa", "vdpa": {"path": "/dev/vhost-vdpa-0"}},
        }
    ]
}


@pytest.fixture
def vmi_yaml() -> str:
    return VMI_YAML


@pytest.fixture
def domain_xml() -> str:
    return DOMAIN_XML


@pytest.fixture
def network_info_file(tmp_path: Path) -> Path:
    path = tmp_path / "network-info"
    path.write_text(json.dumps(NETWORK_INFO), encoding="utf-8")
    return path


@pytest.fixture
def vmi_file(tmp_path: Path) -> Path:
    path = tmp_path / "vmi.yaml"
    path.write_text(VMI_YAML, encoding="utf-8")
    return path


@pytest.fixture
def domain_file(tmp_path: Path) -> Path:
    path = tmp_path / "domain.xml"
    path.write_text(DOMAIN_XML, encoding="utf-8")
    return path
