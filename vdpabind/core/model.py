"""Core data models used across the loader, configurator, and CLI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InterfaceBinding:
    name: str


@dataclass(frozen=True)
class Interface:
    name: str
    mac_address: str = ""
    pci_address: str = ""
    acpi_index: int = 0
    binding: InterfaceBinding | None = None


@dataclass(frozen=True)
class MultusNetwork:
    network_name: str
    default: bool = False


@dataclass(frozen=True)
class Network:
    name: str
    multus: MultusNetwork | None = None


@dataclass(frozen=True)
class NetworkConfiguratorOptions:
    # Accepted for parity with the other binding plugins; the vdpa model is fixed.
    istio_proxy_injection_enabled: bool = False
    use_virtio_transitional: bool = False


@dataclass(frozen=True)
class VmiNetworkSpec:
    interfaces: tuple[Interface, ...]
    networks: tuple[Network, ...]
    options: NetworkConfiguratorOptions


@dataclass(frozen=True)
class VdpaDevice:
    path: str
    parent_device: str = ""
    driver: str = ""
    pci_address: str = ""
    pf_pci_address: str = ""


@dataclass(frozen=True)
class DeviceInfo:
    type: str = ""
    version: str = ""
    vdpa: VdpaDevice | None = None


@dataclass(frozen=True)
class NetworkInfoInterface:
    network: str
    device_info: DeviceInfo | None = None
    mac_address: str = ""


@dataclass(frozen=True)
class NetworkInfo:
    interfaces: tuple[NetworkInfoInterface, ...] = ()
