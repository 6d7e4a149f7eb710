"""Resolve the vdpa-bound VMI interface and apply it to a domain spec."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from vdpabind.core.errors import (
    DomainInterfaceError,
    NetworkInfoParseError,
    NetworkSelectionError,
    VdpabindError,
)
from vdpabind.core.interface_match import (
    first_multus_network,
    has_binding_plugin,
    lookup_interface_by_name,
)
from vdpabind.core.model import Interface, Network, NetworkConfiguratorOptions, NetworkInfo
from vdpabind.core.network_info import read_network_info
from vdpabind.domain.schema import (
    ACPI,
    MAC,
    Alias,
    DomainInterface,
    DomainSpec,
    InterfaceSource,
    Model,
    lookup_interface_by_alias_name,
    new_pci_address_field,
)

# Binding plugin name, as registered in the KubeVirt CR.
VDPA_PLUGIN_NAME = "vdpa"

INTERFACE_TYPE_VDPA = "vdpa"
INTERFACE_MODEL_VIRTIO = "virtio"

LOGGER = logging.getLogger(__name__)

NetworkInfoReader = Callable[[], NetworkInfo | None]


@dataclass(frozen=True)
class VdpaNetworkConfigurator:
    vmi_spec_iface: Interface
    options: NetworkConfiguratorOptions
    vdpa_path: str
    mac_address: str

    @classmethod
    def create(
        cls,
        interfaces: Sequence[Interface],
        networks: Sequence[Network],
        options: NetworkConfiguratorOptions | None = None,
        *,
        reader: NetworkInfoReader = read_network_info,
    ) -> VdpaNetworkConfigurator:
        """Select the vdpa-bound interface and resolve its device from network info.

        ``reader`` is called exactly once; its errors propagate unchanged.
        """
        options = options or NetworkConfiguratorOptions()

        network = first_multus_network(networks)
        if network is None:
            raise NetworkSelectionError("multus network not found")

        iface = lookup_interface_by_name(interfaces, network.name)
        if iface is None:
            raise NetworkSelectionError("no interface found")
        if not has_binding_plugin(iface, VDPA_PLUGIN_NAME):
            raise NetworkSelectionError(
                f"interface '{network.name}' is not set with Vdpa network binding plugin"
            )

        network_info = reader() or NetworkInfo()
        for entry in network_info.interfaces:
            if entry.network != iface.name:
                continue
            if entry.device_info is None or entry.device_info.vdpa is None:
                raise NetworkInfoParseError(
                    f"interface {iface.name} has no vdpa device info in NetworkInfo"
                )
            return cls(
                vmi_spec_iface=iface,
                options=options,
                vdpa_path=entry.device_info.vdpa.path,
                mac_address=entry.mac_address,
            )

        raise NetworkSelectionError(f"interface {iface.name} not found in NetworkInfo")

    def generate_interface(self) -> DomainInterface:
        iface = self.vmi_spec_iface

        address = None
        if iface.pci_address:
            address = new_pci_address_field(iface.pci_address)

        mac = None
        if iface.mac_address:
            mac = MAC(mac=iface.mac_address)
        elif self.mac_address:
            mac = MAC(mac=self.mac_address)

        acpi = None
        if iface.acpi_index > 0:
            acpi = ACPI(index=iface.acpi_index)

        return DomainInterface(
            type=INTERFACE_TYPE_VDPA,
            source=InterfaceSource(device=self.vdpa_path),
            model=Model(type=INTERFACE_MODEL_VIRTIO),
            mac=mac,
            alias=Alias.user_defined_for(iface.name),
            address=address,
            acpi=acpi,
        )

    def mutate(self, domain_spec: DomainSpec, *, logger: logging.Logger = LOGGER) -> DomainSpec:
        """Return a copy of ``domain_spec`` carrying the vdpa interface.

        An interface whose alias matches the VMI interface name is replaced in
        place; otherwise the new interface is appended. The input is not modified.
        """
        try:
            generated = self.generate_interface()
        except VdpabindError as exc:
            raise DomainInterfaceError(f"failed to generate domain interface spec: {exc}") from exc

        spec_copy = copy.deepcopy(domain_spec)
        interfaces = spec_copy.devices.interfaces
        index = lookup_interface_by_alias_name(interfaces, self.vmi_spec_iface.name)
        if index is not None:
            interfaces[index] = generated
        else:
            interfaces.append(generated)

        logger.info("vdpa interface is added to domain spec successfully: %r", generated)
        return spec_copy
