"""Network-to-interface selection logic."""

from __future__ import annotations

from collections.abc import Sequence

from vdpabind.core.model import Interface, Network


def is_multus_network(network: Network) -> bool:
    return network.multus is not None


def first_multus_network(networks: Sequence[Network]) -> Network | None:
    """Return the first secondary (multus) network in declaration order.

    Only one network is expected to carry the vdpa binding, so the first match in
    the ordered list wins and later multus networks are ignored.
    """
    for network in networks:
        if is_multus_network(network):
            return network
    return None


def lookup_interface_by_name(interfaces: Sequence[Interface], name: str) -> Interface | None:
    for iface in interfaces:
        if iface.name == name:
            return iface
    return None


def has_binding_plugin(iface: Interface, plugin_name: str) -> bool:
    return iface.binding is not None and iface.binding.name == plugin_name
