from vdpabind.core.interface_match import (
    first_multus_network,
    has_binding_plugin,
    lookup_interface_by_name,
)
from vdpabind.core.model import Interface, InterfaceBinding, MultusNetwork, Network


def _multus(name: str) -> Network:
    return Network(name=name, multus=MultusNetwork(network_name=name))


def test_first_multus_network_is_picked_in_declaration_order() -> None:
    networks = [Network(name="default"), _multus("net2"), _multus("net1")]
    picked = first_multus_network(networks)
    assert picked is not None
    assert picked.name == "net2"


def test_no_multus_network_returns_none() -> None:
    assert first_multus_network([Network(name="default")]) is None
    assert first_multus_network([]) is None


def test_lookup_interface_by_name() -> None:
    interfaces = [Interface(name="default"), Interface(name="net1")]
    assert lookup_interface_by_name(interfaces, "net1") == Interface(name="net1")
    assert lookup_interface_by_name(interfaces, "net2") is None


def test_has_binding_plugin() -> None:
    assert has_binding_plugin(Interface(name="net1", binding=InterfaceBinding(name="vdpa")), "vdpa")
    assert not has_binding_plugin(Interface(name="net1", binding=InterfaceBinding(name="sriov")), "vdpa")
    assert not has_binding_plugin(Interface(name="net1"), "vdpa")
