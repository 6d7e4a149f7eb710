"""In-memory model of the libvirt domain devices touched by network binding."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from vdpabind.core.errors import PciAddressError

USER_ALIAS_PREFIX = "ua-"
ADDRESS_TYPE_PCI = "pci"

_PCI_ADDRESS_RE = re.compile(r"^([\da-fA-F]{4}):([\da-fA-F]{2}):([\da-fA-F]{2})\.([0-7])$")


@dataclass
class Alias:
    name: str
    user_defined: bool = False

    @classmethod
    def user_defined_for(cls, name: str) -> Alias:
        return cls(name=name, user_defined=True)

    @classmethod
    def from_xml_name(cls, value: str) -> Alias:
        if value.startswith(USER_ALIAS_PREFIX):
            return cls(name=value[len(USER_ALIAS_PREFIX):], user_defined=True)
        return cls(name=value)

    @property
    def xml_name(self) -> str:
        if self.user_defined:
            return USER_ALIAS_PREFIX + self.name
        return self.name


@dataclass
class Address:
    type: str
    domain: str = ""
    bus: str = ""
    slot: str = ""
    function: str = ""
    # Attributes such as multifunction or ccw fields, kept verbatim.
    attrs: dict[str, str] = field(default_factory=dict)


@dataclass
class Model:
    type: str


@dataclass
class MAC:
    mac: str


@dataclass
class ACPI:
    index: int


@dataclass
class InterfaceSource:
    # Serialized as the "dev" attribute.
    device: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[ET.Element] = field(default_factory=list)


@dataclass
class DomainInterface:
    type: str
    source: InterfaceSource = field(default_factory=InterfaceSource)
    model: Model | None = None
    mac: MAC | None = None
    alias: Alias | None = None
    address: Address | None = None
    acpi: ACPI | None = None
    # Attributes of <interface> other than type, e.g. managed.
    attrs: dict[str, str] = field(default_factory=dict)
    # Child elements of <interface> that are not modelled above, kept verbatim.
    extra: list[ET.Element] = field(default_factory=list)


@dataclass
class Devices:
    interfaces: list[DomainInterface] = field(default_factory=list)


@dataclass
class DomainSpec:
    name: str = ""
    devices: Devices = field(default_factory=Devices)
    # Original <domain> tree, used to re-emit everything outside <interface>.
    source_tree: ET.Element | None = field(default=None, repr=False, compare=False)
    # Namespace prefixes declared by the source document, e.g. qemu.
    namespaces: dict[str, str] = field(default_factory=dict, compare=False)


def new_pci_address_field(address: str) -> Address:
    """Parse a ``DDDD:BB:SS.F`` PCI address into a domain address element."""
    match = _PCI_ADDRESS_RE.match(address)
    if not match:
        raise PciAddressError(f"failed to parse pci address {address}")
    domain, bus, slot, function = ("0x" + part for part in match.groups())
    return Address(type=ADDRESS_TYPE_PCI, domain=domain, bus=bus, slot=slot, function=function)


def lookup_interface_by_alias_name(
    interfaces: list[DomainInterface], name: str
) -> int | None:
    """Return the index of the interface whose alias resolves to ``name``."""
    for index, iface in enumerate(interfaces):
        if iface.alias is not None and iface.alias.name == name:
            return index
    return None
