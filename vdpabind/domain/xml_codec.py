"""Decode and encode libvirt domain XML around the network interface model."""

from __future__ import annotations

import copy
import io
import re
import xml.etree.ElementTree as ET

from vdpabind.core.errors import DomainSpecError
from vdpabind.domain.schema import (
    ACPI,
    MAC,
    Address,
    Alias,
    Devices,
    DomainInterface,
    DomainSpec,
    InterfaceSource,
    Model,
)

SOURCE_DEVICE_ATTR = "dev"
_ADDRESS_ATTRS = ("domain", "bus", "slot", "function")
# ElementTree reserves ns0, ns1, ... for prefixes it generates itself.
_GENERATED_PREFIX_RE = re.compile(r"^ns\d+$")


def _decode_source(element: ET.Element) -> InterfaceSource:
    attrs = dict(element.attrib)
    device = attrs.pop(SOURCE_DEVICE_ATTR, "")
    return InterfaceSource(
        device=device,
        attrs=attrs,
        children=[copy.deepcopy(child) for child in element],
    )


def _decode_address(element: ET.Element) -> Address:
    attrs = dict(element.attrib)
    address = Address(type=attrs.pop("type", ""))
    for attr in _ADDRESS_ATTRS:
        setattr(address, attr, attrs.pop(attr, ""))
    address.attrs = attrs
    return address


def _decode_interface(element: ET.Element) -> DomainInterface:
    attrs = dict(element.attrib)
    iface = DomainInterface(type=attrs.pop("type", ""), attrs=attrs)
    for child in element:
        if child.tag == "source":
            iface.source = _decode_source(child)
        elif child.tag == "model":
            iface.model = Model(type=child.get("type", ""))
        elif child.tag == "mac":
            iface.mac = MAC(mac=child.get("address", ""))
        elif child.tag == "alias":
            iface.alias = Alias.from_xml_name(child.get("name", ""))
        elif child.tag == "address":
            iface.address = _decode_address(child)
        elif child.tag == "acpi":
            index = child.get("index", "0")
            try:
                iface.acpi = ACPI(index=int(index))
            except ValueError as exc:
                raise DomainSpecError(f"Invalid acpi index '{index}' on interface") from exc
        else:
            iface.extra.append(copy.deepcopy(child))
    return iface


def _encode_source(parent: ET.Element, source: InterfaceSource) -> None:
    attrs = dict(source.attrs)
    if source.device:
        attrs[SOURCE_DEVICE_ATTR] = source.device
    if not attrs and not source.children:
        return
    element = ET.SubElement(parent, "source", attrs)
    for child in source.children:
        element.append(copy.deepcopy(child))


def _encode_interface(iface: DomainInterface) -> ET.Element:
    element = ET.Element("interface", {"type": iface.type, **iface.attrs})
    _encode_source(element, iface.source)
    if iface.model is not None:
        ET.SubElement(element, "model", {"type": iface.model.type})
    if iface.mac is not None:
        ET.SubElement(element, "mac", {"address": iface.mac.mac})
    if iface.alias is not None:
        ET.SubElement(element, "alias", {"name": iface.alias.xml_name})
    if iface.address is not None:
        attrs = {"type": iface.address.type}
        attrs.update({attr: getattr(iface.address, attr) for attr in _ADDRESS_ATTRS if getattr(iface.address, attr)})
        attrs.update(iface.address.attrs)
        ET.SubElement(element, "address", attrs)
    if iface.acpi is not None:
        ET.SubElement(element, "acpi", {"index": str(iface.acpi.index)})
    for extra in iface.extra:
        element.append(copy.deepcopy(extra))
    return element


def _parse(xml_text: str | bytes) -> tuple[ET.Element, dict[str, str]]:
    data = xml_text.encode("utf-8") if isinstance(xml_text, str) else xml_text
    root: ET.Element | None = None
    namespaces: dict[str, str] = {}
    try:
        for event, item in ET.iterparse(io.BytesIO(data), events=("start", "start-ns")):
            if event == "start-ns":
                prefix, uri = item
                namespaces.setdefault(prefix, uri)
            elif root is None:
                root = item
    except ET.ParseError as exc:
        raise DomainSpecError(f"Invalid domain XML: {exc}") from exc
    if root is None:
        raise DomainSpecError("Invalid domain XML: no root element")
    return root, namespaces


def load_domain_spec(xml_text: str | bytes) -> DomainSpec:
    root, namespaces = _parse(xml_text)

    if root.tag != "domain":
        raise DomainSpecError(f"Domain XML must have a <domain> root element, got <{root.tag}>")

    interfaces: list[DomainInterface] = []
    devices = root.find("devices")
    if devices is not None:
        interfaces = [_decode_interface(el) for el in devices.findall("interface")]

    return DomainSpec(
        name=root.findtext("name", default=""),
        devices=Devices(interfaces=interfaces),
        source_tree=root,
        namespaces=namespaces,
    )


def _register_namespaces(namespaces: dict[str, str]) -> None:
    for prefix, uri in namespaces.items():
        # The default namespace cannot be registered under a prefix.
        if prefix and not _GENERATED_PREFIX_RE.match(prefix):
            ET.register_namespace(prefix, uri)


def dump_domain_spec(spec: DomainSpec) -> str:
    """Serialize ``spec``, keeping every non-interface element of the source tree."""
    if spec.source_tree is not None:
        root = copy.deepcopy(spec.source_tree)
    else:
        root = ET.Element("domain")
        if spec.name:
            ET.SubElement(root, "name").text = spec.name

    devices = root.find("devices")
    if devices is None:
        devices = ET.SubElement(root, "devices")

    existing = devices.findall("interface")
    position = list(devices).index(existing[0]) if existing else len(devices)
    for element in existing:
        devices.remove(element)

    for offset, iface in enumerate(spec.devices.interfaces):
        devices.insert(position + offset, _encode_interface(iface))

    _register_namespaces(spec.namespaces)
    return ET.tostring(root, encoding="unicode")
