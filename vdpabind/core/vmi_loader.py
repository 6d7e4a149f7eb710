"""Loading and validation of VirtualMachineInstance manifests (YAML or JSON)."""

from __future__ import annotations

import json
import re
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from vdpabind.core.errors import VmiValidationError
from vdpabind.core.model import (
    Interface,
    InterfaceBinding,
    MultusNetwork,
    Network,
    NetworkConfiguratorOptions,
    VmiNetworkSpec,
)

ISTIO_INJECT_ANNOTATION = "sidecar.istio.io/inject"


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Keep YAML 1.1 words such as on/off/yes/no as strings; real booleans are still
# accepted through the JSON-style true/false below.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]

UniqueKeyLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise VmiValidationError(f"Duplicate key '{key}' in VMI document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("vdpabind.schemas").joinpath("vmi.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_document(text: str, source: str) -> dict[str, Any]:
    try:
        loaded = yaml.load(text, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise VmiValidationError(f"Invalid YAML/JSON in {source}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise VmiValidationError(f"VMI document {source} must contain a mapping at root")
    return loaded


def _build_interface(doc: dict[str, Any]) -> Interface:
    binding = doc.get("binding")
    return Interface(
        name=doc["name"],
        mac_address=doc.get("macAddress", ""),
        pci_address=doc.get("pciAddress", ""),
        acpi_index=int(doc.get("acpiIndex", 0)),
        binding=InterfaceBinding(name=binding["name"]) if binding else None,
    )


def _build_network(doc: dict[str, Any]) -> Network:
    multus = doc.get("multus")
    return Network(
        name=doc["name"],
        multus=MultusNetwork(
            network_name=multus["networkName"],
            default=bool(multus.get("default", False)),
        )
        if multus is not None
        else None,
    )


def _istio_proxy_injection_enabled(annotations: dict[str, str]) -> bool:
    return annotations.get(ISTIO_INJECT_ANNOTATION, "").strip().lower() == "true"


def load_vmi(text: str, *, source: str = "<vmi>") -> VmiNetworkSpec:
    doc = _read_document(text, source)

    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise VmiValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    spec = doc["spec"]
    devices = spec.get("domain", {}).get("devices", {})
    annotations = (doc.get("metadata") or {}).get("annotations") or {}

    interfaces = tuple(_build_interface(i) for i in devices.get("interfaces") or [])
    names = [i.name for i in interfaces]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise VmiValidationError(f"Duplicate interface names in {source}: {', '.join(duplicates)}")

    return VmiNetworkSpec(
        interfaces=interfaces,
        networks=tuple(_build_network(n) for n in spec.get("networks") or []),
        options=NetworkConfiguratorOptions(
            istio_proxy_injection_enabled=_istio_proxy_injection_enabled(annotations),
            use_virtio_transitional=bool(devices.get("useVirtioTransitional") or False),
        ),
    )


def load_vmi_file(path: Path | str) -> VmiNetworkSpec:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise VmiValidationError(f"Could not read VMI file {path}: {exc}") from exc
    return load_vmi(content, source=str(path))
