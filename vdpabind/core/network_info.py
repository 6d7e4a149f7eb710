"""Downward API network info discovery.

The device plugin publishes the vdpa device allocated to each network through a
file rendered by the downward API. The file can still be empty when the domain is
being defined, so it is polled for a short, fixed time before giving up.
"""

from __future__ import annotations

import json
import logging
import time
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import ValidationError, validators

from vdpabind.core.errors import NetworkInfoParseError, NetworkInfoTimeoutError
from vdpabind.core.model import DeviceInfo, NetworkInfo, NetworkInfoInterface, VdpaDevice

DOWNWARD_API_MOUNT_PATH = Path("/etc/podinfo")
NETWORK_INFO_VOLUME_PATH = "network-info"
NETWORK_INFO_PATH = DOWNWARD_API_MOUNT_PATH / NETWORK_INFO_VOLUME_PATH

POLL_INTERVAL_S = 0.1
POLL_TIMEOUT_S = 1.0

LOGGER = logging.getLogger(__name__)


class _PollTimeout(Exception):
    """Internal marker: the poll deadline passed while the file was still empty."""


def _load_schema_validator() -> Any:
    schema_text = resources.files("vdpabind.schemas").joinpath("network-info.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_file_until_not_empty(path: Path, *, interval_s: float, timeout_s: float) -> bytes:
    deadline = time.monotonic() + timeout_s
    while True:
        data = path.read_bytes()
        if data:
            return data
        if time.monotonic() >= deadline:
            raise _PollTimeout()
        LOGGER.debug("Network info file %s is still empty, retrying in %ss", path, interval_s)
        time.sleep(interval_s)


def _build_network_info(doc: dict[str, Any]) -> NetworkInfo:
    interfaces: list[NetworkInfoInterface] = []
    for entry in doc.get("interfaces") or []:
        device_info = None
        raw_device_info = entry.get("deviceInfo")
        if raw_device_info is not None:
            vdpa = None
            raw_vdpa = raw_device_info.get("vdpa")
            if raw_vdpa is not None:
                vdpa = VdpaDevice(
                    path=raw_vdpa.get("path", ""),
                    parent_device=raw_vdpa.get("parent-device", ""),
                    driver=raw_vdpa.get("driver", ""),
                    pci_address=raw_vdpa.get("pci-address", ""),
                    pf_pci_address=raw_vdpa.get("pf-pci-address", ""),
                )
            device_info = DeviceInfo(
                type=raw_device_info.get("type", ""),
                version=raw_device_info.get("version", ""),
                vdpa=vdpa,
            )
        interfaces.append(
            NetworkInfoInterface(
                network=entry["network"],
                device_info=device_info,
                mac_address=entry.get("mac", ""),
            )
        )
    return NetworkInfo(interfaces=tuple(interfaces))


def load_network_info(content: bytes | str, *, source: str = "<network-info>") -> NetworkInfo:
    """Parse and validate a network info JSON document."""
    try:
        doc = json.loads(content)
    except ValueError as exc:
        raise NetworkInfoParseError(f"Invalid JSON in {source}: {exc}") from exc

    # A JSON null unmarshals into an empty snapshot.
    if doc is None:
        return NetworkInfo()

    if not isinstance(doc, dict):
        raise NetworkInfoParseError(f"Network info {source} must contain an object at root")

    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise NetworkInfoParseError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    return _build_network_info(doc)


def read_network_info(
    path: Path | str = NETWORK_INFO_PATH,
    *,
    interval_s: float = POLL_INTERVAL_S,
    timeout_s: float = POLL_TIMEOUT_S,
) -> NetworkInfo | None:
    """Read the downward API network info, waiting for it to be published.

    Returns the parsed snapshot as soon as the file is non-empty. Raises
    ``NetworkInfoTimeoutError`` when the file stayed empty until the deadline,
    meaning the platform never published device info. Any other read failure
    returns ``None``; callers treat that as "no vdpa info yet" and a higher layer
    is expected to retry.
    """
    path = Path(path)
    try:
        content = _read_file_until_not_empty(path, interval_s=interval_s, timeout_s=timeout_s)
    except _PollTimeout:
        raise NetworkInfoTimeoutError(
            f"Timed out after {timeout_s}s waiting for network info file {path} to be populated"
        ) from None
    except OSError as exc:
        LOGGER.warning("Could not read network info file %s, ignoring: %s", path, exc)
        return None

    return load_network_info(content, source=str(path))
