"""Stable public API for building tooling on top of vdpabind.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import logging
from pathlib import Path

from vdpabind.core.configurator import VDPA_PLUGIN_NAME, VdpaNetworkConfigurator
from vdpabind.core.errors import (
    DomainInterfaceError,
    DomainSpecError,
    NetworkInfoError,
    NetworkInfoParseError,
    NetworkInfoTimeoutError,
    NetworkSelectionError,
    PciAddressError,
    VdpabindError,
    VmiValidationError,
)
from vdpabind.core.model import (
    DeviceInfo,
    Interface,
    InterfaceBinding,
    MultusNetwork,
    Network,
    NetworkConfiguratorOptions,
    NetworkInfo,
    NetworkInfoInterface,
    VdpaDevice,
    VmiNetworkSpec,
)
from vdpabind.core.network_info import NETWORK_INFO_PATH, load_network_info, read_network_info
from vdpabind.core.service import LOGGER as SERVICE_LOGGER
from vdpabind.core.service import VdpaBindingService
from vdpabind.core.vmi_loader import load_vmi
from vdpabind.domain.schema import DomainInterface, DomainSpec
from vdpabind.domain.xml_codec import dump_domain_spec, load_domain_spec

__all__ = [
    "VDPA_PLUGIN_NAME",
    "NETWORK_INFO_PATH",
    "VdpabindError",
    "DomainInterfaceError",
    "DomainSpecError",
    "NetworkInfoError",
    "NetworkInfoParseError",
    "NetworkInfoTimeoutError",
    "NetworkSelectionError",
    "PciAddressError",
    "VmiValidationError",
    "DeviceInfo",
    "Interface",
    "InterfaceBinding",
    "MultusNetwork",
    "Network",
    "NetworkConfiguratorOptions",
    "NetworkInfo",
    "NetworkInfoInterface",
    "VdpaDevice",
    "VmiNetworkSpec",
    "DomainInterface",
    "DomainSpec",
    "VdpaNetworkConfigurator",
    "VdpaBindingService",
    "load_network_info",
    "read_network_info",
    "load_vmi",
    "load_domain_spec",
    "dump_domain_spec",
    "Client",
]


class Client:
    """Public client for the vdpa network binding.

    A `Client` wraps network info discovery, VMI loading, and domain XML
    mutation behind a stable API intended for sidecars and scripts.
    """

    def __init__(
        self,
        *,
        network_info_path: Path | str = NETWORK_INFO_PATH,
        logger: logging.Logger = SERVICE_LOGGER,
    ) -> None:
        self._service = VdpaBindingService(network_info_path=network_info_path, logger=logger)

    def network_info(self) -> NetworkInfo | None:
        return self._service.network_info()

    def configurator(self, vmi_text: str) -> VdpaNetworkConfigurator:
        return self._service.configurator(load_vmi(vmi_text))

    def define_domain(self, vmi_text: str, domain_xml: str) -> str:
        return self._service.define_domain(vmi_text, domain_xml)
