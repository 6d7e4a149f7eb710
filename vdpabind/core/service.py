"""Service layer used by the CLI and the domain definition hook."""

from __future__ import annotations

import logging
from pathlib import Path

from vdpabind.core.configurator import VdpaNetworkConfigurator
from vdpabind.core.model import NetworkInfo, VmiNetworkSpec
from vdpabind.core.network_info import NETWORK_INFO_PATH, read_network_info
from vdpabind.core.vmi_loader import load_vmi
from vdpabind.domain.xml_codec import dump_domain_spec, load_domain_spec

LOGGER = logging.getLogger(__name__)


class VdpaBindingService:
    def __init__(
        self,
        *,
        network_info_path: Path | str = NETWORK_INFO_PATH,
        logger: logging.Logger = LOGGER,
    ) -> None:
        self.network_info_path = Path(network_info_path)
        self.logger = logger

    def network_info(self) -> NetworkInfo | None:
        return read_network_info(self.network_info_path)

    def configurator(self, vmi: VmiNetworkSpec) -> VdpaNetworkConfigurator:
        return VdpaNetworkConfigurator.create(
            vmi.interfaces,
            vmi.networks,
            vmi.options,
            reader=self.network_info,
        )

    def define_domain(self, vmi_text: str, domain_xml: str) -> str:
        """Apply the vdpa interface of ``vmi_text`` to ``domain_xml``.

        This is the onDefineDomain step of the binding sidecar: the VMI manifest
        selects the interface, the downward API supplies the device, and the
        resulting domain XML is returned.
        """
        vmi = load_vmi(vmi_text)
        domain_spec = load_domain_spec(domain_xml)
        configurator = self.configurator(vmi)
        mutated = configurator.mutate(domain_spec, logger=self.logger)
        return dump_domain_spec(mutated)
