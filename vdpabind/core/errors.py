"""Domain-specific errors for vdpabind."""


class VdpabindError(Exception):
    """Base error for vdpabind."""


class NetworkSelectionError(VdpabindError):
    """Raised when the VMI networks cannot resolve a single vdpa-bound interface."""


class NetworkInfoError(VdpabindError):
    """Base error for downward API network info discovery."""


class NetworkInfoTimeoutError(NetworkInfoError):
    """Raised when the network info file stays empty until the poll deadline."""


class NetworkInfoParseError(NetworkInfoError):
    """Raised when the network info document is malformed or incomplete."""


class PciAddressError(VdpabindError):
    """Raised when an interface PCI address string cannot be parsed."""


class DomainInterfaceError(VdpabindError):
    """Raised when the domain interface spec cannot be generated."""


class DomainSpecError(VdpabindError):
    """Raised when a domain XML document cannot be decoded."""


class VmiValidationError(VdpabindError):
    """Raised when a VMI manifest does not conform to schema or semantics."""
