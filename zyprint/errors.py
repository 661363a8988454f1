"""Error kinds raised by the printing core."""
from typing import Optional


class PrinterError(Exception):
    """Base class for printer errors."""

    kind = "printer_error"

    def __init__(self, message: str, identifier: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.identifier = identifier

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {"error": self.message, "kind": self.kind}


class AdapterUnavailable(PrinterError):
    """Wireless stack is absent or disabled."""

    kind = "adapter_unavailable"


class PermissionDenied(PrinterError):
    """The host refused access to the wireless stack."""

    kind = "permission_denied"


class DiscoveryError(PrinterError):
    """Enumerating bonded devices failed."""

    kind = "discovery_failed"


class ConnectError(PrinterError):
    """All transport attempts for an identifier failed."""

    kind = "connect_failed"


DeviceUnreachable = ConnectError


class NotConnected(PrinterError):
    """No transport is registered for the identifier."""

    kind = "not_connected"

    def __init__(self, identifier: Optional[str] = None):
        super().__init__("Printer not connected", identifier)


class WriteFailed(PrinterError):
    """I/O error while sending bytes to a printer."""

    kind = "write_failed"


class EncodingError(PrinterError):
    """A print request could not be turned into command bytes."""

    kind = "encoding_failed"
