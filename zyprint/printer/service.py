"""Printer operations exposed to the host application."""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional

from zyprint.errors import NotConnected, WriteFailed
from zyprint.printer import discovery
from zyprint.printer.escpos import encode_status_probe
from zyprint.printer.registry import ConnectionRegistry
from zyprint.printer.renderer import ReceiptRenderer
from zyprint.printer.request import PlainText, PrintRequest, ReceiptTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrinterStatus:
    """Coarse printer state."""
    state: str
    paper_state: str
    connected: bool

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            "status": self.state,
            "paperStatus": self.paper_state,
            "connected": self.connected,
        }


class PrinterService:
    """Discovery, connection and printing operations.

    Every operation is synchronous and raises ``PrinterError`` subclasses;
    ``submit`` runs any of them on the worker pool and returns a future.
    """

    OPERATIONS = (
        "discover", "discover_network", "connect", "disconnect",
        "print", "print_text", "print_receipt", "status",
    )

    def __init__(self, registry: Optional[ConnectionRegistry] = None,
                 discovery_source=None,
                 name_keywords: Iterable[str] = discovery.DEFAULT_NAME_KEYWORDS,
                 network_port: int = 9100,
                 probe_timeout: float = 0.5,
                 width: int = 48,
                 max_workers: int = 8):
        self.registry = registry or ConnectionRegistry()
        self.discovery_source = discovery_source
        self.name_keywords = tuple(name_keywords)
        self.network_port = network_port
        self.probe_timeout = probe_timeout
        self.renderer = ReceiptRenderer(width=width)
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="zyprint")

    def echo(self, value: str) -> str:
        logger.info("Echo: %s", value)
        return value

    def discover(self) -> List[discovery.DiscoveredPrinter]:
        """List bonded Bluetooth printers."""
        return discovery.discover(self.discovery_source, self.name_keywords)

    def discover_network(self, network_range: str) -> List[discovery.DiscoveredPrinter]:
        """List hosts in a network that accept raw print jobs."""
        return discovery.discover_network(network_range, port=self.network_port,
                                          timeout=self.probe_timeout)

    def connect(self, identifier: str) -> None:
        self.registry.connect(identifier)

    def disconnect(self, identifier: str) -> None:
        self.registry.disconnect(identifier)

    def print(self, identifier: str, request: PrintRequest) -> None:
        """Render a print request and send it as one write.

        The request is fully rendered before the printer is looked up, so a
        malformed request never reaches the wire.
        """
        data = self.renderer.render(request)
        self.registry.send(identifier, data)
        logger.info("Printed %d bytes on %s", len(data), identifier)

    def print_text(self, identifier: str, text: str) -> None:
        self.print(identifier, PlainText(text))

    def print_receipt(self, identifier: str, template: ReceiptTemplate) -> None:
        self.print(identifier, template)

    def status(self, identifier: str) -> PrinterStatus:
        """Probe the printer with a status inquiry.

        The printer's reply is not read; a successful write reports ready.
        """
        if not self.registry.is_connected(identifier):
            return PrinterStatus("offline", "unknown", False)
        try:
            self.registry.send(identifier, encode_status_probe())
        except NotConnected:
            return PrinterStatus("offline", "unknown", False)
        except WriteFailed as e:
            logger.warning("Status probe on %s failed: %s", identifier, e.message)
            return PrinterStatus("error", "unknown", True)
        return PrinterStatus("ready", "ok", True)

    def submit(self, operation: str, *args) -> Future:
        """Run an operation on the worker pool.

        Raises:
            ValueError: If the operation name is unknown.
        """
        if operation not in self.OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        return self._executor.submit(getattr(self, operation), *args)

    def shutdown(self) -> None:
        """Close every open transport and stop the worker pool."""
        self.registry.close_all()
        self._executor.shutdown(wait=False)
