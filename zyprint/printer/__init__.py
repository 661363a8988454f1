"""Printer module for ESC/POS thermal printing."""
from zyprint.printer.connection import (
    Transport,
    BluetoothTransport,
    NetworkTransport,
    transport_candidates,
)
from zyprint.printer.discovery import DiscoveredPrinter, discover, discover_network
from zyprint.printer.escpos import (
    ESCPOSBuilder,
    encode_receipt,
    encode_status_probe,
    encode_text,
    map_size,
)
from zyprint.printer.registry import ConnectionRegistry
from zyprint.printer.renderer import ReceiptRenderer
from zyprint.printer.request import (
    PlainText,
    ReceiptFormatting,
    ReceiptItem,
    ReceiptTemplate,
    parse_print_request,
)
from zyprint.printer.service import PrinterService, PrinterStatus

__all__ = [
    "Transport",
    "BluetoothTransport",
    "NetworkTransport",
    "transport_candidates",
    "DiscoveredPrinter",
    "discover",
    "discover_network",
    "ESCPOSBuilder",
    "encode_receipt",
    "encode_status_probe",
    "encode_text",
    "map_size",
    "ConnectionRegistry",
    "ReceiptRenderer",
    "PlainText",
    "ReceiptFormatting",
    "ReceiptItem",
    "ReceiptTemplate",
    "parse_print_request",
    "PrinterService",
    "PrinterStatus",
]
