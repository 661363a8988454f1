#!/usr/bin/env python3
"""
Thermal Receipt Printer Connectivity Tester
Tests discovery and connection via Bluetooth or Network interfaces
"""

import logging

from zyprint import setup_logging
from zyprint.errors import PrinterError
from zyprint.printer import (
    BluetoothTransport,
    NetworkTransport,
    ReceiptItem,
    ReceiptTemplate,
    discover,
    discover_network,
    encode_receipt,
    encode_status_probe,
)


def test_page(connection: str, address: str) -> bytes:
    """Build the test receipt."""
    return encode_receipt(ReceiptTemplate(
        header="=== PRINTER TEST ===",
        items=(
            ReceiptItem("Connection:", connection),
            ReceiptItem("Address:", address),
        ),
        footer="Status: OK",
    ))


def test_transport(transport, connection: str, address: str, print_test: bool = True) -> bool:
    """Open a transport, send a test page or a status probe, close it."""
    print(f"Testing {connection} connection to {address}...")
    try:
        transport.open()
        print(f"✓ Connected to {address}")
        if print_test:
            transport.write_and_flush(test_page(connection, address))
            print("✓ Test page sent")
        else:
            transport.write_and_flush(encode_status_probe())
            print("✓ Status inquiry sent")
        return True
    except PrinterError as e:
        print(f"✗ {e.message}")
        return False
    finally:
        try:
            transport.close()
        except OSError:
            pass


def list_bluetooth_printers() -> bool:
    """Print bonded Bluetooth printers."""
    print("Listing bonded Bluetooth printers...")
    try:
        printers = discover()
    except PrinterError as e:
        print(f"✗ Discovery failed: {e.message}")
        return False

    if not printers:
        print("  No printers found (is Bluetooth on and the printer paired?)")
    for printer in printers:
        print(f"  Found: {printer.name} - {printer.identifier} ({printer.state})")
    return bool(printers)


def scan_network(network_range: str, port: int) -> bool:
    """Print hosts accepting raw print jobs."""
    print(f"Scanning {network_range} on port {port}...")
    try:
        printers = discover_network(network_range, port=port)
    except ValueError as e:
        print(f"✗ {e}")
        return False

    if not printers:
        print("  No printers responded")
    for printer in printers:
        print(f"  Found: {printer.identifier}:{printer.port}")
    return bool(printers)


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Thermal Receipt Printer Connectivity Tester",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python printer-test.py discover
  python printer-test.py bt 00:11:22:33:44:55
  python printer-test.py net 192.168.1.100
  python printer-test.py net 192.168.1.100 9100 --no-print
  python printer-test.py scan 192.168.1.0/24
        """
    )

    parser.add_argument("--no-print", action="store_true",
                        help="Send a status inquiry instead of a test page")
    parser.add_argument("--timeout", type=float, default=5.0,
                        help="Connect timeout in seconds (default: 5)")
    parser.add_argument("--log-level", default="WARNING",
                        help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="mode", required=True)

    subparsers.add_parser("discover", help="List bonded Bluetooth printers")

    # Bluetooth subcommand
    bt_parser = subparsers.add_parser("bt", help="Test Bluetooth printer")
    bt_parser.add_argument("address", help="Bluetooth address (e.g., 00:11:22:33:44:55)")

    # Network subcommand
    net_parser = subparsers.add_parser("net", help="Test network printer")
    net_parser.add_argument("ip", help="Printer IP address")
    net_parser.add_argument("port", nargs="?", type=int, default=9100,
                            help="Port number (default: 9100)")

    # Scan subcommand
    scan_parser = subparsers.add_parser("scan", help="Scan a network for printers")
    scan_parser.add_argument("range", help="Network in CIDR notation (e.g., 192.168.1.0/24)")
    scan_parser.add_argument("port", nargs="?", type=int, default=9100,
                             help="Port number (default: 9100)")

    args = parser.parse_args()
    setup_logging(args.log_level)
    logging.getLogger(__name__).debug("Arguments: %s", args)

    print("=" * 40)
    print("Thermal Printer Connectivity Tester")
    print("=" * 40 + "\n")

    print_test = not args.no_print
    mode = args.mode

    if mode == "discover":
        list_bluetooth_printers()

    elif mode == "bt":
        transport = BluetoothTransport(args.address, timeout=args.timeout)
        test_transport(transport, "Bluetooth", args.address, print_test=print_test)

    elif mode == "net":
        transport = NetworkTransport(args.ip, args.port, timeout=args.timeout)
        test_transport(transport, "Network", f"{args.ip}:{args.port}", print_test=print_test)

    elif mode == "scan":
        scan_network(args.range, args.port)


if __name__ == "__main__":
    main()
