"""Printer transports for Bluetooth RFCOMM and TCP/IP network interfaces."""
import ipaddress
import logging
import re
import socket
from abc import ABC, abstractmethod
from typing import List, Optional

from zyprint.errors import ConnectError, WriteFailed

# SDP service lookup support (optional)
try:
    import bluetooth
    BLUETOOTH_SDP_AVAILABLE = True
except ImportError:
    BLUETOOTH_SDP_AVAILABLE = False

logger = logging.getLogger(__name__)

# Serial Port Profile service class, advertised by Bluetooth receipt printers
SPP_UUID = "00001101-0000-1000-8000-00805F9B34FB"
DEFAULT_RFCOMM_CHANNEL = 1
RAW_PRINT_PORT = 9100

HARDWARE_ADDRESS_PATTERN = re.compile(r'^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2}){5}$')
IPV4_PATTERN = re.compile(r'^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$')


def is_ipv4(identifier: str) -> bool:
    """Check for a dotted-quad IPv4 address."""
    if not IPV4_PATTERN.match(identifier):
        return False
    try:
        ipaddress.IPv4Address(identifier)
    except ValueError:
        return False
    return True


def is_hardware_address(identifier: str) -> bool:
    """Check for a colon-separated Bluetooth hardware address."""
    return bool(HARDWARE_ADDRESS_PATTERN.match(identifier))


class Transport(ABC):
    """Duplex byte channel to a printer.

    A transport is opened once and closed once; a closed transport is
    never reopened. ``timeout`` bounds the connect, ``write_timeout`` every
    write after it.
    """

    kind = "transport"

    def __init__(self, timeout: float = 5.0, write_timeout: Optional[float] = None):
        self.timeout = timeout
        self.write_timeout = timeout if write_timeout is None else write_timeout
        self._socket: Optional[socket.socket] = None
        self._closed = False

    @abstractmethod
    def _connect(self) -> socket.socket:
        """Create and connect the underlying socket."""

    def open(self) -> None:
        """Open the channel.

        Raises:
            ConnectError: If the channel cannot be opened.
        """
        if self._closed:
            raise ConnectError(f"{self!r} is closed")
        if self._socket is not None:
            return
        sock = self._connect()
        sock.settimeout(self.write_timeout)
        self._socket = sock
        logger.info("Opened %r", self)

    def write_and_flush(self, data: bytes) -> None:
        """Send all of ``data``.

        Raises:
            WriteFailed: If the channel is not open or the write fails.
        """
        sock = self._socket
        if sock is None:
            raise WriteFailed(f"{self!r} is not open")
        try:
            sock.sendall(data)
        except OSError as e:
            raise WriteFailed(f"Failed to send data: {e}")
        logger.debug("Sent %d bytes to %r", len(data), self)

    def close(self) -> None:
        """Close the channel. Closing twice is a no-op."""
        self._closed = True
        sock, self._socket = self._socket, None
        if sock is not None:
            sock.close()
            logger.info("Closed %r", self)

    @property
    def is_open(self) -> bool:
        """Check if the channel is open."""
        return self._socket is not None


class BluetoothTransport(Transport):
    """Bluetooth RFCOMM printer connection."""

    kind = "bluetooth"

    def __init__(self, address: str, service_uuid: str = SPP_UUID, timeout: float = 5.0,
                 write_timeout: Optional[float] = None):
        super().__init__(timeout, write_timeout)
        self.address = address
        self.service_uuid = service_uuid

    def resolve_channel(self) -> int:
        """Look up the RFCOMM channel of the printer's serial port service."""
        if not BLUETOOTH_SDP_AVAILABLE:
            return DEFAULT_RFCOMM_CHANNEL
        try:
            services = bluetooth.find_service(uuid=self.service_uuid, address=self.address)
        except (bluetooth.BluetoothError, OSError) as e:
            logger.warning("Service lookup on %s failed: %s", self.address, e)
            return DEFAULT_RFCOMM_CHANNEL
        for service in services:
            if service.get("port"):
                return service["port"]
        return DEFAULT_RFCOMM_CHANNEL

    def _connect(self) -> socket.socket:
        if not hasattr(socket, "AF_BLUETOOTH"):
            raise ConnectError("Bluetooth sockets are not supported on this platform")
        channel = self.resolve_channel()
        try:
            sock = socket.socket(socket.AF_BLUETOOTH, socket.SOCK_STREAM, socket.BTPROTO_RFCOMM)
        except OSError as e:
            raise ConnectError(f"Cannot create Bluetooth socket: {e}")
        try:
            sock.settimeout(self.timeout)
            sock.connect((self.address, channel))
        except OSError as e:
            sock.close()
            raise ConnectError(f"Failed to connect to {self.address} channel {channel}: {e}")
        return sock

    def __repr__(self):
        return f"BluetoothTransport({self.address})"


class NetworkTransport(Transport):
    """TCP/IP network printer connection."""

    kind = "network"

    def __init__(self, host: str, port: int = RAW_PRINT_PORT, timeout: float = 5.0,
                 write_timeout: Optional[float] = None):
        super().__init__(timeout, write_timeout)
        self.host = host
        self.port = port

    def _connect(self) -> socket.socket:
        try:
            return socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            raise ConnectError(f"Failed to connect to {self.host}:{self.port}: {e}")

    def __repr__(self):
        return f"NetworkTransport({self.host}:{self.port})"


def transport_candidates(identifier: str, config: Optional[dict] = None) -> List[Transport]:
    """Build the transports to try for an identifier, in order.

    Args:
        identifier: Bluetooth hardware address or dotted IPv4 address.
        config: Optional settings with 'port', 'timeout', 'write_timeout'
            and 'service_uuid'.

    Returns:
        Unopened transports; the first one that opens wins.
    """
    config = config or {}
    timeout = config.get("timeout", 5.0)
    write_timeout = config.get("write_timeout")

    if is_ipv4(identifier):
        return [NetworkTransport(
            identifier,
            port=config.get("port", RAW_PRINT_PORT),
            timeout=timeout,
            write_timeout=write_timeout,
        )]
    if not is_hardware_address(identifier):
        logger.warning("%r is neither an IPv4 nor a Bluetooth address, trying Bluetooth", identifier)
    return [BluetoothTransport(
        identifier,
        service_uuid=config.get("service_uuid", SPP_UUID),
        timeout=timeout,
        write_timeout=write_timeout,
    )]
