"""Printer discovery over bonded Bluetooth devices and local networks."""
import ipaddress
import logging
import re
import socket
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from zyprint.errors import AdapterUnavailable, DiscoveryError, PermissionDenied
from zyprint.printer.connection import RAW_PRINT_PORT

logger = logging.getLogger(__name__)

DEFAULT_NAME_KEYWORDS = ("zywell", "zyprint", "printer")
STATE_READY = "ready"
STATE_OFFLINE = "offline"

# Largest network discover_network will sweep (a /22)
MAX_NETWORK_HOSTS = 1024


@dataclass(frozen=True)
class BondedDevice:
    """Device known to the host's wireless stack."""
    address: str
    name: Optional[str]
    bonded: bool


@dataclass(frozen=True)
class DiscoveredPrinter:
    """Printer candidate reported by discovery."""
    identifier: str
    name: str
    state: str
    connection_type: str = "bluetooth"
    port: Optional[int] = None

    def to_dict(self):
        """Convert to dictionary for API responses."""
        result = {
            "identifier": self.identifier,
            "name": self.name,
            "model": self.name,
            "status": self.state,
            "connectionType": self.connection_type,
        }
        if self.port is not None:
            result["port"] = self.port
        return result


class BluetoothctlSource:
    """Reads bonded devices from BlueZ through the bluetoothctl CLI."""

    DEVICE_LINE = re.compile(r'^Device\s+([0-9A-Fa-f:]{17})\s*(.*)$')
    NO_CONTROLLER = "No default controller available"
    PERMISSION_MARKERS = ("not authorized", "notauthorized", "permission denied", "accessdenied")

    def __init__(self, binary: str = "bluetoothctl", timeout: float = 10.0):
        self.binary = binary
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        try:
            result = subprocess.run(
                [self.binary, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise AdapterUnavailable(f"{self.binary} not found")
        except PermissionError as e:
            raise PermissionDenied(f"Cannot run {self.binary}: {e}")
        except subprocess.TimeoutExpired:
            raise DiscoveryError(f"{self.binary} {' '.join(args)} timed out")
        except OSError as e:
            raise DiscoveryError(f"Cannot run {self.binary}: {e}")

        output = f"{result.stdout}\n{result.stderr}"
        if self.NO_CONTROLLER in output:
            raise AdapterUnavailable(self.NO_CONTROLLER)
        lowered = output.lower()
        if any(marker in lowered for marker in self.PERMISSION_MARKERS):
            raise PermissionDenied(result.stderr.strip() or result.stdout.strip())
        if result.returncode != 0:
            raise DiscoveryError(
                f"{self.binary} {' '.join(args)} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout

    def bonded_devices(self) -> List[BondedDevice]:
        """List devices paired with the default adapter.

        Raises:
            AdapterUnavailable: No controller, or the controller is powered off.
            PermissionDenied: Access to the Bluetooth service was refused.
            DiscoveryError: bluetoothctl failed for any other reason.
        """
        if "Powered: yes" not in self._run("show"):
            raise AdapterUnavailable("Bluetooth adapter is powered off")

        devices = []
        for line in self._run("devices", "Paired").splitlines():
            match = self.DEVICE_LINE.match(line.strip())
            if not match:
                continue
            address, name = match.group(1), match.group(2).strip() or None
            try:
                info = self._run("info", address)
            except DiscoveryError as e:
                # Device removed since it was listed
                logger.warning("Skipping %s: %s", address, e.message)
                continue
            # Older BlueZ releases only report Paired
            if "Bonded:" in info:
                bonded = "Bonded: yes" in info
            else:
                bonded = "Paired: yes" in info
            devices.append(BondedDevice(address=address, name=name, bonded=bonded))
        return devices


def matches_keywords(name: Optional[str], keywords: Iterable[str]) -> bool:
    """Check whether a device name looks like a supported printer."""
    if not name:
        return False
    lowered = name.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def discover(source=None, keywords: Iterable[str] = DEFAULT_NAME_KEYWORDS) -> List[DiscoveredPrinter]:
    """Report bonded Bluetooth devices that look like printers.

    No active scan is performed. An absent or disabled adapter yields an
    empty list; every other failure propagates.

    Args:
        source: Object with a ``bonded_devices()`` method (default: bluetoothctl).
        keywords: Case-insensitive name substrings identifying printers.
    """
    source = source or BluetoothctlSource()
    keywords = tuple(keywords)
    try:
        devices = source.bonded_devices()
    except AdapterUnavailable as e:
        logger.info("Bluetooth unavailable, no printers discovered: %s", e.message)
        return []

    printers = []
    for device in devices:
        if not matches_keywords(device.name, keywords):
            logger.debug("Skipping %s (%s)", device.address, device.name)
            continue
        printers.append(DiscoveredPrinter(
            identifier=device.address,
            name=device.name,
            state=STATE_READY if device.bonded else STATE_OFFLINE,
        ))
    logger.info("Discovered %d printer(s) among %d bonded device(s)", len(printers), len(devices))
    return printers


def probe_port(host: str, port: int, timeout: float) -> bool:
    """Check whether a TCP port accepts connections."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def discover_network(network_range: str, port: int = RAW_PRINT_PORT, timeout: float = 0.5,
                     max_workers: int = 32,
                     probe: Callable[[str, int, float], bool] = probe_port) -> List[DiscoveredPrinter]:
    """Probe every host of an IPv4 network for an open raw printing port.

    Args:
        network_range: CIDR notation, e.g. "192.168.1.0/24".
        port: TCP port to probe.
        timeout: Per-host connect timeout in seconds.

    Raises:
        ValueError: If the range is invalid or larger than a /22.
    """
    network = ipaddress.IPv4Network(network_range, strict=False)
    if network.num_addresses > MAX_NETWORK_HOSTS:
        raise ValueError(f"Network {network} is too large to scan")

    hosts = [str(host) for host in network.hosts()] or [str(network.network_address)]
    logger.info("Probing %d host(s) in %s on port %d", len(hosts), network, port)

    with ThreadPoolExecutor(max_workers=min(max_workers, len(hosts))) as pool:
        results = list(pool.map(lambda host: probe(host, port, timeout), hosts))

    return [
        DiscoveredPrinter(
            identifier=host,
            name=f"Network printer {host}",
            state=STATE_READY,
            connection_type="wifi",
            port=port,
        )
        for host, found in zip(hosts, results) if found
    ]
