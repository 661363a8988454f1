"""Registry of open printer transports, one per device identifier."""
import logging
import threading
from typing import Callable, Dict, List, Optional

from zyprint.errors import ConnectError, NotConnected, PrinterError
from zyprint.printer.connection import Transport, transport_candidates

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str], List[Transport]]


class ConnectionRegistry:
    """Maps device identifiers to at most one open transport.

    ``_lock`` guards the mapping and is never held across socket I/O.
    Operations that perform I/O for an identifier (connect, send) are
    serialized by that identifier's own lock, so writes to one printer
    never interleave and unrelated printers proceed in parallel.
    Identifier locks only exist while the identifier is connected or a
    connect for it is in progress.
    """

    def __init__(self, transport_factory: Optional[TransportFactory] = None):
        self._transport_factory = transport_factory or transport_candidates
        self._transports: Dict[str, Transport] = {}
        self._lock = threading.Lock()
        self._identifier_locks: Dict[str, threading.Lock] = {}

    def _identifier_lock(self, identifier: str) -> threading.Lock:
        with self._lock:
            lock = self._identifier_locks.get(identifier)
            if lock is None:
                lock = self._identifier_locks[identifier] = threading.Lock()
            return lock

    def _forget_lock(self, identifier: str) -> None:
        # Caller holds _lock
        if identifier not in self._transports:
            self._identifier_locks.pop(identifier, None)

    def connect(self, identifier: str) -> Transport:
        """Open a transport for the identifier and register it.

        Candidates from the transport factory are tried in order and the
        first that opens wins. A previous transport for the same identifier
        is closed after the new one is registered.

        Raises:
            ConnectError: If no candidate transport could be opened.
        """
        lock = self._identifier_lock(identifier)
        with lock:
            try:
                transport = self._open_first(identifier)
            except ConnectError:
                with self._lock:
                    self._forget_lock(identifier)
                raise
            with self._lock:
                previous = self._transports.get(identifier)
                self._transports[identifier] = transport
                # A failed concurrent connect may have dropped the lock entry
                self._identifier_locks.setdefault(identifier, lock)
            if previous is not None and previous is not transport:
                self._close_quietly(identifier, previous)
            logger.info("Connected %s via %s", identifier, transport.kind)
            return transport

    def _open_first(self, identifier: str) -> Transport:
        errors = []
        for transport in self._transport_factory(identifier):
            try:
                transport.open()
                return transport
            except PrinterError as e:
                logger.warning("%r failed to open: %s", transport, e.message)
                errors.append(e.message)
                self._close_quietly(identifier, transport)
        detail = "; ".join(errors) if errors else "no transport available"
        raise ConnectError(f"Connection failed: {detail}", identifier)

    def disconnect(self, identifier: str) -> None:
        """Remove and close the identifier's transport.

        The entry is removed before closing, and close failures are only
        logged: once this returns the identifier is disconnected.

        Raises:
            NotConnected: If no transport is registered.
        """
        with self._lock:
            transport = self._transports.pop(identifier, None)
            self._forget_lock(identifier)
        if transport is None:
            raise NotConnected(identifier)
        self._close_quietly(identifier, transport)
        logger.info("Disconnected %s", identifier)

    def send(self, identifier: str, data: bytes) -> None:
        """Write data to the identifier's transport.

        A failed write leaves the transport registered.

        Raises:
            NotConnected: If no transport is registered.
            WriteFailed: If the write fails.
        """
        with self._lock:
            lock = self._identifier_locks.get(identifier)
        if lock is None:
            raise NotConnected(identifier)
        with lock:
            transport = self.get(identifier)
            if transport is None:
                raise NotConnected(identifier)
            transport.write_and_flush(data)

    def get(self, identifier: str) -> Optional[Transport]:
        """Return the registered transport, if any."""
        with self._lock:
            return self._transports.get(identifier)

    def is_connected(self, identifier: str) -> bool:
        """Check whether a transport is registered for the identifier."""
        return self.get(identifier) is not None

    def identifiers(self) -> List[str]:
        """List connected identifiers."""
        with self._lock:
            return sorted(self._transports)

    def close_all(self) -> None:
        """Close and remove every registered transport."""
        with self._lock:
            transports = list(self._transports.items())
            self._transports.clear()
            for identifier, _ in transports:
                self._identifier_locks.pop(identifier, None)
        for identifier, transport in transports:
            self._close_quietly(identifier, transport)
        if transports:
            logger.info("Closed %d printer connection(s)", len(transports))

    def _close_quietly(self, identifier: str, transport: Transport) -> None:
        try:
            transport.close()
        except OSError as e:
            logger.warning("Error closing %r for %s: %s", transport, identifier, e)

    def __len__(self) -> int:
        with self._lock:
            return len(self._transports)
