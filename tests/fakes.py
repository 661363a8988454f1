"""Fake transports and discovery sources for tests."""

import time

from zyprint.errors import ConnectError
from zyprint.printer.connection import Transport


class FakeSocket:
    """Records bytes written through a transport."""

    def __init__(self, fail_send: bool = False, fail_close: bool = False, byte_delay: float = 0.0):
        self.sent = bytearray()
        self.closed = False
        self.fail_send = fail_send
        self.fail_close = fail_close
        self.byte_delay = byte_delay
        self.timeout = None

    def settimeout(self, timeout) -> None:
        self.timeout = timeout

    def sendall(self, data: bytes) -> None:
        if self.closed:
            raise OSError(9, "Bad file descriptor")
        if self.fail_send:
            raise OSError(32, "Broken pipe")
        if self.byte_delay:
            for byte in data:
                self.sent.append(byte)
                time.sleep(self.byte_delay)
        else:
            self.sent.extend(data)

    def close(self) -> None:
        self.closed = True
        if self.fail_close:
            raise OSError(5, "Input/output error")


class FakeTransport(Transport):
    """Transport backed by a FakeSocket."""

    kind = "fake"

    def __init__(self, identifier: str, fail_open: bool = False, before_open=None, **socket_options):
        super().__init__(timeout=1.0)
        self.identifier = identifier
        self.fail_open = fail_open
        self.before_open = before_open
        self.sock = FakeSocket(**socket_options)
        self.open_calls = 0

    def _connect(self):
        self.open_calls += 1
        if self.before_open is not None:
            self.before_open()
        if self.fail_open:
            raise ConnectError(f"Cannot reach {self.identifier}")
        return self.sock

    def __repr__(self):
        return f"FakeTransport({self.identifier})"


class FakeTransportFactory:
    """Transport factory that remembers every transport it created."""

    def __init__(self):
        self.created = []
        self.unreachable = set()
        self.options = {}

    def __call__(self, identifier: str):
        transport = FakeTransport(
            identifier,
            fail_open=identifier in self.unreachable,
            **self.options.get(identifier, {}),
        )
        self.created.append(transport)
        return [transport]

    def for_identifier(self, identifier: str):
        return [t for t in self.created if t.identifier == identifier]


class FakeBondedSource:
    """Stands in for the host's list of bonded devices."""

    def __init__(self, devices=None, error=None):
        self.devices = devices or []
        self.error = error
        self.calls = 0

    def bonded_devices(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.devices)
