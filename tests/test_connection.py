"""Tests for printer transports."""

import logging
import socket
import types

import pytest

from zyprint.errors import ConnectError, WriteFailed
from zyprint.printer import connection
from zyprint.printer.connection import (
    BluetoothTransport,
    NetworkTransport,
    is_hardware_address,
    is_ipv4,
    transport_candidates,
)

from tests.fakes import FakeTransport


class TestIdentifierShapes:
    """Tests for identifier classification."""

    @pytest.mark.parametrize("identifier", ["192.168.1.100", "10.0.0.1", "255.255.255.255"])
    def test_ipv4(self, identifier):
        assert is_ipv4(identifier)

    @pytest.mark.parametrize("identifier", ["192.168.1", "300.1.1.1", "printer.local", "00:11:22:33:44:55", ""])
    def test_not_ipv4(self, identifier):
        assert not is_ipv4(identifier)

    def test_hardware_address(self):
        assert is_hardware_address("00:11:22:AA:bb:CC")
        assert not is_hardware_address("00:11:22:33:44")
        assert not is_hardware_address("192.168.1.100")


class TestTransportCandidates:
    """Tests for transport selection."""

    def test_ip_selects_network_transport(self):
        (transport,) = transport_candidates("192.168.1.100", {"port": 9101, "timeout": 2.0})
        assert isinstance(transport, NetworkTransport)
        assert transport.host == "192.168.1.100"
        assert transport.port == 9101
        assert transport.timeout == 2.0

    def test_ip_defaults_to_raw_print_port(self):
        (transport,) = transport_candidates("10.0.0.7")
        assert transport.port == 9100

    def test_hardware_address_selects_bluetooth(self):
        (transport,) = transport_candidates("00:11:22:33:44:55")
        assert isinstance(transport, BluetoothTransport)
        assert transport.service_uuid == "00001101-0000-1000-8000-00805F9B34FB"

    def test_unrecognized_identifier_selects_bluetooth(self):
        (transport,) = transport_candidates("my-printer", {"service_uuid": "custom"})
        assert isinstance(transport, BluetoothTransport)
        assert transport.service_uuid == "custom"

    def test_unrecognized_identifier_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="zyprint.printer.connection"):
            transport_candidates("my-printer")
        assert "neither an IPv4 nor a Bluetooth address" in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING, logger="zyprint.printer.connection"):
            transport_candidates("00:11:22:33:44:55")
        assert caplog.text == ""

    def test_write_timeout_from_config(self):
        (network,) = transport_candidates("10.0.0.7", {"timeout": 2.0, "write_timeout": 7.5})
        (bluetooth,) = transport_candidates("00:11:22:33:44:55", {"write_timeout": 7.5})
        assert network.timeout == 2.0
        assert network.write_timeout == 7.5
        assert bluetooth.write_timeout == 7.5

    def test_write_timeout_defaults_to_connect_timeout(self):
        (transport,) = transport_candidates("10.0.0.7", {"timeout": 2.0})
        assert transport.write_timeout == 2.0


class TestTransportLifecycle:
    """Tests for the shared open/write/close behaviour."""

    def test_write_after_open(self):
        transport = FakeTransport("a")
        transport.open()
        transport.write_and_flush(b"abc")
        assert transport.is_open
        assert bytes(transport.sock.sent) == b"abc"

    def test_open_applies_write_timeout(self):
        transport = FakeTransport("a")
        transport.write_timeout = 3.0
        transport.open()
        assert transport.sock.timeout == 3.0

    def test_open_twice_connects_once(self):
        transport = FakeTransport("a")
        transport.open()
        transport.open()
        assert transport.open_calls == 1

    def test_write_before_open_fails(self):
        with pytest.raises(WriteFailed):
            FakeTransport("a").write_and_flush(b"x")

    def test_write_error_is_write_failed(self):
        transport = FakeTransport("a", fail_send=True)
        transport.open()
        with pytest.raises(WriteFailed):
            transport.write_and_flush(b"x")
        assert transport.is_open

    def test_closed_transport_is_never_reopened(self):
        transport = FakeTransport("a")
        transport.open()
        transport.close()

        assert not transport.is_open
        assert transport.sock.closed
        with pytest.raises(ConnectError):
            transport.open()
        assert transport.open_calls == 1

    def test_close_twice(self):
        transport = FakeTransport("a")
        transport.open()
        transport.close()
        transport.close()
        assert not transport.is_open

    def test_close_error_still_marks_closed(self):
        transport = FakeTransport("a", fail_close=True)
        transport.open()
        with pytest.raises(OSError):
            transport.close()
        assert not transport.is_open


@pytest.fixture
def listener():
    """Local TCP server standing in for a network printer."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    server.settimeout(2.0)
    yield server
    server.close()


class TestNetworkTransport:
    """Tests against a real local socket."""

    def test_sends_bytes(self, listener):
        port = listener.getsockname()[1]
        transport = NetworkTransport("127.0.0.1", port, timeout=2.0)
        transport.open()
        peer, _ = listener.accept()
        try:
            transport.write_and_flush(b"\x1b\x40Hi")
            transport.close()
            received = b""
            peer.settimeout(2.0)
            while True:
                chunk = peer.recv(1024)
                if not chunk:
                    break
                received += chunk
        finally:
            peer.close()
        assert received == b"\x1b\x40Hi"

    def test_socket_uses_write_timeout_after_open(self, listener):
        port = listener.getsockname()[1]
        transport = NetworkTransport("127.0.0.1", port, timeout=2.0, write_timeout=4.5)
        transport.open()
        peer, _ = listener.accept()
        try:
            assert transport._socket.gettimeout() == 4.5
        finally:
            transport.close()
            peer.close()

    def test_refused_connection(self):
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()

        transport = NetworkTransport("127.0.0.1", port, timeout=1.0)
        with pytest.raises(ConnectError):
            transport.open()
        assert not transport.is_open

    def test_repr(self):
        assert repr(NetworkTransport("10.0.0.1")) == "NetworkTransport(10.0.0.1:9100)"


class TestBluetoothTransport:
    """Tests for channel lookup and platform support."""

    def test_default_channel_without_sdp(self, monkeypatch):
        monkeypatch.setattr(connection, "BLUETOOTH_SDP_AVAILABLE", False)
        assert BluetoothTransport("00:11:22:33:44:55").resolve_channel() == 1

    def test_channel_from_service_record(self, monkeypatch):
        calls = []

        def find_service(uuid, address):
            calls.append((uuid, address))
            return [{"port": None}, {"port": 3}]

        fake = types.SimpleNamespace(BluetoothError=type("BluetoothError", (OSError,), {}),
                                     find_service=find_service)
        monkeypatch.setattr(connection, "BLUETOOTH_SDP_AVAILABLE", True)
        monkeypatch.setattr(connection, "bluetooth", fake, raising=False)

        transport = BluetoothTransport("00:11:22:33:44:55")
        assert transport.resolve_channel() == 3
        assert calls == [("00001101-0000-1000-8000-00805F9B34FB", "00:11:22:33:44:55")]

    def test_lookup_failure_uses_default_channel(self, monkeypatch):
        error = type("BluetoothError", (OSError,), {})

        def find_service(uuid, address):
            raise error("no route")

        fake = types.SimpleNamespace(BluetoothError=error, find_service=find_service)
        monkeypatch.setattr(connection, "BLUETOOTH_SDP_AVAILABLE", True)
        monkeypatch.setattr(connection, "bluetooth", fake, raising=False)

        assert BluetoothTransport("00:11:22:33:44:55").resolve_channel() == 1

    def test_unsupported_platform(self, monkeypatch):
        monkeypatch.delattr(socket, "AF_BLUETOOTH", raising=False)
        transport = BluetoothTransport("00:11:22:33:44:55")
        with pytest.raises(ConnectError):
            transport.open()
        assert not transport.is_open
