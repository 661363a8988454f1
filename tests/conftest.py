"""Pytest configuration and fixtures."""

from collections.abc import Generator

import pytest

from zyprint.printer import ConnectionRegistry, PrinterService
from zyprint.printer.discovery import BondedDevice

from tests.fakes import FakeBondedSource, FakeTransportFactory


@pytest.fixture
def factory() -> FakeTransportFactory:
    """Fake transport factory."""
    return FakeTransportFactory()


@pytest.fixture
def registry(factory) -> Generator[ConnectionRegistry, None, None]:
    """Registry using fake transports."""
    registry = ConnectionRegistry(factory)
    yield registry
    registry.close_all()


@pytest.fixture
def bonded_source() -> FakeBondedSource:
    """Bonded devices: two printers and a speaker."""
    return FakeBondedSource([
        BondedDevice("00:11:22:33:44:55", "ZyPrint-58", True),
        BondedDevice("00:11:22:33:44:66", "Generic Speaker", True),
        BondedDevice("00:11:22:33:44:77", "Kitchen Printer", False),
    ])


@pytest.fixture
def service(registry, bonded_source) -> Generator[PrinterService, None, None]:
    """Printer service with fake transports and discovery."""
    service = PrinterService(registry=registry, discovery_source=bonded_source, max_workers=4)
    yield service
    service.shutdown()


@pytest.fixture
def app(service):
    """Flask application bound to the fake printer service."""
    from zyprint import create_app, db

    app = create_app("testing", service=service)
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
