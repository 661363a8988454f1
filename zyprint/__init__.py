"""Flask application factory."""
import atexit
import logging
import os
from functools import partial

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def setup_logging(level: str) -> None:
    """Set up logging configuration."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def create_service(app_config):
    """Build the printer service from application settings."""
    from zyprint.printer import ConnectionRegistry, PrinterService, transport_candidates

    factory = partial(transport_candidates, config={
        "port": app_config["PRINTER_PORT"],
        "timeout": app_config["PRINTER_CONNECT_TIMEOUT"],
        "write_timeout": app_config["PRINTER_WRITE_TIMEOUT"],
        "service_uuid": app_config["PRINTER_SERVICE_UUID"],
    })
    return PrinterService(
        registry=ConnectionRegistry(factory),
        name_keywords=app_config["PRINTER_NAME_KEYWORDS"],
        network_port=app_config["PRINTER_PORT"],
        probe_timeout=app_config["NETWORK_PROBE_TIMEOUT"],
        width=app_config["DEFAULT_PRINTER_WIDTH"],
        max_workers=app_config["PRINTER_WORKERS"],
    )


def get_service():
    """Return the printer service of the current application."""
    return current_app.extensions["zyprint"]


def create_app(config_name: str = "default", service=None):
    """Create and configure the Flask application.

    Args:
        config_name: Key into ``zyprint.config.config``.
        service: Printer service to use instead of one built from config.
    """
    app = Flask(__name__)

    # Load configuration
    from zyprint.config import config
    app.config.from_object(config[config_name])
    setup_logging(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)

    if service is None:
        service = create_service(app.config)
        atexit.register(service.shutdown)
    app.extensions["zyprint"] = service

    # Register blueprints
    from zyprint.routes.api import api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    # Create tables
    os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        db.create_all()

    return app
