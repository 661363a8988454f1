"""Application configuration."""
import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _keywords(value: str) -> tuple:
    return tuple(k.strip() for k in value.split(",") if k.strip())


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Default printer settings
    DEFAULT_PRINTER_WIDTH = 48  # Characters per line (58mm paper)
    PRINTER_PORT = int(os.environ.get("PRINTER_PORT", 9100))
    PRINTER_CONNECT_TIMEOUT = float(os.environ.get("PRINTER_CONNECT_TIMEOUT", 5.0))
    PRINTER_WRITE_TIMEOUT = float(os.environ.get("PRINTER_WRITE_TIMEOUT", 5.0))
    PRINTER_SERVICE_UUID = os.environ.get(
        "PRINTER_SERVICE_UUID", "00001101-0000-1000-8000-00805F9B34FB"
    )
    PRINTER_NAME_KEYWORDS = _keywords(
        os.environ.get("PRINTER_NAME_KEYWORDS", "zywell,zyprint,printer")
    )
    PRINTER_WORKERS = int(os.environ.get("PRINTER_WORKERS", 8))
    NETWORK_PROBE_TIMEOUT = float(os.environ.get("NETWORK_PROBE_TIMEOUT", 0.5))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(basedir), 'instance', 'zyprint.db')}"
    )


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(basedir), 'instance', 'zyprint.db')}"
    )


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PRINTER_CONNECT_TIMEOUT = 0.5
    PRINTER_WRITE_TIMEOUT = 0.5


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
