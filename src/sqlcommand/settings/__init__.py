"""Configuration for sqlcommand, built on pydantic-settings.

Configuration sources (precedence order):
    1. Environment variables (``SQLCOMMAND_DSN``, ``SQLCOMMAND_MASTER_DSN``, ...)
    2. A ``.env`` file in the working directory
    3. Default values in code

Quick Start:
    >>> from sqlcommand.settings import get_settings
    >>> settings = get_settings()
    >>> settings.dsn.get_secret_value()
"""

from .main import SUPPORTED_DIALECTS, DatabaseSettings, _reload_settings, get_settings

__all__ = [
    "DatabaseSettings",
    "SUPPORTED_DIALECTS",
    "get_settings",
]
