"""Configuration module."""

from salepoint.config.logging import configure_logging, get_logger, sale_context
from salepoint.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
    "sale_context",
]
