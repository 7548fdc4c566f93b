"""Utilities package for the cost-chain application."""

from .config import Config, get_config, reset_config, get_database_url
from .datetime_utils import utc_now

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "get_database_url",
    "utc_now",
]
