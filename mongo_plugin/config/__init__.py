"""Configuration module for the MongoDB plugin."""

from mongo_plugin.config.logging import configure_logging
from mongo_plugin.config.settings import (
    DEFAULT_URI,
    MongoConfig,
    MongoSettings,
    Settings,
    default_config,
    get_settings,
)

__all__ = [
    "DEFAULT_URI",
    "MongoConfig",
    "MongoSettings",
    "Settings",
    "configure_logging",
    "default_config",
    "get_settings",
]
