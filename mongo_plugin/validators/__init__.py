"""
Custom validators and types for MongoDB plugin settings.

This module provides Pydantic types used when loading connection
settings from environment variables or parsed configuration files.
"""

from mongo_plugin.validators.custom_types import Duration, parse_duration, to_milliseconds

__all__ = ["Duration", "parse_duration", "to_milliseconds"]
