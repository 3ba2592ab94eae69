"""
Command Line Interface for the MongoDB plugin.

Provides commands for checking connectivity and managing collections,
indexes and statistics through a rich terminal interface.
"""

from mongo_plugin.cli.commands import cli

__all__ = ["cli"]
