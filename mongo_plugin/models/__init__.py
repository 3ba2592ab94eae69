"""Pydantic models for documents returned by the MongoDB server."""

from mongo_plugin.models.index import IndexInfo

__all__ = ["IndexInfo"]
