"""
Models — Pydantic schemas for the content document.
"""

from .document import SCHEMA_MARKER, Record, SchoolDocument

__all__ = ["SCHEMA_MARKER", "Record", "SchoolDocument"]
