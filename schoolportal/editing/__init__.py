"""
Editing — Typed record operations and the admin draft.
"""

from .draft import Draft
from .records import COLLECTIONS, RecordCollection, UnknownCollectionError, get_collection

__all__ = [
    "Draft",
    "COLLECTIONS",
    "RecordCollection",
    "UnknownCollectionError",
    "get_collection",
]
