"""
Admin Draft — Staged edits on a working copy of the document.

The dashboard never edits the live document directly. It edits a draft
and commits it through the document store. Every mutating call is a
no-op while edit mode is off; this is a UI guard, not a security
boundary.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional

from ..models.document import Record, SchoolDocument
from . import records

logger = logging.getLogger(__name__)

DraftOp = Callable[[SchoolDocument], SchoolDocument]


class Draft:
    """Working copy of the document plus the edit-mode switch."""

    def __init__(self, document: SchoolDocument):
        self._lock = threading.RLock()
        self._base = document
        self._document = document
        self.edit_mode = False

    @property
    def document(self) -> SchoolDocument:
        with self._lock:
            return self._document

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._document is not self._base

    def set_edit_mode(self, enabled: bool) -> None:
        self.edit_mode = bool(enabled)
        logger.info(f"Edit mode {'enabled' if self.edit_mode else 'disabled'}")

    def rebase(self, document: SchoolDocument) -> None:
        """Discard staged edits and start again from `document`."""
        with self._lock:
            self._base = document
            self._document = document

    def follow(self, document: SchoolDocument, op: DraftOp) -> None:
        """
        Move the base to `document`, keeping staged edits.

        A clean draft is simply rebased. A dirty one gets `op` applied to
        its working copy so a change committed outside the dashboard
        shows up in the draft as well. Edit mode does not gate this.
        """
        with self._lock:
            if self._document is self._base:
                self._base = self._document = document
                return
            self._base = document
            self._document = op(self._document)

    def _apply(self, op: DraftOp) -> bool:
        """Run `op` on the working copy; True if the document changed."""
        if not self.edit_mode:
            logger.debug("Edit mode is off, ignoring change")
            return False
        with self._lock:
            updated = op(self._document)
            changed = updated is not self._document
            self._document = updated
            return changed

    # ── Records ──────────────────────────────────────────────────

    def add(self, collection: str, patch: Mapping[str, Any], prepend: bool = True) -> Optional[Record]:
        """Add a record; returns it, or None when edit mode is off."""
        coll = records.get_collection(collection)
        added: list = []

        def op(doc: SchoolDocument) -> SchoolDocument:
            doc, record = coll.add(doc, patch, prepend=prepend)
            added.append(record)
            return doc

        self._apply(op)
        return added[0] if added else None

    def append(self, collection: str, record: Record) -> bool:
        coll = records.get_collection(collection)
        return self._apply(lambda doc: coll.append(doc, record))

    def update(self, collection: str, record_id: str, patch: Mapping[str, Any]) -> bool:
        coll = records.get_collection(collection)
        return self._apply(lambda doc: coll.update(doc, record_id, patch))

    def delete(self, collection: str, record_id: str) -> bool:
        coll = records.get_collection(collection)
        return self._apply(lambda doc: coll.delete(doc, record_id))

    # ── Fields, blocks, singletons ───────────────────────────────

    def set_fields(self, patch: Mapping[str, Any]) -> bool:
        return self._apply(lambda doc: records.update_fields(doc, patch))

    def update_block(self, block: str, patch: Mapping[str, Any]) -> bool:
        return self._apply(lambda doc: records.update_block(doc, block, patch))

    def set_singleton(self, name: str, patch: Mapping[str, Any]) -> bool:
        return self._apply(lambda doc: records.set_singleton(doc, name, patch))

    def clear_singleton(self, name: str) -> bool:
        return self._apply(lambda doc: records.clear_singleton(doc, name))

    def update_section_text(self, section_id: str, body: str) -> bool:
        return self._apply(lambda doc: records.update_section_text(doc, section_id, body))

    def new_reset_code(self) -> Optional[str]:
        """Generate and stage a new admin reset code."""
        code = records.generate_reset_code()
        if self._apply(lambda doc: records.update_fields(doc, {"admin_reset_code": code})):
            return code
        return None
