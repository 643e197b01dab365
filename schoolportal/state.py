"""
Document Store — The single live document and its admin draft.

One store is created per application and injected where it is needed
(the Flask app keeps it in ``app.extensions``). All writes go through
`commit`, which replaces the document wholesale and persists it through
the coordinator.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from .editing import records
from .editing.draft import Draft, DraftOp
from .models.document import SCHEMA_MARKER, SchoolDocument
from .persistence.coordinator import LoadResult, PersistenceCoordinator, SaveResult

logger = logging.getLogger(__name__)

Listener = Callable[[SchoolDocument], None]


class DocumentStore:
    """Owns the live document; one writer at a time."""

    def __init__(self, coordinator: PersistenceCoordinator):
        self.coordinator = coordinator
        self._lock = threading.RLock()
        self._document: Optional[SchoolDocument] = None
        self._listeners: List[Listener] = []
        self.draft: Optional[Draft] = None
        self.loaded_from: Optional[str] = None

    def bootstrap(self) -> LoadResult:
        """Load the document at startup and refresh the local cache."""
        result = self.coordinator.load()
        with self._lock:
            self._document = result.document
            self.loaded_from = result.source
            self.draft = Draft(result.document)
        if result.source == "remote":
            self.coordinator.save_local(result.document)
        logger.info(
            f"Document ready from {result.source} (rev {result.document.revision})",
            extra={"source": result.source},
        )
        return result

    @property
    def document(self) -> SchoolDocument:
        with self._lock:
            if self._document is None:
                raise RuntimeError("DocumentStore used before bootstrap()")
            return self._document

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def commit(
        self,
        document: SchoolDocument,
        wait_remote: bool = True,
        carry_draft: Optional[DraftOp] = None,
    ) -> SaveResult:
        """
        Replace the live document and persist it.

        The schema marker is stamped and the revision bumped so remote
        copies can be told apart from placeholders. The lock is held
        until the local write is done and the push is queued, so the
        file on disk always matches the newest revision in memory.

        Args:
            carry_draft: When set, staged draft edits are kept and this
                change is applied to them too. Otherwise the draft is
                reset to the committed document.
        """
        with self._lock:
            current = self.document
            stamped = document.model_copy(
                update={
                    "portal_schema": SCHEMA_MARKER,
                    "revision": max(current.revision, document.revision) + 1,
                }
            )
            self._document = stamped
            if self.draft is not None:
                if carry_draft is None:
                    self.draft.rebase(stamped)
                else:
                    self.draft.follow(stamped, carry_draft)
            result = self.coordinator.save(stamped, wait_remote=wait_remote)

        logger.info(
            f"Committed rev {stamped.revision} (local={result.local_saved}, sync={result.status.value})",
            extra={"sync_status": result.status.value},
        )
        for listener in self._listeners:
            try:
                listener(stamped)
            except Exception:
                logger.exception("Document listener failed")
        return result

    def commit_draft(self, wait_remote: bool = True) -> SaveResult:
        """Commit the admin draft's working copy."""
        if self.draft is None:
            raise RuntimeError("DocumentStore used before bootstrap()")
        return self.commit(self.draft.document, wait_remote=wait_remote)

    def discard_draft(self) -> None:
        if self.draft is not None:
            self.draft.rebase(self.document)

    def toggle_theme(self, wait_remote: bool = True) -> SaveResult:
        """Flip dark mode and persist. Staged draft edits survive."""
        with self._lock:
            document = self.document
            dark = not document.theme_config.is_dark_mode
            theme = document.theme_config.model_copy(update={"is_dark_mode": dark})
            return self.commit(
                document.model_copy(update={"theme_config": theme}),
                wait_remote,
                carry_draft=lambda doc: records.update_block(doc, "themeConfig", {"isDarkMode": dark}),
            )
