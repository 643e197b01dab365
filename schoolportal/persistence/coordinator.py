"""
Persistence Coordinator — Reconcile the remote copy with the local cache.

## Load

    remote (if online) → local store → compiled-in defaults

A remote payload is only accepted when it carries the schema marker and
validates as a document; anything else (network error, HTTP error,
malformed JSON, placeholder payload) falls through to the local store.

## Save

    local store (always, confirmed) → remote push (if online, retried)

The remote outcome is reported as a `SyncStatus` so callers can show
durability honestly. Pushes that fail every attempt are recorded in the
pending push queue for a later retry.

## Usage

    coordinator = PersistenceCoordinator.from_config(config)
    result = coordinator.load()
    saved = coordinator.save(result.document)
    if saved.status is SyncStatus.FAILED:
        ...
"""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Literal, Optional

from pydantic import ValidationError

from ..config.loader import DEFAULT_PAYLOAD_CEILING, PortalConfig
from ..content.defaults import default_document
from ..models.document import SchoolDocument
from ..reliability.retry_queue import PendingPushQueue
from .local_store import LocalStore
from .remote import PushReceipt, RemoteSyncAdapter, RemoteSyncError

logger = logging.getLogger(__name__)

# Warn once the serialized document reaches this share of the ceiling.
CEILING_WARN_RATIO = 0.9


class SyncStatus(str, Enum):
    """Durability of the last save."""

    SYNCED = "synced"          # Local and remote both written
    LOCAL_ONLY = "local_only"  # Offline or no remote configured
    FAILED = "failed"          # Remote push failed every attempt
    PENDING = "pending"        # Remote push still running in background


LoadSource = Literal["remote", "local", "default"]


@dataclass
class LoadResult:
    document: SchoolDocument
    source: LoadSource


@dataclass
class SaveResult:
    local_saved: bool
    status: SyncStatus
    payload_chars: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_saved": self.local_saved,
            "status": self.status.value,
            "payload_chars": self.payload_chars,
            "error": self.error,
        }


def serialize_document(document: SchoolDocument) -> str:
    """Compact JSON text sent to the remote endpoint."""
    return json.dumps(document.to_wire(), ensure_ascii=False, separators=(",", ":"))


class PersistenceCoordinator:
    """
    Orchestrates load and save across the local store and remote endpoint.

    No locking or conflict detection: the last push to land wins.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: Optional[RemoteSyncAdapter] = None,
        pending: Optional[PendingPushQueue] = None,
        connectivity: Optional[Callable[[], bool]] = None,
        attempts: int = 3,
        backoff_seconds: float = 0.5,
        payload_ceiling: int = DEFAULT_PAYLOAD_CEILING,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.local = local
        self.remote = remote
        self.pending = pending
        self.connectivity = connectivity or (lambda: True)
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds
        self.payload_ceiling = payload_ceiling
        self._sleep = sleep

        self._status_lock = threading.Lock()
        self._last_status: Optional[SaveResult] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_config(cls, config: PortalConfig) -> "PersistenceCoordinator":
        remote = None
        if config.has_remote():
            remote = RemoteSyncAdapter(config.remote_url, timeout=config.remote_timeout)
        return cls(
            local=LocalStore(config.local_store_path),
            remote=remote,
            pending=PendingPushQueue(config.pending_push_path),
            connectivity=lambda: not config.offline,
            attempts=config.remote_attempts,
            backoff_seconds=config.remote_backoff_seconds,
            payload_ceiling=config.payload_ceiling,
        )

    # ── Status ───────────────────────────────────────────────────

    def is_online(self) -> bool:
        """True when a remote is configured and connectivity is reported."""
        return self.remote is not None and bool(self.connectivity())

    @property
    def last_status(self) -> Optional[SaveResult]:
        with self._status_lock:
            return self._last_status

    def _set_status(self, result: SaveResult) -> None:
        with self._status_lock:
            self._last_status = result

    def status_dict(self) -> Dict[str, Any]:
        last = self.last_status
        return {
            "online": self.is_online(),
            "remote_configured": self.remote is not None,
            "last_save": last.to_dict() if last else None,
            "pending": self.pending.get_stats() if self.pending else None,
        }

    # ── Load ─────────────────────────────────────────────────────

    def load(self) -> LoadResult:
        """Load the document: remote first, then local, then defaults."""
        if self.is_online():
            document = self._load_remote()
            if document is not None:
                logger.info("Portal data synchronized from remote", extra={"source": "remote"})
                return LoadResult(document, "remote")

        document = self.load_local()
        if document is not None:
            logger.info("Loaded data from local store", extra={"source": "local"})
            return LoadResult(document, "local")

        logger.info("No stored document, using defaults", extra={"source": "default"})
        return LoadResult(default_document(), "default")

    def _load_remote(self) -> Optional[SchoolDocument]:
        try:
            data = self.remote.fetch()
        except RemoteSyncError as e:
            logger.warning(f"Remote unavailable ({e.code}), using local store")
            return None
        return self.accept_remote(data)

    @staticmethod
    def accept_remote(data: Dict[str, Any]) -> Optional[SchoolDocument]:
        """
        Validate a remote payload.

        An empty or placeholder payload (no schema marker) is rejected, as
        is anything that does not validate as a document.
        """
        try:
            document = SchoolDocument.from_wire(data)
        except ValidationError as e:
            logger.warning(f"Remote payload is not a valid document: {e.error_count()} errors")
            return None
        if not document.has_marker():
            logger.warning("Remote payload has no schema marker, treating as placeholder")
            return None
        return document

    def pull(self) -> Optional[SchoolDocument]:
        """Fetch the remote copy and overwrite the local store with it."""
        if not self.is_online():
            return None
        document = self._load_remote()
        if document is not None:
            self.save_local(document)
        return document

    def load_local(self) -> Optional[SchoolDocument]:
        data = self.local.get()
        if data is None:
            return None
        try:
            return SchoolDocument.from_wire(data)
        except ValidationError as e:
            logger.error(f"Local store holds an invalid document: {e.error_count()} errors")
            return None

    # ── Save ─────────────────────────────────────────────────────

    def check_payload_size(self, chars: int) -> None:
        """Warn when the serialized document nears or exceeds the ceiling."""
        if chars > self.payload_ceiling:
            logger.warning(
                f"Data size ({chars}) exceeds the {self.payload_ceiling} char remote limit. "
                f"Cloud sync will likely fail; use external links instead of uploaded files.",
                extra={"payload_chars": chars},
            )
        elif chars >= self.payload_ceiling * CEILING_WARN_RATIO:
            logger.warning(
                f"Data size ({chars}) is close to the {self.payload_ceiling} char remote limit",
                extra={"payload_chars": chars},
            )

    def save_local(self, document: SchoolDocument) -> bool:
        """Write to the local store only."""
        return self.local.put(document.to_wire())

    def save(self, document: SchoolDocument, wait_remote: bool = True) -> SaveResult:
        """
        Save locally, then push to the remote endpoint if online.

        Args:
            document: Document to persist
            wait_remote: When False the push runs on a background worker
                and the returned status is PENDING; `last_status` is
                updated once it finishes.
        """
        local_saved = self.save_local(document)
        if not local_saved:
            logger.error("Local save failed; edits are not durable")

        if not self.is_online():
            result = SaveResult(local_saved, SyncStatus.LOCAL_ONLY)
            self._set_status(result)
            return result

        body = serialize_document(document)
        self.check_payload_size(len(body))

        if wait_remote:
            result = self._push_with_retry(body, document.revision, local_saved)
            self._set_status(result)
            return result

        result = SaveResult(local_saved, SyncStatus.PENDING, payload_chars=len(body))
        self._set_status(result)
        self._submit(body, document.revision, local_saved)
        return result

    def _submit(self, body: str, revision: int, local_saved: bool) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="remote-push")

        def run() -> SaveResult:
            result = self._push_with_retry(body, revision, local_saved)
            self._set_status(result)
            return result

        return self._executor.submit(run)

    def _push_with_retry(self, body: str, revision: int, local_saved: bool) -> SaveResult:
        """Push with bounded exponential backoff."""
        receipt: Optional[PushReceipt] = None
        for attempt in range(self.attempts):
            receipt = self.remote.push(body)
            if receipt.succeeded:
                if self.pending is not None:
                    self.pending.mark_success(self.local.key)
                logger.info(
                    f"Remote sync complete (rev {revision})",
                    extra={"sync_status": SyncStatus.SYNCED.value},
                )
                return SaveResult(local_saved, SyncStatus.SYNCED, payload_chars=len(body))

            if not receipt.retryable or attempt == self.attempts - 1:
                break

            delay = self.backoff_seconds * (2 ** attempt)
            logger.info(
                f"Remote push attempt {attempt + 1}/{self.attempts} failed "
                f"({receipt.error_code}), retrying in {delay:.1f}s"
            )
            self._sleep(delay)

        error = f"{receipt.error_code}: {receipt.error_message}" if receipt else "no attempt made"
        logger.error(
            f"Remote sync failed: {error}",
            extra={"sync_status": SyncStatus.FAILED.value},
        )
        if self.pending is not None and receipt is not None:
            self.pending.record_failure(
                self.local.key,
                revision=revision,
                error_code=receipt.error_code or "unknown",
                error_message=receipt.error_message or "",
            )
        return SaveResult(local_saved, SyncStatus.FAILED, payload_chars=len(body), error=error)

    def retry_pending(self, force: bool = False) -> Optional[SaveResult]:
        """
        Re-push the local document if a failed push is due.

        Returns:
            The push result, or None when nothing was due or possible.
        """
        if self.pending is None or self.local.key not in self.pending:
            return None
        item = self.pending.get(self.local.key)
        if not force and not item.is_due():
            logger.debug(f"Pending push not due until {item.next_retry_at}")
            return None
        if not self.is_online():
            logger.info("Offline, pending push left queued")
            return None

        document = self.load_local()
        if document is None:
            logger.warning("Pending push has no local document to send")
            return None

        body = serialize_document(document)
        self.check_payload_size(len(body))
        result = self._push_with_retry(body, document.revision, local_saved=True)
        self._set_status(result)
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background push worker."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
