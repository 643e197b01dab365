"""
Pending Push Queue — Remembers remote pushes that failed every attempt.

When the coordinator gives up on a push, the failure is recorded here
with exponential backoff. A later `schoolportal sync --retry` (or the
admin API) re-pushes the current local document once the item is due.
The queue persists to disk and survives restarts.

## Usage

    from schoolportal.reliability.retry_queue import PendingPushQueue

    queue = PendingPushQueue(path)
    queue.record_failure("current", revision=7, error_code="timeout", error_message="...")

    for item in queue.get_pending():
        # Re-push...
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Backoff: 1min, 5min, 15min, 30min, 60min
BACKOFF_MINUTES = [1, 5, 15, 30, 60]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class PendingPush:
    """A document push waiting to be retried."""

    key: str
    revision: int = 0

    attempt_count: int = 0
    max_attempts: int = 5

    first_failed_at: str = ""
    last_failed_at: str = ""
    next_retry_at: str = ""

    last_error_code: str = ""
    last_error_message: str = ""

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """Check if this push should be retried now."""
        if self.attempt_count >= self.max_attempts:
            return False
        if not self.next_retry_at:
            return True
        now = now or datetime.now(timezone.utc)
        return now >= date_parser.isoparse(self.next_retry_at)

    def calculate_next_retry(self, now: Optional[datetime] = None) -> str:
        """Calculate next retry time with exponential backoff."""
        index = min(max(self.attempt_count - 1, 0), len(BACKOFF_MINUTES) - 1)
        delay = BACKOFF_MINUTES[index]
        now = now or datetime.now(timezone.utc)
        return (now + timedelta(minutes=delay)).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingPush":
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})


class PendingPushQueue:
    """
    Persistent record of failed remote pushes.

    Implements exponential backoff and a max attempt limit.
    Queue state persists to a JSON file.
    """

    DEFAULT_MAX_ATTEMPTS = 5

    def __init__(self, queue_path: Path):
        self.queue_path = Path(queue_path)
        self._items: Dict[str, PendingPush] = {}
        self._load()

    def _load(self) -> None:
        """Load queue from disk."""
        if not self.queue_path.exists():
            self._items = {}
            return

        try:
            with open(self.queue_path, encoding="utf-8") as f:
                data = json.load(f)
            self._items = {
                k: PendingPush.from_dict(v)
                for k, v in data.get("items", {}).items()
            }
            logger.debug(f"Loaded {len(self._items)} pending pushes")
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load pending push queue: {e}")
            self._items = {}

    def _save(self) -> None:
        """Save queue to disk."""
        try:
            self.queue_path.parent.mkdir(parents=True, exist_ok=True)
            data = {
                "version": 1,
                "updated_at": _now_iso(),
                "items": {k: v.to_dict() for k, v in self._items.items()},
            }
            with open(self.queue_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save pending push queue: {e}")

    def record_failure(
        self,
        key: str,
        revision: int,
        error_code: str,
        error_message: str,
        max_attempts: Optional[int] = None,
    ) -> bool:
        """
        Record a failed push for `key`.

        Returns True if the push stays queued, False if it exceeded its
        attempt limit and was dropped.
        """
        now = _now_iso()

        item = self._items.get(key)
        if item is None:
            item = PendingPush(
                key=key,
                max_attempts=max_attempts or self.DEFAULT_MAX_ATTEMPTS,
                first_failed_at=now,
            )
            self._items[key] = item

        item.revision = revision
        item.attempt_count += 1
        item.last_failed_at = now
        item.last_error_code = error_code
        item.last_error_message = error_message

        if item.attempt_count >= item.max_attempts:
            logger.warning(
                f"Push of '{key}' exceeded max retries ({item.max_attempts}), dropping; "
                f"the next save will push again"
            )
            del self._items[key]
            self._save()
            return False

        item.next_retry_at = item.calculate_next_retry()
        logger.info(
            f"Queued push of '{key}' rev {revision} for retry "
            f"(attempt {item.attempt_count}/{item.max_attempts}, next at {item.next_retry_at})"
        )
        self._save()
        return True

    def get(self, key: str) -> Optional[PendingPush]:
        return self._items.get(key)

    def get_pending(self) -> List[PendingPush]:
        """Get all pushes ready for retry."""
        pending = [item for item in self._items.values() if item.is_due()]
        return sorted(pending, key=lambda x: x.next_retry_at)

    def mark_success(self, key: str) -> None:
        """Drop the pending push after a successful push."""
        if key in self._items:
            del self._items[key]
            self._save()
            logger.info(f"Removed '{key}' from pending pushes (success)")

    def clear(self) -> int:
        """Clear all items from queue. Returns count cleared."""
        count = len(self._items)
        self._items = {}
        self._save()
        return count

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_items": len(self._items),
            "pending_now": len(self.get_pending()),
            "items": [item.to_dict() for item in self._items.values()],
        }

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items
