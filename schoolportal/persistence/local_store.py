"""
Local Store — JSON key-value file holding the content document.

The file holds one object store with one fixed key:

    {"version": 1, "stores": {"data": {"current": { ...document... }}}}

Every operation reports failure by return value; nothing here raises to
the caller.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

STORE_NAME = "data"
DOCUMENT_KEY = "current"
FILE_VERSION = 1


class LocalStore:
    """Single-file key-value store with atomic writes."""

    def __init__(
        self,
        path: Path,
        store: str = STORE_NAME,
        key: str = DOCUMENT_KEY,
    ):
        self.path = Path(path)
        self.store = store
        self.key = key

    def _read_file(self) -> Dict[str, Any]:
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def get(self) -> Optional[Dict[str, Any]]:
        """
        Read the stored document.

        Returns:
            The stored JSON object, or None if nothing is stored or the
            file cannot be read.
        """
        if not self.path.exists():
            logger.debug(f"Local store {self.path} does not exist yet")
            return None

        try:
            data = self._read_file()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read local store {self.path}: {e}")
            return None

        value = data.get("stores", {}).get(self.store, {}).get(self.key)
        if value is None:
            return None
        if not isinstance(value, dict):
            logger.error(f"Local store key '{self.key}' holds {type(value).__name__}, ignoring")
            return None
        return value

    def put(self, value: Dict[str, Any]) -> bool:
        """
        Store the document under the fixed key.

        Uses atomic write (write to temp, then rename) so a crash never
        leaves a half-written file.

        Returns:
            True once the write is complete, False on any failure.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            data: Dict[str, Any] = {"version": FILE_VERSION, "stores": {}}
            if self.path.exists():
                try:
                    data = self._read_file()
                except (OSError, ValueError) as e:
                    logger.warning(f"Overwriting unreadable local store {self.path}: {e}")
            data.setdefault("stores", {}).setdefault(self.store, {})[self.key] = value

            temp_path = self.path.with_suffix(".tmp")
            with temp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write local store {self.path}: {e}")
            return False

        logger.debug(f"Local store written: {self.path.name}[{self.store}/{self.key}]")
        return True

    def clear(self) -> bool:
        """Remove the stored document, keeping the file."""
        if not self.path.exists():
            return True
        try:
            data = self._read_file()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read local store {self.path}: {e}")
            return False
        data.get("stores", {}).get(self.store, {}).pop(self.key, None)
        try:
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write local store {self.path}: {e}")
            return False
        return True
