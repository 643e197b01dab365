"""
Remote Sync Adapter — Push/pull the document to a spreadsheet-backed endpoint.

The endpoint is a Google Apps Script web app that stores the whole
document in one sheet cell.

## Wire Format

- POST: body is the serialized document, sent as ``text/plain`` so the
  script receives it without a preflight. The script answers with a
  redirect that is followed.
- GET: returns the last stored document as JSON.

There is no authentication beyond the secrecy of the URL. A sheet cell
holds at most 50,000 characters; larger payloads are dropped by the
script.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Literal, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

USER_AGENT = "schoolportal/1.0"


class RemoteSyncError(Exception):
    """Raised when the remote endpoint cannot supply a document."""

    def __init__(self, code: str, message: str, retryable: bool = False):
        self.code = code
        self.message = message
        self.retryable = retryable
        super().__init__(f"{code}: {message}")


class PushReceipt(BaseModel):
    """Result of a single POST to the remote endpoint."""

    status: Literal["ok", "failed"]
    status_code: Optional[int] = None
    payload_chars: int = 0
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    retryable: bool = False

    @classmethod
    def ok(cls, status_code: int, payload_chars: int) -> "PushReceipt":
        return cls(status="ok", status_code=status_code, payload_chars=payload_chars)

    @classmethod
    def failed(
        cls,
        error_code: str,
        error_message: str,
        payload_chars: int,
        retryable: bool,
        status_code: Optional[int] = None,
    ) -> "PushReceipt":
        return cls(
            status="failed",
            status_code=status_code,
            payload_chars=payload_chars,
            error_code=error_code,
            error_message=error_message,
            retryable=retryable,
        )

    @property
    def succeeded(self) -> bool:
        return self.status == "ok"


class RemoteSyncAdapter:
    """HTTP client for the remote document endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )

    def fetch(self) -> Dict[str, Any]:
        """
        GET the stored document.

        Returns:
            The decoded JSON object.

        Raises:
            RemoteSyncError: on network errors, non-2xx responses, or a
                body that is not a JSON object.
        """
        try:
            with self._client() as client:
                response = client.get(self.url)
        except httpx.TimeoutException:
            raise RemoteSyncError("timeout", f"GET timed out after {self.timeout}s", retryable=True)
        except httpx.RequestError as e:
            raise RemoteSyncError("request_error", str(e), retryable=True)

        if response.status_code >= 400:
            raise RemoteSyncError(
                f"api_{response.status_code}",
                response.text[:200],
                retryable=response.status_code >= 500,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RemoteSyncError("malformed_json", str(e))

        if not isinstance(data, dict):
            raise RemoteSyncError("malformed_json", f"expected object, got {type(data).__name__}")

        logger.debug(f"Fetched remote document ({len(response.content)} bytes)")
        return data

    def push(self, body: str) -> PushReceipt:
        """POST the serialized document. Never raises."""
        payload_chars = len(body)
        try:
            with self._client() as client:
                response = client.post(
                    self.url,
                    content=body.encode("utf-8"),
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                )
        except httpx.TimeoutException:
            logger.error("Remote push timed out")
            return PushReceipt.failed(
                "timeout",
                f"Request timed out after {self.timeout}s",
                payload_chars,
                retryable=True,
            )
        except httpx.RequestError as e:
            logger.error(f"Remote push failed: {e}")
            return PushReceipt.failed("request_error", str(e), payload_chars, retryable=True)

        if response.status_code < 400:
            logger.info(
                f"Remote push accepted ({payload_chars} chars, HTTP {response.status_code})",
                extra={"payload_chars": payload_chars},
            )
            return PushReceipt.ok(response.status_code, payload_chars)

        logger.error(f"Remote push rejected: HTTP {response.status_code}")
        return PushReceipt.failed(
            f"api_{response.status_code}",
            response.text[:200],
            payload_chars,
            retryable=response.status_code >= 500,
            status_code=response.status_code,
        )
