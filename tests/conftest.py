"""
Shared fixtures for portal tests.

Provides an offline config rooted in a temp directory, a bootstrapped
document store, a Flask test app built on both, and an in-memory
stand-in for the cloud endpoint.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from schoolportal.admin.server import create_app
from schoolportal.config.loader import PortalConfig
from schoolportal.content.defaults import default_document
from schoolportal.persistence.coordinator import PersistenceCoordinator
from schoolportal.persistence.local_store import LocalStore
from schoolportal.persistence.remote import PushReceipt, RemoteSyncError
from schoolportal.reliability.retry_queue import PendingPushQueue
from schoolportal.state import DocumentStore


class FakeRemote:
    """Records pushes and serves a canned document."""

    def __init__(self):
        self.document: Optional[Dict[str, Any]] = None
        self.fetch_error: Optional[RemoteSyncError] = None
        self.receipts: List[PushReceipt] = []
        self.pushed: List[str] = []

    def fetch(self) -> Dict[str, Any]:
        if self.fetch_error is not None:
            raise self.fetch_error
        if self.document is None:
            raise RemoteSyncError("api_404", "nothing stored")
        return self.document

    def push(self, body: str) -> PushReceipt:
        self.pushed.append(body)
        if self.receipts:
            return self.receipts.pop(0)
        return PushReceipt.ok(200, len(body))

    def fail_next(self, count: int, code: str = "api_500", retryable: bool = True) -> None:
        for _ in range(count):
            self.receipts.append(PushReceipt.failed(code, "boom", 0, retryable=retryable))


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def make_coordinator(tmp_path: Path):
    """Factory for coordinators writing under tmp_path; sleeps are recorded, not taken."""

    def factory(remote=None, online: bool = True, **kwargs) -> PersistenceCoordinator:
        sleeps = kwargs.pop("sleeps", [])
        return PersistenceCoordinator(
            local=LocalStore(tmp_path / "state" / "portal_db.json"),
            remote=remote,
            pending=PendingPushQueue(tmp_path / "state" / "pending_push.json"),
            connectivity=lambda: online,
            sleep=sleeps.append,
            **kwargs,
        )

    return factory


@pytest.fixture
def document():
    """Fresh copy of the seed document."""
    return default_document()


@pytest.fixture
def config(tmp_path: Path) -> PortalConfig:
    """Offline config with all state under tmp_path."""
    return PortalConfig(
        data_dir=tmp_path / "state",
        offline=True,
        secret_key="test-secret-key",
    )


@pytest.fixture
def store(config: PortalConfig) -> DocumentStore:
    store = DocumentStore(PersistenceCoordinator.from_config(config))
    store.bootstrap()
    return store


@pytest.fixture
def app(config: PortalConfig, store: DocumentStore):
    """Flask test app with saves blocking on the (offline) remote."""
    app = create_app(config, store)
    app.config["TESTING"] = True
    app.config["BACKGROUND_SYNC"] = False
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with the admin session flag set."""
    with client.session_transaction() as sess:
        sess["admin_session"] = "active"
    return client


@pytest.fixture
def editing_client(admin_client):
    """Admin client with edit mode switched on."""
    resp = admin_client.post("/api/admin/draft/edit-mode", json={"enabled": True})
    assert resp.status_code == 200
    return admin_client
