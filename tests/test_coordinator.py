"""
Tests for the persistence coordinator — load order, save durability, retry.
"""

from __future__ import annotations

import json
import logging

from schoolportal.models.document import SCHEMA_MARKER
from schoolportal.persistence.coordinator import (
    PersistenceCoordinator,
    SyncStatus,
    serialize_document,
)
from schoolportal.persistence.remote import RemoteSyncError


class TestLoad:
    def test_prefers_valid_remote_document(self, make_coordinator, fake_remote, document):
        fake_remote.document = document.model_copy(update={"school_name": "Remote"}).to_wire()
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.save_local(document.model_copy(update={"school_name": "Local"}))

        result = coordinator.load()

        assert result.source == "remote"
        assert result.document.school_name == "Remote"

    def test_offline_skips_remote(self, make_coordinator, fake_remote, document):
        fake_remote.document = document.model_copy(update={"school_name": "Remote"}).to_wire()
        coordinator = make_coordinator(remote=fake_remote, online=False)
        coordinator.save_local(document.model_copy(update={"school_name": "Local"}))

        result = coordinator.load()

        assert result.source == "local"
        assert result.document.school_name == "Local"

    def test_remote_error_falls_back_to_local(self, make_coordinator, fake_remote, document):
        fake_remote.fetch_error = RemoteSyncError("timeout", "slow", retryable=True)
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.save_local(document.model_copy(update={"school_name": "Local"}))

        result = coordinator.load()

        assert result.source == "local"

    def test_placeholder_without_marker_is_rejected(self, make_coordinator, fake_remote, document):
        fake_remote.document = {"status": "ok"}
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.save_local(document.model_copy(update={"school_name": "Local"}))

        result = coordinator.load()

        assert result.source == "local"
        assert result.document.school_name == "Local"

    def test_invalid_remote_payload_is_rejected(self, make_coordinator, fake_remote):
        fake_remote.document = {"portalSchema": SCHEMA_MARKER, "notices": "not-a-list"}
        coordinator = make_coordinator(remote=fake_remote)

        result = coordinator.load()

        assert result.source == "default"

    def test_defaults_when_nothing_stored(self, make_coordinator):
        result = make_coordinator(online=False).load()

        assert result.source == "default"
        assert result.document.has_marker()
        assert result.document.admin_username == "127260"

    def test_accept_remote(self, document):
        assert PersistenceCoordinator.accept_remote(document.to_wire()) == document
        assert PersistenceCoordinator.accept_remote({}) is None

    def test_invalid_local_document_falls_back_to_defaults(self, make_coordinator):
        coordinator = make_coordinator(online=False)
        coordinator.local.put({"notices": 5})

        assert coordinator.load().source == "default"


class TestSave:
    def test_offline_save_is_local_only(self, make_coordinator, fake_remote, document):
        coordinator = make_coordinator(remote=fake_remote, online=False)

        result = coordinator.save(document)

        assert result.local_saved is True
        assert result.status is SyncStatus.LOCAL_ONLY
        assert fake_remote.pushed == []

    def test_no_remote_configured_is_local_only(self, make_coordinator, document):
        coordinator = make_coordinator()
        assert coordinator.is_online() is False
        assert coordinator.save(document).status is SyncStatus.LOCAL_ONLY

    def test_load_after_save_returns_same_document(self, make_coordinator, document):
        coordinator = make_coordinator(online=False)
        doc = document.model_copy(update={"school_name": "Saved", "revision": 3})

        coordinator.save(doc)

        assert coordinator.load().document == doc

    def test_second_save_wins(self, make_coordinator, document):
        coordinator = make_coordinator(online=False)
        coordinator.save(document.model_copy(update={"motto": "first"}))
        coordinator.save(document.model_copy(update={"motto": "second"}))

        assert coordinator.load().document.motto == "second"

    def test_online_save_pushes_serialized_document(self, make_coordinator, fake_remote, document):
        coordinator = make_coordinator(remote=fake_remote)

        result = coordinator.save(document)

        assert result.status is SyncStatus.SYNCED
        assert fake_remote.pushed == [serialize_document(document)]
        assert json.loads(fake_remote.pushed[0])["schoolName"] == document.school_name
        assert result.payload_chars == len(fake_remote.pushed[0])

    def test_retries_with_backoff_then_syncs(self, make_coordinator, fake_remote, document):
        sleeps = []
        fake_remote.fail_next(2)
        coordinator = make_coordinator(remote=fake_remote, sleeps=sleeps)

        result = coordinator.save(document)

        assert result.status is SyncStatus.SYNCED
        assert len(fake_remote.pushed) == 3
        assert sleeps == [0.5, 1.0]

    def test_non_retryable_failure_stops_immediately(self, make_coordinator, fake_remote, document):
        sleeps = []
        fake_remote.fail_next(1, code="api_403", retryable=False)
        coordinator = make_coordinator(remote=fake_remote, sleeps=sleeps)

        result = coordinator.save(document)

        assert result.status is SyncStatus.FAILED
        assert result.local_saved is True
        assert "api_403" in result.error
        assert len(fake_remote.pushed) == 1
        assert sleeps == []

    def test_exhausted_retries_record_pending_push(self, make_coordinator, fake_remote, document):
        fake_remote.fail_next(3)
        coordinator = make_coordinator(remote=fake_remote)

        result = coordinator.save(document)

        assert result.status is SyncStatus.FAILED
        assert len(fake_remote.pushed) == 3
        assert "current" in coordinator.pending
        assert coordinator.status_dict()["pending"]["total_items"] == 1

    def test_retry_pending_pushes_local_document(self, make_coordinator, fake_remote, document):
        fake_remote.fail_next(3)
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.save(document)

        assert coordinator.retry_pending() is None  # not due yet
        result = coordinator.retry_pending(force=True)

        assert result.status is SyncStatus.SYNCED
        assert "current" not in coordinator.pending

    def test_retry_pending_with_nothing_queued(self, make_coordinator, fake_remote):
        assert make_coordinator(remote=fake_remote).retry_pending(force=True) is None

    def test_oversize_payload_warns_but_saves_locally(self, make_coordinator, fake_remote, document, caplog):
        fake_remote.fail_next(1, code="api_413", retryable=False)
        coordinator = make_coordinator(remote=fake_remote, payload_ceiling=100)

        with caplog.at_level(logging.WARNING):
            result = coordinator.save(document)

        assert "exceeds the 100 char remote limit" in caplog.text
        assert result.local_saved is True
        assert result.status is SyncStatus.FAILED
        assert coordinator.load_local() == document

    def test_near_ceiling_warns(self, make_coordinator, caplog):
        coordinator = make_coordinator(payload_ceiling=1000)
        with caplog.at_level(logging.WARNING):
            coordinator.check_payload_size(950)
        assert "close to the 1000 char remote limit" in caplog.text

    def test_local_failure_is_reported_not_raised(self, make_coordinator, fake_remote, document):
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.local.path.mkdir(parents=True)

        result = coordinator.save(document)

        assert result.local_saved is False
        assert result.status is SyncStatus.SYNCED

    def test_background_push(self, make_coordinator, fake_remote, document):
        coordinator = make_coordinator(remote=fake_remote)

        result = coordinator.save(document, wait_remote=False)
        assert result.status is SyncStatus.PENDING

        coordinator.shutdown()
        assert coordinator.last_status.status is SyncStatus.SYNCED
        assert len(fake_remote.pushed) == 1


class TestPull:
    def test_pull_overwrites_local(self, make_coordinator, fake_remote, document):
        fake_remote.document = document.model_copy(update={"motto": "From cloud"}).to_wire()
        coordinator = make_coordinator(remote=fake_remote)
        coordinator.save_local(document)

        pulled = coordinator.pull()

        assert pulled.motto == "From cloud"
        assert coordinator.load_local().motto == "From cloud"

    def test_pull_offline_returns_none(self, make_coordinator, fake_remote):
        assert make_coordinator(remote=fake_remote, online=False).pull() is None


class TestStatus:
    def test_status_dict(self, make_coordinator, fake_remote, document):
        coordinator = make_coordinator(remote=fake_remote)
        assert coordinator.status_dict()["last_save"] is None

        coordinator.save(document)
        status = coordinator.status_dict()

        assert status["online"] is True
        assert status["remote_configured"] is True
        assert status["last_save"]["status"] == "synced"
