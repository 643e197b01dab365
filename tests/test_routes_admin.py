"""
Tests for the admin API — draft editing, uploads, commit and sync.
"""

from __future__ import annotations

import io

import pytest

from schoolportal.admin.server import create_app
from schoolportal.persistence.coordinator import PersistenceCoordinator
from schoolportal.state import DocumentStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class TestAuthGuard:
    @pytest.mark.parametrize("method,path", [
        ("get", "/api/admin/document"),
        ("get", "/api/admin/draft"),
        ("post", "/api/admin/draft/notices"),
        ("delete", "/api/admin/draft/notices/n1"),
        ("post", "/api/admin/commit"),
        ("get", "/api/sync/status"),
        ("post", "/api/sync/retry"),
    ])
    def test_requires_admin_session(self, client, method, path):
        resp = getattr(client, method)(path, json={})
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Unauthorized"}


class TestDraftRead:
    def test_document(self, admin_client):
        data = admin_client.get("/api/admin/document").get_json()
        assert data["schoolName"] == "Bagpur Masum Ali Pramanik High School"
        assert "adminPassword" in data

    def test_draft_state(self, admin_client):
        data = admin_client.get("/api/admin/draft").get_json()
        assert data["edit_mode"] is False
        assert data["dirty"] is False
        assert data["document"]["notices"][0]["id"] == "n1"

    def test_toggle_edit_mode(self, admin_client):
        resp = admin_client.post("/api/admin/draft/edit-mode", json={"enabled": True})
        assert resp.get_json() == {"edit_mode": True}
        resp = admin_client.post("/api/admin/draft/edit-mode", json={"enabled": False})
        assert resp.get_json() == {"edit_mode": False}


class TestEditModeOff:
    def test_mutations_rejected(self, admin_client, store):
        resp = admin_client.post("/api/admin/draft/notices", json={"title": "x"})
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "Edit mode is off"}

        resp = admin_client.delete("/api/admin/draft/notices/n1")
        assert resp.status_code == 409
        assert len(store.draft.document.notices) == 1


class TestRecords:
    def test_add_notice_prepends(self, editing_client, store):
        resp = editing_client.post("/api/admin/draft/notices", json={"title": "Exam routine", "important": True})

        assert resp.status_code == 201
        record = resp.get_json()
        assert record["title"] == "Exam routine"
        assert record["id"]
        assert store.draft.document.notices[0].id == record["id"]
        assert store.document.notices[0].id == "n1"

    def test_add_with_position_end(self, editing_client, store):
        resp = editing_client.post("/api/admin/draft/gallery?position=end", json={"url": "https://x/img.png"})
        assert resp.status_code == 201
        assert store.draft.document.gallery[-1].url == "https://x/img.png"

    def test_add_invalid_record(self, editing_client):
        resp = editing_client.post("/api/admin/draft/applications", json={"status": "maybe"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid data"

    def test_unknown_collection(self, editing_client):
        resp = editing_client.post("/api/admin/draft/homework", json={})
        assert resp.status_code == 404

    def test_update_record(self, editing_client, store):
        resp = editing_client.patch("/api/admin/draft/notices/n1", json={"title": "Changed"})
        assert resp.get_json() == {"changed": True}
        assert store.draft.document.notices[0].title == "Changed"
        assert store.draft.document.notices[0].important is True

    def test_delete_then_noop(self, editing_client, store):
        assert editing_client.delete("/api/admin/draft/notices/n1").get_json() == {"changed": True}
        assert editing_client.delete("/api/admin/draft/notices/n9").get_json() == {"changed": False}
        assert store.draft.document.notices == []

    def test_body_must_be_object(self, editing_client):
        resp = editing_client.post("/api/admin/draft/notices", json=[1, 2])
        assert resp.status_code == 400


class TestFieldsAndBlocks:
    def test_patch_fields(self, editing_client, store):
        resp = editing_client.patch("/api/admin/draft/fields", json={"schoolName": "New Name"})
        assert resp.get_json() == {"changed": True}
        assert store.draft.document.school_name == "New Name"

    def test_patch_unknown_field(self, editing_client):
        resp = editing_client.patch("/api/admin/draft/fields", json={"notices": []})
        assert resp.status_code == 400

    def test_patch_block(self, editing_client, store):
        resp = editing_client.patch("/api/admin/draft/blocks/tickerConfig", json={"speed": 40})
        assert resp.get_json() == {"changed": True}
        assert store.draft.document.ticker_config.speed == 40

    def test_patch_unknown_block(self, editing_client):
        resp = editing_client.patch("/api/admin/draft/blocks/nope", json={})
        assert resp.status_code == 404

    def test_head_teacher(self, editing_client, store):
        resp = editing_client.delete("/api/admin/draft/head-teacher")
        assert resp.get_json() == {"changed": True}
        assert store.draft.document.head_teacher is None

        resp = editing_client.put("/api/admin/draft/head-teacher", json={"name": "New Head"})
        assert resp.get_json() == {"changed": True}
        assert store.draft.document.head_teacher.name == "New Head"

    def test_new_reset_code(self, editing_client, store):
        code = editing_client.post("/api/admin/draft/reset-code").get_json()["adminResetCode"]
        assert len(code) == 6
        assert store.draft.document.admin_reset_code == code


class TestUploads:
    def test_single_upload(self, admin_client):
        resp = admin_client.post(
            "/api/admin/draft/uploads",
            data={"file": (io.BytesIO(PNG_BYTES), "photo.png", "image/png")},
            content_type="multipart/form-data",
        )
        data = resp.get_json()
        assert resp.status_code == 200
        assert data["url"].startswith("data:image/png;base64,")
        assert data["fileName"] == "photo.png"
        assert data["kind"] == "image"

    def test_upload_missing_file(self, admin_client):
        resp = admin_client.post("/api/admin/draft/uploads", data={}, content_type="multipart/form-data")
        assert resp.status_code == 400

    def test_upload_rejected_type(self, admin_client):
        resp = admin_client.post(
            "/api/admin/draft/uploads",
            data={"file": (io.BytesIO(b"#!/bin/sh"), "run.sh", "text/x-sh")},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400
        assert "unsupported media type" in resp.get_json()["error"]

    def test_gallery_upload(self, editing_client, store):
        before = len(store.draft.document.gallery)
        resp = editing_client.post(
            "/api/admin/draft/gallery/uploads",
            data={"files": [
                (io.BytesIO(PNG_BYTES), "a.png", "image/png"),
                (io.BytesIO(b""), "empty.png", "image/png"),
            ]},
            content_type="multipart/form-data",
        )
        data = resp.get_json()

        assert resp.status_code == 200
        assert len(data["added"]) == 1
        assert "empty.png" in data["errors"]
        assert len(store.draft.document.gallery) == before + 1
        ids = [g.id for g in store.draft.document.gallery]
        assert len(ids) == len(set(ids))

    def test_gallery_items_dropped_when_draft_refuses(self, editing_client, store, monkeypatch):
        before = len(store.draft.document.gallery)
        monkeypatch.setattr(store.draft, "append", lambda collection, item: False)

        resp = editing_client.post(
            "/api/admin/draft/gallery/uploads",
            data={"files": [(io.BytesIO(PNG_BYTES), "a.png", "image/png")]},
            content_type="multipart/form-data",
        )
        data = resp.get_json()

        assert resp.status_code == 400
        assert data["added"] == []
        assert data["errors"] == {"a.png": "Not added"}
        assert len(store.draft.document.gallery) == before

    def test_edit_mode_switched_off_mid_upload(self, editing_client, store, monkeypatch):
        append = store.draft.append

        def switch_off_then_append(collection, item):
            store.draft.set_edit_mode(False)
            return append(collection, item)

        monkeypatch.setattr(store.draft, "append", switch_off_then_append)

        resp = editing_client.post(
            "/api/admin/draft/gallery/uploads",
            data={"files": [(io.BytesIO(PNG_BYTES), "a.png", "image/png")]},
            content_type="multipart/form-data",
        )

        assert resp.status_code == 409
        assert resp.get_json()["added"] == []

    def test_gallery_upload_requires_edit_mode(self, admin_client):
        resp = admin_client.post(
            "/api/admin/draft/gallery/uploads",
            data={"files": [(io.BytesIO(PNG_BYTES), "a.png", "image/png")]},
            content_type="multipart/form-data",
        )
        assert resp.status_code == 409


class TestCommit:
    def test_commit_publishes_draft(self, editing_client, store):
        revision = store.document.revision
        editing_client.delete("/api/admin/draft/notices/n1")

        resp = editing_client.post("/api/admin/commit")
        data = resp.get_json()

        assert resp.status_code == 200
        assert data["revision"] == revision + 1
        assert data["save"]["local_saved"] is True
        assert data["save"]["status"] == "local_only"
        assert store.document.notices == []
        assert store.coordinator.load_local().notices == []
        assert store.draft.dirty is False

    def test_discard(self, editing_client, store):
        editing_client.delete("/api/admin/draft/notices/n1")

        data = editing_client.post("/api/admin/discard").get_json()

        assert data["dirty"] is False
        assert data["document"]["notices"][0]["id"] == "n1"
        assert len(store.document.notices) == 1


class TestSync:
    def test_status(self, admin_client):
        data = admin_client.get("/api/sync/status").get_json()
        assert data["online"] is False
        assert data["remote_configured"] is False
        assert data["loaded_from"] == "default"
        assert "revision" in data

    def test_retry_with_nothing_pending(self, admin_client):
        data = admin_client.post("/api/sync/retry").get_json()
        assert data == {"retried": False, "message": "Nothing to retry"}

    def test_retry_pushes_pending(self, config, make_coordinator, fake_remote):
        fake_remote.fail_next(3)
        store = DocumentStore(make_coordinator(remote=fake_remote))
        store.bootstrap()
        store.commit(store.document)

        app = create_app(config, store)
        app.config["TESTING"] = True
        app.config["BACKGROUND_SYNC"] = False
        client = app.test_client()
        with client.session_transaction() as sess:
            sess["admin_session"] = "active"

        data = client.post("/api/sync/retry").get_json()

        assert data["retried"] is True
        assert data["save"]["status"] == "synced"


class TestServer:
    def test_create_app_bootstraps_store(self, config):
        store = DocumentStore(PersistenceCoordinator.from_config(config))
        app = create_app(config, store)
        assert store.loaded_from == "default"
        assert app.extensions["schoolportal"] is store

    def test_background_sync_default(self, config, store):
        assert create_app(config, store).config["BACKGROUND_SYNC"] is True
