"""
Tests for the public site routes, login flow and theme toggle.
"""

from __future__ import annotations

import pytest

from schoolportal.models.document import Notice


class TestPages:
    @pytest.mark.parametrize("path", [
        "/",
        "/about",
        "/administration",
        "/academics",
        "/co-curricular",
        "/admission",
        "/gallery",
        "/teachers",
        "/corner",
        "/office-profiles",
        "/login",
    ])
    def test_page_renders(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 200
        assert resp.content_type.startswith("text/html")
        assert "Bagpur Masum Ali Pramanik High School" in resp.get_data(as_text=True)

    def test_home_shows_stats_and_messages(self, client):
        html = client.get("/").get_data(as_text=True)
        assert "3000+" in html
        assert "Head Master Message" in html
        assert "EIIN: 127260" in html

    def test_unknown_page_redirects_home(self, client):
        resp = client.get("/no-such-page")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/")

    def test_unknown_api_path_is_json_404(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_document_text_is_escaped(self, client, store):
        store.commit(store.document.model_copy(update={"about_content": "<script>alert(1)</script>"}))
        html = client.get("/about").get_data(as_text=True)
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_admission_closed(self, client, store):
        store.commit(store.document.model_copy(update={"is_admission_open": False}))
        html = client.get("/admission").get_data(as_text=True)
        assert "Registrations are currently closed." in html

    def test_administration_omits_empty_groups(self, client):
        html = client.get("/administration").get_data(as_text=True)
        assert "Assistant Head Teachers" in html
        assert "Governing Body" not in html


class TestNoticeBoard:
    def test_filter_by_class(self, client, store):
        store.commit(store.document.model_copy(update={"notices": [
            Notice(id="a", title="For everyone", target_class="All"),
            Notice(id="b", title="Class nine only", target_class="Class 9"),
            Notice(id="c", title="Class eight only", target_class="Class 8"),
        ]}))

        html = client.get("/corner", query_string={"class": "Class 9"}).get_data(as_text=True)

        # Every title is in the ticker once; matching ones are on the board too
        assert html.count("For everyone") == 2
        assert html.count("Class nine only") == 2
        assert html.count("Class eight only") == 1


class TestOfficeProfiles:
    def test_locked_by_default(self, client):
        html = client.get("/office-profiles").get_data(as_text=True)
        assert "Protected Area" in html
        assert "NCTB Official" not in html

    def test_wrong_credentials(self, client):
        resp = client.post("/office-profiles", data={"username": "office", "password": "bad"})
        assert resp.status_code == 401
        assert "Invalid Access Credentials" in resp.get_data(as_text=True)

    def test_unlock_and_lock(self, client):
        resp = client.post(
            "/office-profiles",
            data={"username": "office", "password": "office123"},
            follow_redirects=True,
        )
        html = resp.get_data(as_text=True)
        assert "NCTB Official" in html
        assert html.count("Govt. Portal") == 2

        client.post("/office-profiles/logout")
        assert "Protected Area" in client.get("/office-profiles").get_data(as_text=True)

    def test_empty_profile_list(self, client, store):
        store.commit(store.document.model_copy(update={"office_profiles": []}))
        with client.session_transaction() as sess:
            sess["office_auth"] = "true"
        assert "No profiles currently listed" in client.get("/office-profiles").get_data(as_text=True)


class TestLogin:
    def test_successful_login(self, client):
        resp = client.post("/login", data={"username": "127260", "password": "Bmahs127260"})
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/admin")
        with client.session_transaction() as sess:
            assert sess["admin_session"] == "active"

    def test_failed_login(self, client):
        resp = client.post("/login", data={"username": "127260", "password": "nope"})
        assert resp.status_code == 401
        assert "Wrong ID or password! Try again." in resp.get_data(as_text=True)

    def test_admin_requires_login(self, client):
        resp = client.get("/admin")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/login")

    def test_login_page_redirects_when_logged_in(self, admin_client):
        resp = admin_client.get("/login")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/admin")

    def test_dashboard_renders(self, admin_client):
        resp = admin_client.get("/admin")
        html = resp.get_data(as_text=True)
        assert resp.status_code == 200
        assert "Admin Dashboard" in html
        assert "Logout" in html

    def test_logout(self, admin_client):
        resp = admin_client.post("/logout")
        assert resp.status_code == 302
        with admin_client.session_transaction() as sess:
            assert "admin_session" not in sess


class TestPasswordReset:
    def test_reset_then_login_with_new_password(self, client, store):
        resp = client.post("/login/reset", data={
            "reset_code": "998877",
            "new_password": "abcdef",
            "confirm_password": "abcdef",
        })
        assert resp.status_code == 200
        assert "Password updated" in resp.get_data(as_text=True)
        assert store.document.admin_password == "abcdef"
        assert store.coordinator.load_local().admin_password == "abcdef"

        resp = client.post("/login", data={"username": "127260", "password": "abcdef"})
        assert resp.status_code == 302

    def test_short_password_leaves_document_unchanged(self, client, store):
        revision = store.document.revision
        resp = client.post("/login/reset", data={
            "reset_code": "998877",
            "new_password": "abcde",
            "confirm_password": "abcde",
        })
        assert resp.status_code == 400
        assert "at least 6 characters" in resp.get_data(as_text=True)
        assert store.document.admin_password == "Bmahs127260"
        assert store.document.revision == revision

    def test_bad_reset_code(self, client):
        resp = client.post("/login/reset", data={
            "reset_code": "111111",
            "new_password": "abcdef",
            "confirm_password": "abcdef",
        })
        assert resp.status_code == 400
        assert "Invalid Security Reset Code!" in resp.get_data(as_text=True)


class TestThemeToggle:
    def test_toggle_is_public_and_persists(self, client, store):
        resp = client.post("/api/theme/toggle")
        data = resp.get_json()

        assert resp.status_code == 200
        assert data["isDarkMode"] is True
        assert data["save"]["status"] == "local_only"
        assert store.coordinator.load_local().theme_config.is_dark_mode is True

        assert 'class="dark"' in client.get("/").get_data(as_text=True)

    def test_toggle_does_not_drop_admin_draft(self, app, editing_client, store):
        editing_client.post("/api/admin/draft/notices", json={"title": "Staged"})

        visitor = app.test_client()
        assert visitor.post("/api/theme/toggle").status_code == 200

        draft = editing_client.get("/api/admin/draft").get_json()
        assert draft["dirty"] is True
        assert "Staged" in [n["title"] for n in draft["document"]["notices"]]
        assert draft["document"]["themeConfig"]["isDarkMode"] is True

        editing_client.post("/api/admin/commit")
        assert store.document.notices[0].title == "Staged"
        assert store.document.theme_config.is_dark_mode is True
