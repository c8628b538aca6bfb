"""
Tests for the admin JSON API: columns, bulk actions, edit forms and settings.
"""

import pytest

from arc.plugin.admin import FIELD, FIELD_MARKER


@pytest.fixture
def editor(auth_headers):
    return auth_headers("editor")


@pytest.fixture
def admin(auth_headers):
    return auth_headers("admin")


def anonymous_post_ids(client) -> set[str]:
    return {p["id"] for p in client.get("/api/posts").json()}


class TestAccessControl:

    def test_anonymous_rejected(self, client):
        assert client.get("/admin/posts").status_code == 401

    def test_subscriber_rejected(self, client, auth_headers):
        assert client.get("/admin/posts", headers=auth_headers("reader")).status_code == 403

    def test_settings_need_manage_options(self, client, editor):
        assert client.get("/admin/settings", headers=editor).status_code == 403


class TestPostsScreen:

    def test_list_has_restricted_column(self, client, editor):
        body = client.get("/admin/posts", headers=editor).json()

        assert body["columns"]["arc_restricted"] == "Restricted"
        assert "arc_restrict" in body["bulk_actions"]
        cells = {row["id"]: row["cells"]["arc_restricted"] for row in body["rows"]}
        assert cells == {"post_public": "No", "post_secret": "Yes", "post_filed": "No"}

    def test_pages_list(self, client, editor):
        body = client.get("/admin/posts", params={"post_type": "page"}, headers=editor).json()
        cells = {row["id"]: row["cells"]["arc_restricted"] for row in body["rows"]}
        assert cells == {"page_about": "No", "page_handbook": "Yes"}

    def test_bulk_restrict(self, client, editor):
        response = client.post(
            "/admin/posts/bulk", json={"action": "arc_restrict", "ids": ["post_public"]}, headers=editor
        )

        assert "arc_bulk=restricted" in response.json()["redirect_to"]
        assert "arc_count=1" in response.json()["redirect_to"]
        assert anonymous_post_ids(client) == {"post_filed"}

    def test_bulk_unrestrict(self, client, editor):
        client.post("/admin/posts/bulk", json={"action": "arc_unrestrict", "ids": ["post_secret"]}, headers=editor)
        assert anonymous_post_ids(client) == {"post_public", "post_filed", "post_secret"}

    def test_bulk_rejects_ids_of_another_type(self, client, auth_headers):
        author = auth_headers("author")
        assert client.get("/admin/posts", params={"post_type": "page"}, headers=author).status_code == 403

        response = client.post(
            "/admin/posts/bulk",
            json={"action": "arc_unrestrict", "ids": ["page_handbook"], "post_type": "post"},
            headers=author,
        )

        assert response.status_code == 403
        assert client.get("/api/pages/page_handbook").status_code == 401

    def test_bulk_trash_rejects_ids_of_another_type(self, client, auth_headers):
        response = client.post(
            "/admin/posts/bulk",
            json={"action": "trash", "ids": ["post_public", "page_about"], "post_type": "post"},
            headers=auth_headers("author"),
        )

        assert response.status_code == 403
        assert "post_public" in anonymous_post_ids(client)
        assert client.get("/api/pages/page_about").status_code == 200

    def test_author_bulk_on_posts(self, client, auth_headers):
        response = client.post(
            "/admin/posts/bulk",
            json={"action": "arc_restrict", "ids": ["post_public"]},
            headers=auth_headers("author"),
        )
        assert response.status_code == 200
        assert anonymous_post_ids(client) == {"post_filed"}

    def test_bulk_unknown_id(self, client, editor):
        response = client.post("/admin/posts/bulk", json={"action": "trash", "ids": ["nope"]}, headers=editor)
        assert response.status_code == 404

    def test_notices(self, client, editor):
        body = client.get("/admin/notices", params={"arc_bulk": "restricted", "arc_count": "2"}, headers=editor).json()
        assert body["items"][0]["message"] == "2 items restricted for anonymous users."

    def test_edit_form_has_checkbox(self, client, editor):
        body = client.get("/admin/posts/post_secret/edit", headers=editor).json()
        fields = {f["name"]: f for f in body["submitbox"]}
        assert fields[FIELD]["value"] is True
        assert FIELD_MARKER in fields

    def test_save_checked_flags_only_that_post(self, client, editor):
        response = client.post(
            "/admin/posts/post_public",
            data={"title": "Public Post", FIELD: "1", FIELD_MARKER: "1"},
            headers=editor,
        )

        assert response.status_code == 200
        assert response.json()["meta"]["arc_restricted"] is True
        assert anonymous_post_ids(client) == {"post_filed"}

    def test_save_unchecked_clears_flag(self, client, editor):
        client.post("/admin/posts/post_secret", data={FIELD_MARKER: "1"}, headers=editor)
        assert "post_secret" in anonymous_post_ids(client)

    def test_save_without_marker_leaves_flag(self, client, editor):
        response = client.post("/admin/posts/post_secret", data={"title": "Renamed"}, headers=editor)

        assert response.json()["title"] == "Renamed"
        assert "post_secret" not in anonymous_post_ids(client)

    def test_create_restricted_post(self, client, editor):
        response = client.post(
            "/admin/posts",
            data={"title": "Brand New", "categories": "cat_general", FIELD: "1", FIELD_MARKER: "1"},
            headers=editor,
        )

        assert response.status_code == 201
        post = response.json()
        assert post["slug"] == "brand-new"
        assert post["categories"] == ["cat_general"]
        assert post["id"] not in anonymous_post_ids(client)

    def test_unknown_post(self, client, editor):
        assert client.get("/admin/posts/nope/edit", headers=editor).status_code == 404

    def test_create_duplicate_slug(self, client, editor):
        client.post("/admin/posts", data={"title": "Dup", "status": "draft"}, headers=editor)
        response = client.post("/admin/posts", data={"title": "Dup", FIELD: "1", FIELD_MARKER: "1"}, headers=editor)

        assert response.status_code == 409
        assert client.get("/dup").status_code == 404

    def test_page_cannot_take_a_post_slug(self, client, editor):
        response = client.post(
            "/admin/posts", data={"title": "Public Post", "post_type": "page"}, headers=editor
        )
        assert response.status_code == 409

    def test_update_to_taken_slug(self, client, editor):
        response = client.post("/admin/posts/post_public", data={"slug": "secret-post"}, headers=editor)

        assert response.status_code == 409
        assert client.get("/secret-post", follow_redirects=False).status_code == 302

    def test_update_keeping_own_slug(self, client, editor):
        response = client.post(
            "/admin/posts/post_public", data={"slug": "public-post", "title": "Renamed"}, headers=editor
        )
        assert response.status_code == 200

    @pytest.mark.parametrize("field", ["post_type", "status"])
    def test_create_with_unknown_enum_value(self, client, editor, field):
        response = client.post("/admin/posts", data={"title": "Odd", field: "bogus"}, headers=editor)

        assert response.status_code == 422
        assert field in response.json()["detail"]

    def test_update_with_unknown_status(self, client, editor):
        response = client.post("/admin/posts/post_public", data={"status": "bogus"}, headers=editor)

        assert response.status_code == 422
        assert client.get("/api/posts/post_public").json()["status"] == "publish"


class TestTermsScreen:

    def test_list_has_restricted_column(self, client, editor):
        body = client.get("/admin/terms", params={"taxonomy": "category"}, headers=editor).json()
        cells = {row["id"]: row["cells"]["arc_restricted"] for row in body["rows"]}
        assert cells == {"cat_general": "No", "cat_members": "Yes"}

    def test_new_form_has_checkbox(self, client, editor):
        body = client.get("/admin/terms/new", headers=editor).json()
        assert [f["name"] for f in body["fields"]] == [FIELD, FIELD_MARKER]

    def test_create_restricted_term(self, client, editor):
        response = client.post(
            "/admin/terms",
            data={"name": "Staff", "taxonomy": "category", FIELD: "1", FIELD_MARKER: "1"},
            headers=editor,
        )

        assert response.status_code == 201
        assert response.json()["meta"]["arc_restricted"] is True
        slugs = [t["slug"] for t in client.get("/api/categories").json()]
        assert "staff" not in slugs
        assert client.get("/category/staff", follow_redirects=False).status_code == 302

    def test_duplicate_slug(self, client, editor):
        response = client.post("/admin/terms", data={"name": "General"}, headers=editor)
        assert response.status_code == 409

    def test_create_with_unknown_taxonomy(self, client, editor):
        response = client.post("/admin/terms", data={"name": "Odd", "taxonomy": "bogus"}, headers=editor)
        assert response.status_code == 422

    def test_edit_to_taken_slug(self, client, editor):
        response = client.post("/admin/terms/cat_general", data={"slug": "members"}, headers=editor)

        assert response.status_code == 409
        assert client.get("/admin/terms/cat_general/edit", headers=editor).json()["term"]["slug"] == "general"

    def test_same_slug_in_other_taxonomy(self, client, editor):
        response = client.post("/admin/terms/tag_news", data={"slug": "general"}, headers=editor)
        assert response.status_code == 200

    def test_edit_unflags_term(self, client, editor):
        form = client.get("/admin/terms/cat_members/edit", headers=editor).json()
        assert {f["name"]: f["value"] for f in form["fields"]}[FIELD] is True

        client.post("/admin/terms/cat_members", data={FIELD_MARKER: "1"}, headers=editor)
        assert client.get("/category/members").status_code == 200


class TestSettingsAndPlugins:

    def test_defaults(self, client, admin):
        body = client.get("/admin/settings", headers=admin).json()
        assert body["redirect_to_login"] is True
        assert body["ajax_login"] is True

    def test_update_changes_public_behaviour(self, client, admin):
        response = client.put(
            "/admin/settings",
            json={"login_message": "Members only.", "redirect_to_login": False, "ajax_login": False},
            headers=admin,
        )
        assert response.status_code == 200

        assert client.get("/api/posts/post_secret").json()["message"] == "Members only."
        assert client.get("/secret-post", follow_redirects=False).status_code == 404
        assert 'id="arc-login"' not in client.get("/").text

    def test_plugin_action_links(self, client, admin):
        actions = client.get("/admin/plugins", headers=admin).json()["plugins"][0]["actions"]
        assert actions[0] == {"label": "Settings", "url": "/admin/settings"}

    def test_menu_filtered_by_capability(self, client, admin, editor):
        assert [m["slug"] for m in client.get("/admin/menu", headers=admin).json()["items"]] == ["arc-settings"]
        assert client.get("/admin/menu", headers=editor).json()["items"] == []

    def test_assets(self, client, editor):
        items = client.get("/admin/assets", headers=editor).json()["items"]
        assert items[0]["src"] == "/static/arc/arc-admin.css"
