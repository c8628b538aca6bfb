"""
Tests for the YAML site loader and the Sentry event filters.
"""

from pathlib import Path

import pytest
import yaml
from fastapi import HTTPException

from arc.config_loader import SiteLoader, SiteLoaderError, load_site
from arc.core.models import PostType, Taxonomy
from arc.integrations.sentry import _filter_events, _filter_transactions
from conftest import SITE

REPO_SEED = Path(__file__).resolve().parent.parent / "config" / "site.yaml"


class TestSiteLoader:

    @pytest.mark.asyncio
    async def test_load_counts(self, repo, users, access, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text(yaml.safe_dump(SITE))

        counts = await load_site(path, repo, users, access)

        assert counts == {"users": 4, "terms": 4, "posts": 3, "pages": 2, "comments": 2, "options": 0}

    @pytest.mark.asyncio
    async def test_relations_and_flags(self, repo, users, access):
        await SiteLoader(repo, users, access).load(SITE)

        secret = await repo.get_post("post_secret")
        assert secret.categories == ["cat_general"]
        assert secret.tags == ["tag_internal"]
        assert secret.author_id == (await users.get_by_login("editor")).id

        assert await access.restricted_post_ids() == {"post_secret", "page_handbook"}
        assert await access.restricted_term_ids() == {"cat_members", "tag_internal"}
        assert (await repo.get_post("page_about")).post_type == PostType.PAGE

    @pytest.mark.asyncio
    async def test_unknown_term_rejected(self, repo, users, access):
        data = {"posts": [{"title": "X", "categories": ["missing"]}]}
        with pytest.raises(SiteLoaderError, match="Unknown category 'missing'"):
            await SiteLoader(repo, users, access).load(data)

    @pytest.mark.asyncio
    async def test_unknown_author_rejected(self, repo, users, access):
        with pytest.raises(SiteLoaderError):
            await SiteLoader(repo, users, access).load({"posts": [{"title": "X", "author": "ghost"}]})

    @pytest.mark.asyncio
    async def test_existing_users_reused(self, repo, users, access):
        data = {"users": SITE["users"][:1]}
        await SiteLoader(repo, users, access).load(data)
        await SiteLoader(repo, users, access).load(data)

        assert await users.get_by_login("admin") is not None

    @pytest.mark.asyncio
    async def test_bundled_seed_loads(self, repo, users, access):
        counts = await load_site(REPO_SEED, repo, users, access)

        assert counts["posts"] > 0
        assert (await repo.get_term_by_slug(Taxonomy.CATEGORY, "members")) is not None


class TestSentryFilters:

    def test_expected_http_errors_dropped(self):
        for status in (401, 403, 404, 422):
            exc = HTTPException(status_code=status)
            assert _filter_events({}, {"exc_info": (type(exc), exc, None)}) is None

    def test_server_errors_kept(self):
        exc = RuntimeError("boom")
        event = {"message": "x"}
        assert _filter_events(event, {"exc_info": (type(exc), exc, None)}) is event

    def test_credentials_scrubbed(self):
        event = {
            "request": {
                "headers": {"Authorization": "Bearer t", "Cookie": "arc_session=t", "Accept": "*/*"},
                "data": {"username": "ann", "password": "secret", "security": "nonce"},
                "cookies": {"arc_session": "t"},
            },
        }
        request = _filter_events(event, {})["request"]

        assert request["headers"] == {"Authorization": "[Filtered]", "Cookie": "[Filtered]", "Accept": "*/*"}
        assert request["data"] == {"username": "ann", "password": "[Filtered]", "security": "[Filtered]"}
        assert request["cookies"] == "[Filtered]"

    def test_health_and_static_transactions_dropped(self):
        assert _filter_transactions({"transaction": "/health"}, {}) is None
        assert _filter_transactions({"transaction": "/static/arc/arc-public.js"}, {}) is None
        assert _filter_transactions({"transaction": "/"}, {}) is not None
