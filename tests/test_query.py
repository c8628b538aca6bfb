"""
Tests for the content repository and queries.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from arc.content.query import (
    CommentQuery,
    PostQuery,
    TermQuery,
    run_comment_query,
    run_post_query,
    run_term_query,
)
from arc.content.repository import NotFoundError
from arc.core.models import Comment, ContentItem, PostStatus, PostType, Taxonomy, Term
from arc.core.utils import utc_now


@pytest_asyncio.fixture
async def site(repo):
    now = utc_now()
    await repo.save_term(Term(id="c1", taxonomy=Taxonomy.CATEGORY, name="Beta", slug="beta"))
    await repo.save_term(Term(id="c2", taxonomy=Taxonomy.CATEGORY, name="Alpha", slug="alpha"))
    await repo.save_term(Term(id="t1", taxonomy=Taxonomy.TAG, name="Tag", slug="tag"))

    await repo.save_post(ContentItem(
        id="old", title="Old", slug="old", categories=["c1"], created_at=now - timedelta(days=2),
    ))
    await repo.save_post(ContentItem(
        id="new", title="New", slug="new", tags=["t1"], created_at=now - timedelta(days=1),
    ))
    await repo.save_post(ContentItem(id="draft", title="Draft", slug="draft", status=PostStatus.DRAFT))
    await repo.save_post(ContentItem(id="pg2", post_type=PostType.PAGE, title="Zed", slug="zed", menu_order=1))
    await repo.save_post(ContentItem(id="pg1", post_type=PostType.PAGE, title="Ann", slug="ann", menu_order=1))
    await repo.save_post(ContentItem(id="pg0", post_type=PostType.PAGE, title="Top", slug="top", menu_order=0))

    await repo.save_comment(Comment(id="k1", post_id="old", author_name="A", content="first",
                                    created_at=now - timedelta(hours=2)))
    await repo.save_comment(Comment(id="k2", post_id="new", author_name="B", content="second",
                                    created_at=now - timedelta(hours=1)))
    await repo.save_comment(Comment(id="k3", post_id="new", author_name="C", content="spam", approved=False))
    return repo


# =============================================================================
# Repository
# =============================================================================


class TestContentRepository:

    @pytest.mark.asyncio
    async def test_round_trip_keeps_meta(self, repo):
        await repo.save_post(ContentItem(id="p", title="P", slug="p", meta={"k": 1}))
        assert (await repo.get_post("p")).meta == {"k": 1}

    @pytest.mark.asyncio
    async def test_require_missing_raises(self, repo):
        with pytest.raises(NotFoundError):
            await repo.require_post("nope")
        with pytest.raises(NotFoundError):
            await repo.require_term("nope")

    @pytest.mark.asyncio
    async def test_lookup_by_slug(self, site):
        assert (await site.get_post_by_slug("zed")).id == "pg2"
        assert await site.get_post_by_slug("zed", PostType.POST) is None
        assert (await site.get_term_by_slug(Taxonomy.TAG, "tag")).id == "t1"
        assert await site.get_term_by_slug(Taxonomy.CATEGORY, "tag") is None

    @pytest.mark.asyncio
    async def test_count_term_posts_ignores_drafts(self, site):
        await site.save_post(ContentItem(title="D", slug="d", status=PostStatus.DRAFT, categories=["c1"]))
        assert await site.count_term_posts("c1") == 1

    @pytest.mark.asyncio
    async def test_add_option_only_once(self, repo):
        assert await repo.add_option("opt", {"a": 1})
        assert not await repo.add_option("opt", {"a": 2})
        assert await repo.get_option("opt") == {"a": 1}


# =============================================================================
# Post queries
# =============================================================================


class TestPostQuery:

    @pytest.mark.asyncio
    async def test_posts_newest_first_published_only(self, site):
        result = await run_post_query(site, PostQuery())
        assert [p.id for p in result.items] == ["new", "old"]
        assert result.found

    @pytest.mark.asyncio
    async def test_pages_by_menu_order_then_title(self, site):
        result = await run_post_query(site, PostQuery(post_type=PostType.PAGE))
        assert [p.id for p in result.items] == ["pg0", "pg1", "pg2"]

    @pytest.mark.asyncio
    async def test_post_not_in(self, site):
        result = await run_post_query(site, PostQuery(post_not_in={"new"}))
        assert [p.id for p in result.items] == ["old"]

    @pytest.mark.asyncio
    async def test_singular_found_only_with_item(self, site):
        assert (await run_post_query(site, PostQuery(post_type=None, slug="zed"))).found
        assert not (await run_post_query(site, PostQuery(post_type=None, slug="nope"))).found
        hidden = PostQuery(post_type=None, slug="zed", post_not_in={"pg2"})
        assert not (await run_post_query(site, hidden)).found

    @pytest.mark.asyncio
    async def test_archive(self, site):
        result = await run_post_query(site, PostQuery(archive_term_id="c1"))
        assert [p.id for p in result.items] == ["old"]
        assert result.found

    @pytest.mark.asyncio
    async def test_empty_archive_still_found(self, site):
        result = await run_post_query(site, PostQuery(archive_term_id="c2"))
        assert result.items == []
        assert result.found

    @pytest.mark.asyncio
    async def test_excluded_archive_not_found(self, site):
        result = await run_post_query(site, PostQuery(archive_term_id="c1", term_not_in={"c1"}))
        assert not result.found

    @pytest.mark.asyncio
    async def test_offset_and_limit(self, site):
        result = await run_post_query(site, PostQuery(limit=1, offset=1))
        assert [p.id for p in result.items] == ["old"]


# =============================================================================
# Term and comment queries
# =============================================================================


class TestTermAndCommentQueries:

    @pytest.mark.asyncio
    async def test_terms_sorted_by_name(self, site):
        terms = await run_term_query(site, TermQuery())
        assert [t.id for t in terms] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_terms_exclude_and_hide_empty(self, site):
        assert [t.id for t in await run_term_query(site, TermQuery(exclude={"c2"}))] == ["c1"]
        assert [t.id for t in await run_term_query(site, TermQuery(hide_empty=True))] == ["c1"]

    @pytest.mark.asyncio
    async def test_comments_approved_newest_first(self, site):
        comments = await run_comment_query(site, CommentQuery())
        assert [c.id for c in comments] == ["k2", "k1"]

    @pytest.mark.asyncio
    async def test_comments_post_not_in(self, site):
        comments = await run_comment_query(site, CommentQuery(post_not_in={"new"}))
        assert [c.id for c in comments] == ["k1"]
