"""
Tests for the restricted flag: parsing, reading and writing.
"""

import pytest
import pytest_asyncio

from arc.access.store import RESTRICTED_META_KEY, is_restricted, parse_restricted
from arc.content.repository import NotFoundError
from arc.core.models import ContentItem, PostType, Taxonomy, Term


@pytest_asyncio.fixture
async def seeded(repo):
    posts = [
        ContentItem(id="p1", title="One", slug="one"),
        ContentItem(id="p2", title="Two", slug="two"),
        ContentItem(id="pg1", post_type=PostType.PAGE, title="Page", slug="page"),
    ]
    for post in posts:
        await repo.save_post(post)
    await repo.save_term(Term(id="c1", taxonomy=Taxonomy.CATEGORY, name="Cat", slug="cat"))
    await repo.save_term(Term(id="t1", taxonomy=Taxonomy.TAG, name="Tag", slug="tag"))
    return repo


# =============================================================================
# Parsing
# =============================================================================


class TestParseRestricted:
    """Only explicit truthy markers count; everything else is open."""

    @pytest.mark.parametrize("value", [True, 1, "1", "true", "TRUE", " yes ", "on"])
    def test_truthy(self, value):
        assert parse_restricted(value) is True

    @pytest.mark.parametrize("value", [None, False, 0, "", "0", "false", "no", "off"])
    def test_falsy(self, value):
        assert parse_restricted(value) is False

    @pytest.mark.parametrize("value", ["maybe", "2", 2, [], {"a": 1}, 1.0])
    def test_malformed_fails_open(self, value):
        assert parse_restricted(value) is False

    def test_is_restricted_reads_meta(self):
        post = ContentItem(title="x", slug="x", meta={RESTRICTED_META_KEY: "1"})
        assert is_restricted(post)
        assert not is_restricted(ContentItem(title="y", slug="y"))


# =============================================================================
# Store
# =============================================================================


class TestAccessPolicyStore:
    """Reading and writing flags through the repository."""

    @pytest.mark.asyncio
    async def test_set_and_read_post_flag(self, seeded, access):
        await access.set_post_restricted("p1", True)

        assert await access.is_post_restricted("p1")
        assert not await access.is_post_restricted("p2")
        assert await seeded.get_post_meta("p1", RESTRICTED_META_KEY) is True

    @pytest.mark.asyncio
    async def test_unset_post_flag(self, seeded, access):
        await access.set_post_restricted("p1", True)
        await access.set_post_restricted("p1", False)

        assert not await access.is_post_restricted("p1")

    @pytest.mark.asyncio
    async def test_unknown_post_reads_unrestricted(self, access):
        assert not await access.is_post_restricted("missing")

    @pytest.mark.asyncio
    async def test_unknown_post_write_raises(self, access):
        with pytest.raises(NotFoundError):
            await access.set_post_restricted("missing", True)

    @pytest.mark.asyncio
    async def test_restricted_post_ids_by_type(self, seeded, access):
        await access.set_post_restricted("p2", True)
        await access.set_post_restricted("pg1", True)

        assert await access.restricted_post_ids() == {"p2", "pg1"}
        assert await access.restricted_post_ids(PostType.POST) == {"p2"}
        assert await access.restricted_post_ids(PostType.PAGE) == {"pg1"}

    @pytest.mark.asyncio
    async def test_malformed_stored_value_is_open(self, seeded, access):
        await seeded.update_post_meta("p1", RESTRICTED_META_KEY, "garbage")
        assert not await access.is_post_restricted("p1")

    @pytest.mark.asyncio
    async def test_term_flags(self, seeded, access):
        await access.set_term_restricted("t1", True)

        assert await access.is_term_restricted("t1")
        assert not await access.is_term_restricted("c1")
        assert await access.restricted_term_ids() == {"t1"}
        assert await access.restricted_term_ids(Taxonomy.CATEGORY) == set()

    @pytest.mark.asyncio
    async def test_unknown_term_write_raises(self, access):
        with pytest.raises(NotFoundError):
            await access.set_term_restricted("missing", True)
