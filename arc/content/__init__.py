"""
Content module - repository and queries over posts, pages, terms and comments.
"""

from arc.content.repository import (
    ContentRepository,
    MetaSpec,
    NotFoundError,
    POST_OBJECT,
    TERM_OBJECT,
)
from arc.content.query import (
    PostQuery,
    TermQuery,
    CommentQuery,
    QueryResult,
    run_post_query,
    run_term_query,
    run_comment_query,
)

__all__ = [
    "ContentRepository",
    "MetaSpec",
    "NotFoundError",
    "POST_OBJECT",
    "TERM_OBJECT",
    "PostQuery",
    "TermQuery",
    "CommentQuery",
    "QueryResult",
    "run_post_query",
    "run_term_query",
    "run_comment_query",
]
