"""Request orchestration between the HTTP routes and the upstream client.

Validates local input, calls the upstream client once per request and
applies local filtering. Failures are raised as
:class:`~backend.app.core.errors.DomainError`; status codes are decided
later by the error translator.
"""

import logging

from backend.app.core.errors import DomainError
from backend.app.models.posts import Comment, Post
from backend.app.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

BAD_REQUEST_TITLE = "Bad Request"
NOT_FOUND_TITLE = "Not Found"
BLANK_POST_ID_MESSAGE = "Post ID cannot be null or empty"
POST_NOT_FOUND_MESSAGE = "Post not found"


def is_blank(value: str | None) -> bool:
    """True for ``None``, empty, or whitespace-only strings."""
    return value is None or not value.strip()


def _require_post_id(post_id: str | None) -> str:
    if is_blank(post_id):
        raise DomainError(BLANK_POST_ID_MESSAGE, BAD_REQUEST_TITLE, 400)
    assert post_id is not None  # guaranteed by is_blank
    return post_id


class PostsService:
    """Posts and comments lookups on top of :class:`UpstreamClient`."""

    def __init__(
        self,
        client: UpstreamClient,
        *,
        empty_post_as_not_found: bool = True,
        comments_via_post_route: bool = False,
    ) -> None:
        self._client = client
        self._empty_post_as_not_found = empty_post_as_not_found
        self._comments_via_post_route = comments_via_post_route

    def list_posts(self, user_id: int | None = None) -> list[Post]:
        """All posts, optionally only those written by *user_id*."""
        posts = self._client.list_posts()
        if user_id is None:
            return posts
        return [post for post in posts if post.user_id == user_id]

    def get_post(self, post_id: str) -> Post:
        """A single post; blank ids are rejected before calling upstream."""
        post_id = _require_post_id(post_id)
        post = self._client.get_post(post_id)
        if post is None or (self._empty_post_as_not_found and post.is_zero_valued):
            raise DomainError(POST_NOT_FOUND_MESSAGE, NOT_FOUND_TITLE, 404)
        if post.is_zero_valued:
            logger.info("get_post: post_id=%s empty upstream body passed through", post_id)
        return post

    def get_comments(self, post_id: str) -> list[Comment]:
        """Comments on a post; blank ids are rejected before calling upstream."""
        post_id = _require_post_id(post_id)
        if self._comments_via_post_route:
            return self._client.get_comments_for_post(post_id)
        return self._client.get_comments_by_post_id(post_id)
