"""HTTP client for the upstream posts/comments API.

All four read operations share one ``httpx.Client`` built from an explicit
:class:`UpstreamConfig`. Upstream error responses and transport failures are
wrapped into :class:`~backend.app.core.errors.DomainError` here, so raw
``httpx`` exceptions never leave this module:

- 404 on a single resource → ``"Resource Not Found"`` / 404
- any other 4xx/5xx       → ``"API Error"`` / upstream status
- connect/read failures   → ``"API Error"`` / 502
- unreadable 2xx bodies   → ``"API Error"`` / 502

Redirects are followed, so only the final response is mapped.

Successful responses with an empty body become an empty list, or a
zero-valued :class:`Post` for the single-post lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter

from backend.app.core.errors import DomainError, upstream_message
from backend.app.core.logging import (
    EVENT_UPSTREAM_CALL_FAILURE,
    EVENT_UPSTREAM_REQUEST,
    EVENT_UPSTREAM_RESPONSE,
    log_event,
)
from backend.app.models.posts import Comment, Post

logger = logging.getLogger(__name__)

RESOURCE_NOT_FOUND = "Resource Not Found"
API_ERROR = "API Error"
ERROR_FETCHING_POST = "Error fetching post: "
ERROR_FETCHING_COMMENTS = "Error fetching comments for post: "
CANNOT_FIND_POST = "Cannot find a Post with id "
CANNOT_FIND_COMMENTS = "Cannot find comments for post with id "

_POST_LIST = TypeAdapter(list[Post])
_COMMENT_LIST = TypeAdapter(list[Comment])


@dataclass(frozen=True)
class UpstreamConfig:
    """Everything the client needs to talk to the upstream API."""

    base_url: str = "https://jsonplaceholder.typicode.com"
    timeout_seconds: float | None = None
    log_bodies: bool = False
    headers: Mapping[str, str] = field(
        default_factory=lambda: {"Accept": "application/json"},
    )


class UpstreamClient:
    """Read-only client for ``/posts`` and ``/comments``.

    *transport* lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: UpstreamConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        client_kwargs: dict[str, Any] = {}
        if config.timeout_seconds is not None:
            client_kwargs["timeout"] = httpx.Timeout(config.timeout_seconds)
        self._http = httpx.Client(
            base_url=config.base_url,
            headers=dict(config.headers),
            transport=transport,
            follow_redirects=True,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
            **client_kwargs,
        )

    @property
    def config(self) -> UpstreamConfig:
        return self._config

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> UpstreamClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list_posts(self) -> list[Post]:
        """GET ``/posts``; every upstream error maps to ``API Error``."""
        try:
            payload = self._get_json("/posts")
            return _POST_LIST.validate_python(payload or [])
        except httpx.HTTPStatusError as exc:
            raise self._api_error(ERROR_FETCHING_POST + upstream_message(exc), exc) from exc
        except httpx.RequestError as exc:
            raise self._unreachable(ERROR_FETCHING_POST, exc) from exc
        except ValueError as exc:
            raise self._malformed(ERROR_FETCHING_POST, exc) from exc

    def get_post(self, post_id: str) -> Post:
        """GET ``/posts/{id}``. An empty body yields a zero-valued post."""
        try:
            payload = self._get_json(f"/posts/{_segment(post_id)}")
            if not payload:
                return Post()
            return Post.model_validate(payload)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                raise self._not_found(CANNOT_FIND_POST + post_id, exc) from exc
            raise self._api_error(ERROR_FETCHING_POST + upstream_message(exc), exc) from exc
        except httpx.RequestError as exc:
            raise self._unreachable(ERROR_FETCHING_POST, exc) from exc
        except ValueError as exc:
            raise self._malformed(ERROR_FETCHING_POST, exc) from exc

    def get_comments_by_post_id(self, post_id: str) -> list[Comment]:
        """GET ``/comments?postId={id}``."""
        try:
            payload = self._get_json("/comments", params={"postId": post_id})
            return _COMMENT_LIST.validate_python(payload or [])
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                raise self._not_found(CANNOT_FIND_COMMENTS + post_id, exc) from exc
            raise self._api_error(
                f"{ERROR_FETCHING_COMMENTS}{post_id}: {upstream_message(exc)}", exc,
            ) from exc
        except httpx.RequestError as exc:
            raise self._unreachable(f"{ERROR_FETCHING_COMMENTS}{post_id}: ", exc) from exc
        except ValueError as exc:
            raise self._malformed(f"{ERROR_FETCHING_COMMENTS}{post_id}: ", exc) from exc

    def get_comments_for_post(self, post_id: str) -> list[Comment]:
        """GET ``/posts/{id}/comments``, the nested route for the same data."""
        try:
            payload = self._get_json(f"/posts/{_segment(post_id)}/comments")
            return _COMMENT_LIST.validate_python(payload or [])
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == httpx.codes.NOT_FOUND:
                raise self._not_found(CANNOT_FIND_COMMENTS + post_id, exc) from exc
            raise self._api_error(
                f"{ERROR_FETCHING_COMMENTS}{post_id}: {upstream_message(exc)}", exc,
            ) from exc
        except httpx.RequestError as exc:
            raise self._unreachable(f"{ERROR_FETCHING_COMMENTS}{post_id}: ", exc) from exc
        except ValueError as exc:
            raise self._malformed(f"{ERROR_FETCHING_COMMENTS}{post_id}: ", exc) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = self._http.get(path, params=params)
        response.raise_for_status()
        if not response.content.strip():
            return None
        return response.json()

    def _not_found(self, detail: str, exc: httpx.HTTPStatusError) -> DomainError:
        return self._wrap(detail, RESOURCE_NOT_FOUND, httpx.codes.NOT_FOUND, exc)

    def _api_error(self, detail: str, exc: httpx.HTTPStatusError) -> DomainError:
        return self._wrap(detail, API_ERROR, exc.response.status_code, exc)

    def _unreachable(self, prefix: str, exc: httpx.RequestError) -> DomainError:
        reason = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
        return self._wrap(prefix + reason, API_ERROR, httpx.codes.BAD_GATEWAY, exc)

    def _malformed(self, prefix: str, exc: ValueError) -> DomainError:
        # JSON decode or pydantic validation error; full text goes to the log only
        log_event(
            logger, "warning", EVENT_UPSTREAM_CALL_FAILURE,
            title=API_ERROR,
            status_code=int(httpx.codes.BAD_GATEWAY),
            error=type(exc).__name__,
            detail=exc,
        )
        detail = f"{prefix}invalid response body ({type(exc).__name__})"
        return DomainError(detail, API_ERROR, int(httpx.codes.BAD_GATEWAY), cause=exc)

    def _wrap(
        self, detail: str, title: str, status_code: int, exc: httpx.HTTPError,
    ) -> DomainError:
        log_event(
            logger, "warning", EVENT_UPSTREAM_CALL_FAILURE,
            title=title,
            status_code=int(status_code),
            error=type(exc).__name__,
            detail=detail,
        )
        return DomainError(detail, title, int(status_code), cause=exc)

    def _log_request(self, request: httpx.Request) -> None:
        log_event(
            logger, "info", EVENT_UPSTREAM_REQUEST,
            method=request.method,
            url=request.url,
        )

    def _log_response(self, response: httpx.Response) -> None:
        body = response.read()
        fields: dict[str, object] = {
            "status": response.status_code,
            "url": response.request.url,
            "body_length": len(body),
        }
        if self._config.log_bodies:
            fields["body"] = body.decode("utf-8", errors="replace")
        log_event(logger, "info", EVENT_UPSTREAM_RESPONSE, **fields)


def _segment(value: str) -> str:
    """Quote *value* so it stays a single path segment."""
    return quote(value, safe="")
