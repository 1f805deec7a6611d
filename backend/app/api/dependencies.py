"""FastAPI dependencies wiring settings, the upstream client and the service."""

import logging
import threading

from fastapi import Depends

from backend.app.core.settings import settings
from backend.app.services.posts_service import PostsService
from backend.app.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

_upstream_client: UpstreamClient | None = None
_upstream_client_lock = threading.Lock()


def get_upstream_client() -> UpstreamClient:
    """Return the process-wide client, creating it on first use.

    The app lifespan creates it at startup; creation here covers callers
    that run without a lifespan. Sync dependencies run in the threadpool,
    so creation is guarded by a lock. The underlying ``httpx.Client``
    pools connections across requests.
    """
    global _upstream_client
    client = _upstream_client
    if client is not None:
        return client
    with _upstream_client_lock:
        if _upstream_client is None:
            _upstream_client = UpstreamClient(settings.upstream_config())
            logger.info("upstream_client_created: base_url=%s", settings.upstream_base_url)
        return _upstream_client


def close_upstream_client() -> None:
    global _upstream_client
    with _upstream_client_lock:
        if _upstream_client is not None:
            _upstream_client.close()
            _upstream_client = None


def get_posts_service(
    client: UpstreamClient = Depends(get_upstream_client),
) -> PostsService:
    return PostsService(
        client,
        empty_post_as_not_found=settings.empty_post_as_not_found,
        comments_via_post_route=settings.comments_via_post_route,
    )
