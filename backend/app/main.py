"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.api.dependencies import close_upstream_client, get_upstream_client
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.posts import router as posts_router
from backend.app.core.errors import register_exception_handlers
from backend.app.core.logging import EVENT_APP_START, EVENT_CONFIG_LOADED, setup_logging
from backend.app.core.settings import settings

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info(EVENT_APP_START)
    logger.info("%s: %s", EVENT_CONFIG_LOADED, settings.safe_dump())
    get_upstream_client()
    logger.info("Posts Gateway API ready")
    yield
    close_upstream_client()
    logger.info("Posts Gateway API shutting down")


app = FastAPI(
    title="Posts Gateway API",
    version="0.1.0",
    description="Read-only gateway for the upstream posts and comments API.",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(health_router, tags=["health"])
app.include_router(posts_router, tags=["posts"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
