"""Application settings loaded from environment / .env file.

Config precedence (highest to lowest):
    1. Environment variables
    2. ``.env`` file in project root
    3. Defaults defined in this module
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.app.services.upstream_client import UpstreamConfig

# Project root is three levels up from this file (backend/app/core/settings.py)
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_UPSTREAM_BASE_URL = "https://jsonplaceholder.typicode.com"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
    )

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Upstream API - override via UPSTREAM_BASE_URL env var
    upstream_base_url: str = DEFAULT_UPSTREAM_BASE_URL
    # None keeps the httpx transport default
    upstream_timeout_seconds: float | None = None
    upstream_log_bodies: bool = False

    # An empty successful GET /posts/{id} yields a zero-valued post upstream;
    # when True the gateway answers 404 instead of echoing it.
    empty_post_as_not_found: bool = True
    # Fetch comments via /posts/{id}/comments instead of /comments?postId=
    comments_via_post_route: bool = False

    @field_validator("upstream_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        """Reject blank or non-HTTP base URLs and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            msg = (
                f"Invalid upstream base URL '{v}'. "
                f"Set UPSTREAM_BASE_URL to an http(s) URL."
            )
            raise ValueError(msg)
        return v.rstrip("/")

    def upstream_config(self) -> UpstreamConfig:
        """Build the explicit client configuration from these settings."""
        return UpstreamConfig(
            base_url=self.upstream_base_url,
            timeout_seconds=self.upstream_timeout_seconds,
            log_bodies=self.upstream_log_bodies,
        )

    def safe_dump(self) -> dict[str, object]:
        """Return settings dict safe for logging."""
        return {
            "api_host": self.api_host,
            "api_port": self.api_port,
            "debug": self.debug,
            "log_level": self.log_level,
            "upstream_base_url": self.upstream_base_url,
            "upstream_timeout_seconds": self.upstream_timeout_seconds,
            "upstream_log_bodies": self.upstream_log_bodies,
            "empty_post_as_not_found": self.empty_post_as_not_found,
            "comments_via_post_route": self.comments_via_post_route,
        }


settings = Settings()
