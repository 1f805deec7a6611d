"""Tests for unified settings management.

Covers:
  - Explicit values override defaults
  - Safe defaults when no env / .env
  - Invalid upstream base URL → controlled error
  - Settings → UpstreamConfig
  - safe_dump contents
"""

import pytest
from backend.app.core.settings import DEFAULT_UPSTREAM_BASE_URL, Settings
from backend.app.services.upstream_client import UpstreamConfig

# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


class TestOverrides:
    def test_override_base_url(self) -> None:
        s = Settings(
            upstream_base_url="http://localhost:9000",
            _env_file=None,  # type: ignore[call-arg]
        )
        assert s.upstream_base_url == "http://localhost:9000"

    def test_override_log_level(self) -> None:
        s = Settings(
            log_level="DEBUG",
            _env_file=None,  # type: ignore[call-arg]
        )
        assert s.log_level == "DEBUG"

    def test_override_api_host(self) -> None:
        s = Settings(
            api_host="0.0.0.0",
            api_port=9000,
            _env_file=None,  # type: ignore[call-arg]
        )
        assert s.api_host == "0.0.0.0"
        assert s.api_port == 9000

    def test_env_var_overrides_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMPTY_POST_AS_NOT_FOUND", "false")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.empty_post_as_not_found is False


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_default_base_url(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.upstream_base_url == DEFAULT_UPSTREAM_BASE_URL

    def test_default_api_host(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.api_host == "127.0.0.1"
        assert s.api_port == 8000

    def test_default_timeout_is_transport_default(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.upstream_timeout_seconds is None

    def test_default_flags(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.debug is False
        assert s.upstream_log_bodies is False
        assert s.empty_post_as_not_found is True
        assert s.comments_via_post_route is False


# ---------------------------------------------------------------------------
# Base URL validation
# ---------------------------------------------------------------------------


class TestBaseUrlValidation:
    def test_trailing_slash_removed(self) -> None:
        s = Settings(
            upstream_base_url=" https://example.test/api/ ",
            _env_file=None,  # type: ignore[call-arg]
        )
        assert s.upstream_base_url == "https://example.test/api"

    @pytest.mark.parametrize("url", ["", "   ", "ftp://example.test", "example.test"])
    def test_invalid_url_raises_with_guidance(self, url: str) -> None:
        with pytest.raises(Exception, match="UPSTREAM_BASE_URL"):
            Settings(
                upstream_base_url=url,
                _env_file=None,  # type: ignore[call-arg]
            )


# ---------------------------------------------------------------------------
# Upstream config
# ---------------------------------------------------------------------------


class TestUpstreamConfig:
    def test_built_from_settings(self) -> None:
        s = Settings(
            upstream_base_url="http://localhost:9000",
            upstream_timeout_seconds=2.5,
            upstream_log_bodies=True,
            _env_file=None,  # type: ignore[call-arg]
        )
        config = s.upstream_config()
        assert isinstance(config, UpstreamConfig)
        assert config.base_url == "http://localhost:9000"
        assert config.timeout_seconds == 2.5
        assert config.log_bodies is True
        assert config.headers["Accept"] == "application/json"


# ---------------------------------------------------------------------------
# safe_dump and the shared singleton
# ---------------------------------------------------------------------------


class TestSafeDump:
    def test_includes_fields(self) -> None:
        dump = Settings(_env_file=None).safe_dump()  # type: ignore[call-arg]
        for key in ("api_host", "api_port", "log_level", "upstream_base_url",
                    "empty_post_as_not_found", "comments_via_post_route"):
            assert key in dump


class TestSharedSettings:
    def test_singleton_settings_importable(self) -> None:
        from backend.app.core.settings import settings

        assert isinstance(settings, Settings)

    def test_settings_values_consistent(self) -> None:
        from backend.app.core import settings as mod1
        from backend.app.core import settings as mod2

        assert mod1.settings is mod2.settings
