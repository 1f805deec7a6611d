"""Tests for the upstream client dependency and its lifecycle."""

import threading
import time

import pytest
from backend.app.api import dependencies
from backend.app.main import app
from backend.app.services.upstream_client import UpstreamClient
from fastapi.testclient import TestClient


class _SlowClient:
    """Counts constructions and widens the window for concurrent creation."""

    created: list["_SlowClient"] = []

    def __init__(self, config: object) -> None:
        time.sleep(0.05)
        self.closed = False
        _SlowClient.created.append(self)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fresh_client_slot(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(dependencies, "_upstream_client", None)


class TestGetUpstreamClient:
    def test_concurrent_first_calls_share_one_client(
        self, monkeypatch: pytest.MonkeyPatch, fresh_client_slot: None,
    ) -> None:
        _SlowClient.created = []
        monkeypatch.setattr(dependencies, "UpstreamClient", _SlowClient)
        barrier = threading.Barrier(8)
        results: list[object] = []

        def worker() -> None:
            barrier.wait()
            results.append(dependencies.get_upstream_client())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(_SlowClient.created) == 1
        assert len(results) == 8
        assert all(r is _SlowClient.created[0] for r in results)

    def test_close_releases_client(
        self, monkeypatch: pytest.MonkeyPatch, fresh_client_slot: None,
    ) -> None:
        _SlowClient.created = []
        monkeypatch.setattr(dependencies, "UpstreamClient", _SlowClient)
        client = dependencies.get_upstream_client()
        dependencies.close_upstream_client()
        assert client.closed is True  # type: ignore[attr-defined]
        assert dependencies._upstream_client is None


class TestLifespan:
    def test_client_created_at_startup_and_closed_at_shutdown(
        self, fresh_client_slot: None,
    ) -> None:
        with TestClient(app) as client:
            assert isinstance(dependencies._upstream_client, UpstreamClient)
            assert client.get("/health").status_code == 200
        assert dependencies._upstream_client is None
