"""Shared pytest fixtures for github-river tests.

Fixture Organization:
    - Config fixtures: isolated RiverConfig instances (no .env, no cache leaks)
    - Store fixtures: DocumentStore over the in-memory MockQdrantClient
    - Sleep fixtures: recording sleeps so throttle and failure pauses never block
"""

import pytest

from github_river.config import RiverConfig, reset_config
from github_river.store import DocumentStore
from mocks.qdrant_mock import MockQdrantClient

INDEX = "github-acme"


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Keep host GITHUB_*/QDRANT_* variables and the config cache out of tests."""
    for name in (
        "GITHUB_OWNER",
        "GITHUB_REPOSITORIES",
        "GITHUB_USERNAME",
        "GITHUB_PASSWORD",
        "GITHUB_INDEX_NAME",
        "GITHUB_API_URL",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def river_config():
    """Config for owner acme with two repositories and no pauses."""
    return RiverConfig(
        _env_file=None,
        github_owner="acme",
        github_repositories=["widgets", "gadgets"],
        github_request_delay_ms=0,
        github_failure_pause_ms=0,
        github_sync_interval=1,
    )


@pytest.fixture
def qdrant():
    """Fresh in-memory Qdrant mock."""
    return MockQdrantClient()


@pytest.fixture
def store(qdrant):
    """DocumentStore over an already-created collection."""
    document_store = DocumentStore(qdrant, INDEX)
    document_store.create_index()
    return document_store


class RecordingSleep:
    """Awaitable sleep that records durations instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
