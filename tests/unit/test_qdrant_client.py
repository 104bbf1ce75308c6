"""Tests for the Qdrant client factory and health check."""

from unittest.mock import MagicMock, patch

from github_river.config import RiverConfig
from github_river.qdrant_client import check_qdrant_health, get_qdrant_client
from mocks.qdrant_mock import MockQdrantClient


def test_client_built_from_config():
    config = RiverConfig(
        _env_file=None,
        qdrant_host="qdrant.internal",
        qdrant_port=16333,
        qdrant_api_key="key-123",
        qdrant_use_https=True,
        qdrant_timeout=5,
    )
    with patch("github_river.qdrant_client.QdrantClient") as client_cls:
        get_qdrant_client(config)

    client_cls.assert_called_once_with(
        host="qdrant.internal",
        port=16333,
        api_key="key-123",
        https=True,
        timeout=5,
    )


def test_no_api_key():
    with patch("github_river.qdrant_client.QdrantClient") as client_cls:
        get_qdrant_client(RiverConfig(_env_file=None))
    assert client_cls.call_args.kwargs["api_key"] is None


def test_health_ok():
    assert check_qdrant_health(MockQdrantClient()) is True


def test_health_failure():
    client = MagicMock()
    client.get_collections.side_effect = ConnectionError("refused")
    assert check_qdrant_health(client) is False
