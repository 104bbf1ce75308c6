"""Qdrant client factory and health check for github-river."""

import logging

from qdrant_client import QdrantClient

from .config import RiverConfig, get_config

__all__ = [
    "check_qdrant_health",
    "get_qdrant_client",
]

logger = logging.getLogger("github_river.storage")


def get_qdrant_client(config: RiverConfig | None = None) -> QdrantClient:
    """Get a configured Qdrant client.

    Args:
        config: Optional RiverConfig instance. Uses get_config() if not provided.

    Returns:
        Configured QdrantClient instance.
    """
    config = config or get_config()
    api_key = config.qdrant_api_key.get_secret_value() if config.qdrant_api_key else None

    # Timeout prevents indefinite hangs if Qdrant is unresponsive
    return QdrantClient(
        host=config.qdrant_host,
        port=config.qdrant_port,
        api_key=api_key,
        https=config.qdrant_use_https,
        timeout=config.qdrant_timeout,
    )


def check_qdrant_health(client: QdrantClient) -> bool:
    """Check if Qdrant is healthy by listing collections.

    Returns:
        True if Qdrant responds successfully, False otherwise.
    """
    try:
        client.get_collections()
        return True
    except Exception as e:
        logger.warning(
            "qdrant_unhealthy",
            extra={
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        return False
