"""github-river - periodic GitHub REST sync into a Qdrant document store.

Pulls events, issues, pull requests, milestones, labels and collaborators for
a configured owner and set of repositories, and keeps them searchable:
- Configuration via pydantic-settings (frozen RiverConfig)
- Paginated httpx fetcher following GitHub Link headers
- Purge-then-reinsert for kinds whose deletions cannot be observed
- Prometheus metrics and JSON structured logging

Python Version: 3.10+ required
"""

from .__version__ import __version__
from .config import Credentials, RiverConfig, get_config, reset_config
from .fetcher import FetchResult, PaginatedFetcher
from .links import PageLink, find_next_link, parse_link
from .logging_config import StructuredFormatter, configure_logging
from .mapper import MappedDocument, compute_content_hash, map_element
from .purger import PurgeResult, StaleKindPurger
from .qdrant_client import check_qdrant_health, get_qdrant_client
from .resources import ENDPOINTS, VOLATILE_KINDS, Endpoint, ResourceKind
from .river import GitHubRiver
from .scheduler import CycleResult, SyncScheduler
from .store import BulkResult, Document, DocumentStore
from .throttle import RequestThrottle

__all__ = [
    "BulkResult",
    "Credentials",
    "CycleResult",
    "Document",
    "DocumentStore",
    "ENDPOINTS",
    "Endpoint",
    "FetchResult",
    "GitHubRiver",
    "MappedDocument",
    "PageLink",
    "PaginatedFetcher",
    "PurgeResult",
    "RequestThrottle",
    "ResourceKind",
    "RiverConfig",
    "StaleKindPurger",
    "StructuredFormatter",
    "SyncScheduler",
    "VOLATILE_KINDS",
    "__version__",
    "check_qdrant_health",
    "compute_content_hash",
    "configure_logging",
    "find_next_link",
    "get_config",
    "get_qdrant_client",
    "map_element",
    "parse_link",
    "reset_config",
]
