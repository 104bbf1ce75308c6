"""GitHub river: lifecycle surface for the host process.

start() provisions the collection and launches the sync worker on a
single-thread executor; the worker runs its own asyncio loop over the
SyncScheduler. stop() sets a thread-safe flag the scheduler checks between
cycles, so the in-flight cycle always finishes.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import httpx

from .config import RiverConfig, get_config
from .fetcher import PaginatedFetcher
from .purger import StaleKindPurger
from .qdrant_client import get_qdrant_client
from .scheduler import CycleResult, SyncScheduler
from .store import DocumentStore
from .throttle import RequestThrottle

__all__ = ["GitHubRiver"]

logger = logging.getLogger("github_river.river")


class GitHubRiver:
    """Periodic GitHub to Qdrant sync for one owner and its repositories.

    Example:
        >>> river = GitHubRiver(get_config())
        >>> river.start()
        >>> ...
        >>> river.stop()
        >>> river.join(timeout=60)
    """

    def __init__(
        self,
        config: RiverConfig | None = None,
        store: DocumentStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_cycle_complete: Callable[[CycleResult], None] | None = None,
    ) -> None:
        """Initialize the river.

        Args:
            config: Frozen configuration. Uses get_config() if None.
            store: Document store. Built from config if None.
            transport: Optional httpx transport for the GitHub client
            on_cycle_complete: Called with each CycleResult from the worker thread

        Raises:
            ValueError: If owner or repositories are not configured
        """
        self.config = config or get_config()
        if not self.config.github_owner or not self.config.github_repositories:
            raise ValueError("Need river settings - GITHUB_OWNER and GITHUB_REPOSITORIES.")

        self.owner = self.config.github_owner
        self.repositories = tuple(self.config.github_repositories)
        self.store = store or DocumentStore(
            get_qdrant_client(self.config), self.config.index_name
        )
        self._transport = transport
        self._on_cycle_complete = on_cycle_complete
        self._stop_event = threading.Event()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future | None = None

        logger.info(
            "river_created",
            extra={
                "owner": self.owner,
                "repositories": list(self.repositories),
                "index": self.store.index,
                "authenticated": self.config.credentials is not None,
            },
        )

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def start(self) -> None:
        """Provision the index, then launch the sync worker.

        Raises:
            RuntimeError: If the river was already started
        """
        if self._future is not None:
            raise RuntimeError("GitHub river already started")

        try:
            self.store.create_index()
        except Exception as e:
            # Worker still starts; writes are counted as failed until Qdrant is back
            logger.error(
                "index_creation_failed",
                extra={
                    "index": self.store.index,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="github-river")
        self._future = self._executor.submit(self._run_worker)
        logger.info("river_started", extra={"index": self.store.index})

    def stop(self) -> None:
        """Ask the worker to end after its current cycle."""
        self._stop_event.set()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        logger.info("river_stop_requested")

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to end.

        Returns:
            True if the worker has ended (or never started)
        """
        if self._future is None:
            return True
        try:
            self._future.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        except Exception:
            # Already logged by the worker
            pass
        return True

    def _run_worker(self) -> None:
        try:
            asyncio.run(self._run())
        except Exception as e:
            logger.error(
                "river_worker_crashed",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            raise

    async def _run(self) -> None:
        config = self.config
        async with PaginatedFetcher(
            owner=self.owner,
            store=self.store,
            credentials=config.credentials,
            base_url=config.github_api_url,
            per_page=config.github_per_page,
            read_timeout=config.github_request_timeout,
            failure_pause=config.failure_pause_seconds,
            transport=self._transport,
        ) as fetcher:
            scheduler = SyncScheduler(
                fetcher=fetcher,
                purger=StaleKindPurger(self.store),
                throttle=RequestThrottle(config.request_delay_seconds),
                repositories=self.repositories,
                interval=config.github_sync_interval,
                on_cycle_complete=self._on_cycle_complete,
            )
            await scheduler.run_forever(self._stop_event)
