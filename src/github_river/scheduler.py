"""Sync scheduler: repeated full resync cycles.

One cycle:
1. Purge every volatile kind (pull requests, milestones, labels, collaborators)
2. For each repository, fetch every endpoint in order, pausing after each call
3. Sleep for the configured interval

The stop flag is checked once per cycle, at the top of the loop. A cycle that
has started always runs to completion. Nothing is parallelized.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from . import metrics
from .fetcher import FetchResult, PaginatedFetcher
from .purger import PurgeResult, StaleKindPurger
from .resources import ENDPOINTS, Endpoint
from .throttle import RequestThrottle

__all__ = ["CycleResult", "SyncScheduler"]

logger = logging.getLogger("github_river.scheduler")


@dataclass
class CycleResult:
    """Counts for one full sync cycle.

    Failures are counted, not raised: a failed fetch, write or purge never
    aborts the remaining work of the cycle.
    """

    fetches: int = 0
    pages: int = 0
    written: int = 0
    skipped: int = 0
    not_found: int = 0
    fetch_errors: int = 0
    write_failures: int = 0
    purged: int = 0
    purge_failures: int = 0
    duration_seconds: float = 0.0
    written_by_kind: dict[str, int] = field(default_factory=dict)
    error_details: list[str] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return self.fetch_errors + self.write_failures + self.purge_failures

    def record_purge(self, purge: PurgeResult) -> None:
        if purge.ok:
            self.purged += purge.deleted
        else:
            self.purge_failures += 1
            self.error_details.append(f"purge {purge.kind.value}: {purge.error}")

    def record_fetch(self, fetched: FetchResult) -> None:
        kind = fetched.kind.value
        self.fetches += 1
        self.pages += fetched.pages
        self.written += fetched.written
        self.skipped += fetched.skipped
        self.write_failures += fetched.failed
        self.written_by_kind[kind] = self.written_by_kind.get(kind, 0) + fetched.written
        self.error_details.extend(fetched.writes.errors)
        if fetched.not_found:
            self.not_found += 1
        if not fetched.ok:
            self.fetch_errors += 1
            self.error_details.append(f"fetch {kind} {fetched.repository}: {fetched.error}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for metrics and logging."""
        return {
            "fetches": self.fetches,
            "pages": self.pages,
            "written": self.written,
            "skipped": self.skipped,
            "not_found": self.not_found,
            "fetch_errors": self.fetch_errors,
            "write_failures": self.write_failures,
            "purged": self.purged,
            "purge_failures": self.purge_failures,
            "written_by_kind": dict(self.written_by_kind),
            "duration_seconds": round(self.duration_seconds, 2),
        }


class SyncScheduler:
    """Drives purge-then-fetch cycles until stopped.

    Attributes:
        fetcher: PaginatedFetcher used for every endpoint call
        purger: StaleKindPurger run at the start of every cycle
        throttle: Pause applied after every endpoint call
        repositories: Repository names, processed in order
        interval: Seconds to wait between cycles
        endpoints: Endpoints fetched for every repository, in order
    """

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        purger: StaleKindPurger,
        throttle: RequestThrottle,
        repositories: Sequence[str],
        interval: float,
        endpoints: Sequence[Endpoint] = ENDPOINTS,
        on_cycle_complete: Callable[[CycleResult], None] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.purger = purger
        self.throttle = throttle
        self.repositories = tuple(repositories)
        self.interval = interval
        self.endpoints = tuple(endpoints)
        self._on_cycle_complete = on_cycle_complete

    async def run_cycle(self) -> CycleResult:
        """Run one purge-then-fetch cycle over every repository."""
        start = time.monotonic()
        result = CycleResult()
        logger.info(
            "cycle_started",
            extra={"repositories": list(self.repositories), "endpoints": len(self.endpoints)},
        )

        for purge in await self.purger.purge_volatile():
            result.record_purge(purge)

        for repository in self.repositories:
            for endpoint in self.endpoints:
                try:
                    fetched = await self.fetcher.fetch(
                        endpoint.template, endpoint.kind, repository
                    )
                except Exception as e:
                    # Fail-open per call: the next endpoint still runs
                    logger.error(
                        "fetch_crashed",
                        extra={
                            "kind": endpoint.kind.value,
                            "repository": repository,
                            "error": str(e),
                            "error_type": type(e).__name__,
                        },
                    )
                    result.fetches += 1
                    result.fetch_errors += 1
                    result.error_details.append(
                        f"fetch {endpoint.kind.value} {repository}: {e}"
                    )
                else:
                    result.record_fetch(fetched)
                await self.throttle.pause()

        result.duration_seconds = time.monotonic() - start
        metrics.cycles_total.inc()
        metrics.cycle_duration_seconds.observe(result.duration_seconds)
        metrics.last_cycle_timestamp.set_to_current_time()

        logger.info("cycle_complete", extra=result.to_dict())
        return result

    async def run_forever(self, stop_event: threading.Event) -> None:
        """Run cycles until stop_event is set.

        The inter-cycle wait returns early when the flag is set; the flag is
        then seen at the top of the loop.
        """
        cycles = 0
        while not stop_event.is_set():
            result = await self.run_cycle()
            cycles += 1
            self._notify(result)
            await asyncio.to_thread(stop_event.wait, self.interval)

        logger.info("scheduler_stopped", extra={"cycles": cycles})

    def _notify(self, result: CycleResult) -> None:
        if self._on_cycle_complete is None:
            return
        try:
            self._on_cycle_complete(result)
        except Exception as e:
            logger.warning(
                "cycle_listener_failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
