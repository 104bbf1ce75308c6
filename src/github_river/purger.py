"""Purge of volatile resource kinds.

The GitHub listing endpoints for pull requests, milestones, labels and
collaborators only show current state, and there is no deletion feed. The only
way to reflect a remote deletion is to wipe the kind and reinsert everything
the next fetch returns.
"""

import asyncio
import logging
from dataclasses import dataclass

from . import metrics
from .resources import VOLATILE_KINDS, ResourceKind
from .store import DocumentStore

__all__ = ["PurgeResult", "StaleKindPurger"]

logger = logging.getLogger("github_river.purger")


@dataclass
class PurgeResult:
    """Outcome of purging one kind."""

    kind: ResourceKind
    deleted: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StaleKindPurger:
    """Deletes every stored document of a volatile kind."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def purge(self, kind: ResourceKind) -> PurgeResult:
        """Delete all documents whose type matches kind.

        Store failures are logged and returned in PurgeResult.error.

        Raises:
            ValueError: If kind is durable (events and issues are never purged)
        """
        if not kind.volatile:
            raise ValueError(f"Refusing to purge durable kind: {kind.value}")

        try:
            deleted = await asyncio.to_thread(self._store.delete_by_type, kind.value)
        except Exception as e:
            logger.error(
                "purge_failed",
                extra={
                    "kind": kind.value,
                    "index": self._store.index,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            metrics.purges_total.labels(kind=kind.value, status="failed").inc()
            return PurgeResult(kind=kind, error=str(e))

        metrics.purges_total.labels(kind=kind.value, status="success").inc()
        logger.info(
            "purge_complete",
            extra={"kind": kind.value, "index": self._store.index, "deleted": deleted},
        )
        return PurgeResult(kind=kind, deleted=deleted)

    async def purge_volatile(self) -> list[PurgeResult]:
        """Purge every volatile kind, one after another."""
        return [await self.purge(kind) for kind in VOLATILE_KINDS]
