"""Per-page batch writer.

A BulkWriter lives for exactly one fetched page: elements are mapped and
buffered with add(), then flush() submits them to the document store in one
call and closes the batch before the fetcher requests the next page.
"""

import asyncio
import logging
from typing import Any

from . import metrics
from .mapper import canonical_json, map_element
from .resources import ResourceKind
from .store import BulkResult, Document, DocumentStore

__all__ = ["BulkWriter"]

logger = logging.getLogger("github_river.bulk")


class BulkWriter:
    """Collect the documents of one page and write them as a single batch."""

    def __init__(
        self,
        store: DocumentStore,
        kind: ResourceKind,
        repository: str,
        owner: str,
    ) -> None:
        self._store = store
        self._kind = kind
        self._repository = repository
        self._owner = owner
        self._documents: list[Document] = []
        self._closed = False

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, element: Any) -> Document:
        """Map one raw element and buffer it for the next flush."""
        if self._closed:
            raise RuntimeError("BulkWriter already flushed")

        mapped = map_element(self._kind, element)
        document = Document(
            id=mapped.id,
            kind=self._kind,
            owner=self._owner,
            repository=self._repository,
            body=canonical_json(element),
            data=element,
            overwrite=mapped.overwrite,
        )
        self._documents.append(document)
        return document

    async def flush(self) -> BulkResult:
        """Submit the buffered documents and close the batch.

        A store failure never propagates: every document of the batch is
        counted as failed and the error is logged.
        """
        if self._closed:
            raise RuntimeError("BulkWriter already flushed")
        self._closed = True

        documents, self._documents = self._documents, []
        if not documents:
            return BulkResult()

        kind = self._kind.value
        try:
            result = await asyncio.to_thread(self._store.bulk_write, documents)
        except Exception as e:
            logger.error(
                "bulk_write_failed",
                extra={
                    "kind": kind,
                    "repository": self._repository,
                    "documents": len(documents),
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            metrics.documents_total.labels(kind=kind, status="failed").inc(len(documents))
            return BulkResult(failed=len(documents), errors=[f"bulk_write {kind}: {e}"])

        metrics.documents_total.labels(kind=kind, status="written").inc(result.written)
        if result.skipped:
            metrics.documents_total.labels(kind=kind, status="skipped").inc(result.skipped)
        logger.debug(
            "bulk_write_complete",
            extra={
                "kind": kind,
                "repository": self._repository,
                "written": result.written,
                "skipped": result.skipped,
            },
        )
        return result
