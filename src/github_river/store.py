"""Qdrant-backed document store for synced GitHub resources.

Documents live in one payload-only collection per owner (no vectors). Each
document becomes a point whose id is a UUIDv5 of ``"{type}:{doc_id}"``,
because Qdrant only accepts unsigned integers or UUIDs as point ids and ids
from different kinds may collide. The raw JSON text is kept in ``body`` with a
whitespace-tokenized full-text index, so logins like ``user-name`` stay one
term; the parsed element is kept in ``data`` for payload filtering.

The repository is not part of the point id. Identical id-less volatile
elements (the same label in two repositories, say) are stored once, under the
repository that was fetched first.

All methods are blocking. Async callers run them through asyncio.to_thread.
"""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from qdrant_client import QdrantClient, models

from .resources import ResourceKind

__all__ = [
    "BulkResult",
    "DEFAULT_INDEX_SETTINGS",
    "Document",
    "DocumentStore",
    "IndexSettings",
    "point_id",
]

logger = logging.getLogger("github_river.storage")

# Fixed namespace so point ids are stable across processes and releases
POINT_NAMESPACE = uuid.UUID("6f1c9a52-3f0e-5d7b-9a4e-0c2b8e51d7a3")

KEYWORD_FIELDS = ("type", "doc_id", "owner", "repository", "event_type")


def point_id(doc_type: str, doc_id: str) -> str:
    """Qdrant point id for a (type, id) document identity."""
    return str(uuid.uuid5(POINT_NAMESPACE, f"{doc_type}:{doc_id}"))


@dataclass(frozen=True)
class IndexSettings:
    """Analysis settings applied when the collection is created."""

    text_field: str = "body"
    tokenizer: models.TokenizerType = models.TokenizerType.WHITESPACE
    lowercase: bool = True
    keyword_fields: tuple[str, ...] = KEYWORD_FIELDS


DEFAULT_INDEX_SETTINGS = IndexSettings()


@dataclass(frozen=True)
class Document:
    """One stored GitHub resource.

    Attributes:
        id: Natural GitHub id or content hash
        kind: Resource kind (also the stored type tag)
        owner: Repository owner
        repository: Source repository name
        body: Raw JSON text of the element
        data: Parsed element
        overwrite: Replace an existing document with the same id
    """

    id: str
    kind: ResourceKind
    owner: str
    repository: str
    body: str
    data: Any
    overwrite: bool

    @property
    def point_id(self) -> str:
        return point_id(self.kind.value, self.id)

    def to_payload(self, synced_at: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.kind.value,
            "doc_id": self.id,
            "owner": self.owner,
            "repository": self.repository,
            "body": self.body,
            "data": self.data,
            "last_synced": synced_at,
        }
        if self.kind is ResourceKind.EVENT and isinstance(self.data, dict):
            payload["event_type"] = self.data.get("type")
        return payload


@dataclass
class BulkResult:
    """Outcome of one batch write."""

    written: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def merge(self, other: "BulkResult") -> None:
        self.written += other.written
        self.skipped += other.skipped
        self.failed += other.failed
        self.errors.extend(other.errors)


class DocumentStore:
    """Document store operations over a single Qdrant collection.

    Attributes:
        client: QdrantClient instance
        index: Collection name (e.g., github-acme)
    """

    def __init__(self, client: QdrantClient, index: str) -> None:
        self.client = client
        self.index = index

    def create_index(self, settings: IndexSettings = DEFAULT_INDEX_SETTINGS) -> bool:
        """Create the collection and its payload indexes.

        Stored points of an existing collection are left untouched, but its
        payload indexes are (re)created, so a start that failed halfway is
        completed by the next one. Creating an existing index is a no-op.

        Returns:
            True if the collection was created, False if it already existed
        """
        created = self._create_collection()
        self._create_payload_indexes(settings)

        if created:
            logger.info("index_created", extra={"index": self.index})
        return created

    def _create_collection(self) -> bool:
        if self.client.collection_exists(self.index):
            logger.debug("index_exists", extra={"index": self.index})
            return False

        try:
            self.client.create_collection(collection_name=self.index, vectors_config={})
        except Exception as e:
            # Another process may have created it between the check and now
            if "already exists" in str(e).lower():
                logger.debug("index_exists", extra={"index": self.index})
                return False
            raise
        return True

    def _create_payload_indexes(self, settings: IndexSettings) -> None:
        for field_name in settings.keyword_fields:
            self.client.create_payload_index(
                collection_name=self.index,
                field_name=field_name,
                field_schema=models.PayloadSchemaType.KEYWORD,
            )
        self.client.create_payload_index(
            collection_name=self.index,
            field_name="last_synced",
            field_schema=models.PayloadSchemaType.DATETIME,
        )
        self.client.create_payload_index(
            collection_name=self.index,
            field_name=settings.text_field,
            field_schema=models.TextIndexParams(
                type="text",
                tokenizer=settings.tokenizer,
                lowercase=settings.lowercase,
            ),
        )

    def bulk_write(self, documents: Sequence[Document]) -> BulkResult:
        """Write a batch of documents in a single upsert.

        Overwrite documents replace whatever is stored under their id.
        Create-only documents are written only when no document with their
        id exists yet; the rest are counted as skipped. Duplicate ids inside
        the batch resolve the same way: last wins for overwrite documents,
        first wins for create-only ones.

        Raises:
            Exception: Whatever the Qdrant client raises; callers decide
                how to account for the failure.
        """
        result = BulkResult()
        if not documents:
            return result

        pending: dict[str, Document] = {}
        for doc in documents:
            pid = doc.point_id
            if pid in pending and not doc.overwrite:
                result.skipped += 1
                continue
            pending[pid] = doc

        create_only = [pid for pid, doc in pending.items() if not doc.overwrite]
        if create_only:
            existing = self.client.retrieve(
                collection_name=self.index,
                ids=create_only,
                with_payload=False,
                with_vectors=False,
            )
            for record in existing:
                if pending.pop(str(record.id), None) is not None:
                    result.skipped += 1

        if result.skipped:
            logger.warning(
                "create_only_conflicts",
                extra={"index": self.index, "skipped": result.skipped},
            )

        if not pending:
            return result

        synced_at = datetime.now(timezone.utc).isoformat()
        points = [
            models.PointStruct(id=pid, vector={}, payload=doc.to_payload(synced_at))
            for pid, doc in pending.items()
        ]
        self.client.upsert(collection_name=self.index, points=points, wait=True)
        result.written = len(points)
        return result

    def delete_by_type(self, doc_type: str) -> int:
        """Delete every document whose type equals doc_type.

        Returns:
            Number of documents matched before the delete
        """
        type_filter = self._type_filter(doc_type)
        matched = self.client.count(
            collection_name=self.index, count_filter=type_filter, exact=True
        ).count
        self.client.delete(
            collection_name=self.index,
            points_selector=models.FilterSelector(filter=type_filter),
            wait=True,
        )
        return matched

    def count(self, doc_type: str | None = None) -> int:
        """Count stored documents, optionally restricted to one type."""
        count_filter = self._type_filter(doc_type) if doc_type else None
        return self.client.count(
            collection_name=self.index, count_filter=count_filter, exact=True
        ).count

    @staticmethod
    def _type_filter(doc_type: str) -> models.Filter:
        return models.Filter(
            must=[
                models.FieldCondition(key="type", match=models.MatchValue(value=doc_type))
            ]
        )
