"""Document identity for raw GitHub elements.

Elements with a natural ``id`` keep it. Elements without one (labels on older
API versions, for instance) are content-addressed: the id is the MD5 of the
element's canonical JSON text, so a changed property yields a new document.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from .resources import ResourceKind

__all__ = ["MappedDocument", "canonical_json", "compute_content_hash", "map_element"]


@dataclass(frozen=True)
class MappedDocument:
    """Identity and write policy derived for one element."""

    id: str
    doc_type: str
    overwrite: bool


def canonical_json(element: Any) -> str:
    """Serialize an element with sorted keys and no insignificant whitespace."""
    return json.dumps(element, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_content_hash(element: Any) -> str:
    """MD5 hex digest (32 chars) of the element's canonical JSON."""
    return hashlib.md5(
        canonical_json(element).encode("utf-8"), usedforsecurity=False
    ).hexdigest()


def _natural_id(element: Any) -> str | None:
    if not isinstance(element, dict):
        return None
    value = element.get("id")
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def map_element(kind: ResourceKind, element: Any) -> MappedDocument:
    """Derive the document id, type and overwrite flag for one element.

    Pure: no network or storage access.
    """
    doc_id = _natural_id(element) or compute_content_hash(element)
    return MappedDocument(id=doc_id, doc_type=kind.value, overwrite=kind.overwrite)
