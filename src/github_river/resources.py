"""Resource kinds synced from GitHub and the endpoints that list them.

Each kind carries a fixed write policy:

- durable kinds (event, issue) overwrite documents with the same id and are
  never purged;
- volatile kinds (pull_request, milestone, label, collaborator) are purged at
  the start of every cycle and written create-only, because the listing
  endpoints only show current state and there is no deletion feed.
"""

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "DURABLE_KINDS",
    "ENDPOINTS",
    "VOLATILE_KINDS",
    "Endpoint",
    "ResourceKind",
]


class ResourceKind(str, Enum):
    """Remote entity categories, valued by their stored document type."""

    EVENT = "event"
    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    MILESTONE = "milestone"
    LABEL = "label"
    COLLABORATOR = "collaborator"

    @property
    def overwrite(self) -> bool:
        """True when a write replaces an existing document with the same id."""
        return self in DURABLE_KINDS

    @property
    def volatile(self) -> bool:
        """True when documents of this kind are purged every cycle."""
        return self in VOLATILE_KINDS


DURABLE_KINDS = frozenset({ResourceKind.EVENT, ResourceKind.ISSUE})

# Purge order
VOLATILE_KINDS = (
    ResourceKind.PULL_REQUEST,
    ResourceKind.MILESTONE,
    ResourceKind.LABEL,
    ResourceKind.COLLABORATOR,
)


@dataclass(frozen=True)
class Endpoint:
    """A list endpoint and the kind of element it returns.

    Attributes:
        template: Path relative to the API base URL, with {owner}, {repo}
            and {per_page} placeholders
        kind: Resource kind of every element in the response
    """

    template: str
    kind: ResourceKind


ENDPOINTS: tuple[Endpoint, ...] = (
    Endpoint("/repos/{owner}/{repo}/events?per_page={per_page}", ResourceKind.EVENT),
    Endpoint("/repos/{owner}/{repo}/issues?per_page={per_page}", ResourceKind.ISSUE),
    Endpoint(
        "/repos/{owner}/{repo}/issues?state=closed&per_page={per_page}",
        ResourceKind.ISSUE,
    ),
    # Open pull requests only; closed ones disappear and are dropped by the purge
    Endpoint("/repos/{owner}/{repo}/pulls?per_page={per_page}", ResourceKind.PULL_REQUEST),
    Endpoint(
        "/repos/{owner}/{repo}/milestones?per_page={per_page}", ResourceKind.MILESTONE
    ),
    Endpoint(
        "/repos/{owner}/{repo}/collaborators?per_page={per_page}",
        ResourceKind.COLLABORATOR,
    ),
    Endpoint("/repos/{owner}/{repo}/labels?per_page={per_page}", ResourceKind.LABEL),
)
