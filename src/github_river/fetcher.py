"""Paginated GitHub REST fetcher.

Fetches one list endpoint for one repository, page by page, following the
rel="next" entries of the Link header. Every page is mapped and written to the
document store as one batch before the next page is requested.

Failure handling:
- 404: the resource does not exist for this repository; zero documents, no error
- transport errors, rate limiting (403/429) and other non-2xx responses: the
  fetch is abandoned (pages already written stay written), a short pause
  follows, and the next scheduled cycle retries
- a body that is not a JSON array: the fetch is abandoned

Reference: https://docs.github.com/en/rest/using-the-rest-api/using-pagination-in-the-rest-api
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from . import metrics
from .__version__ import __version__
from .bulk import BulkWriter
from .config import DEFAULT_API_URL, Credentials
from .links import find_next_link
from .resources import ResourceKind
from .store import BulkResult, DocumentStore

__all__ = ["FetchResult", "PaginatedFetcher"]

logger = logging.getLogger("github_river.fetcher")


@dataclass
class FetchResult:
    """Outcome of one paginated fetch."""

    kind: ResourceKind
    repository: str
    pages: int = 0
    documents: int = 0
    writes: BulkResult = field(default_factory=BulkResult)
    not_found: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def written(self) -> int:
        return self.writes.written

    @property
    def skipped(self) -> int:
        return self.writes.skipped

    @property
    def failed(self) -> int:
        return self.writes.failed


class PaginatedFetcher:
    """Fetches GitHub list endpoints into the document store.

    Owns one long-lived httpx.AsyncClient. Basic authentication is set on the
    client, so every request (including next-page requests) carries it.

    Example:
        >>> async with PaginatedFetcher("acme", store) as fetcher:
        ...     result = await fetcher.fetch(
        ...         "/repos/{owner}/{repo}/labels?per_page={per_page}",
        ...         ResourceKind.LABEL,
        ...         "widgets",
        ...     )
    """

    CONNECT_TIMEOUT = 5.0  # seconds
    READ_TIMEOUT = 30.0
    WRITE_TIMEOUT = 5.0
    POOL_TIMEOUT = 5.0

    DEFAULT_PER_PAGE = 100
    FAILURE_PAUSE = 1.0  # seconds

    def __init__(
        self,
        owner: str,
        store: DocumentStore,
        credentials: Credentials | None = None,
        base_url: str = DEFAULT_API_URL,
        per_page: int = DEFAULT_PER_PAGE,
        read_timeout: float = READ_TIMEOUT,
        failure_pause: float = FAILURE_PAUSE,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetcher.

        Args:
            owner: Repository owner substituted into endpoint templates
            store: Document store pages are written to
            credentials: Optional Basic auth credentials
            base_url: GitHub API base URL
            per_page: Page size substituted into endpoint templates
            read_timeout: HTTP read timeout in seconds
            failure_pause: Seconds to pause after a failed fetch
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Awaitable sleep used for the failure pause
        """
        self.owner = owner
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.failure_pause = failure_pause
        self._store = store
        self._sleep = sleep

        auth = (
            httpx.BasicAuth(credentials.username, credentials.password)
            if credentials is not None
            else None
        )
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": f"github-river/{__version__}",
            },
            auth=auth,
            timeout=httpx.Timeout(
                connect=self.CONNECT_TIMEOUT,
                read=read_timeout,
                write=self.WRITE_TIMEOUT,
                pool=self.POOL_TIMEOUT,
            ),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "PaginatedFetcher":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the httpx client and release connections."""
        await self._client.aclose()

    async def fetch(
        self, endpoint_template: str, kind: ResourceKind, repository: str
    ) -> FetchResult:
        """Fetch every page of one endpoint for one repository.

        Args:
            endpoint_template: Path with {owner}, {repo} and {per_page} placeholders
            kind: Resource kind of the listed elements
            repository: Repository name under the owner

        Returns:
            FetchResult with page, document and write counts
        """
        result = FetchResult(kind=kind, repository=repository)
        url: str | None = self.base_url + endpoint_template.format(
            owner=self.owner, repo=repository, per_page=self.per_page
        )
        visited: set[str] = set()

        while url is not None:
            visited.add(url)
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                await self._abandon(result, url, f"{type(e).__name__}: {e}")
                return result

            if response.status_code == 404:
                result.not_found = result.pages == 0
                logger.info(
                    "resource_not_found",
                    extra={"kind": kind.value, "repository": repository, "url": url},
                )
                metrics.fetch_total.labels(kind=kind.value, outcome="not_found").inc()
                return result

            if not response.is_success:
                await self._abandon(result, url, self._describe_status(response))
                return result

            try:
                elements = response.json()
            except ValueError as e:
                self._fail(result, url, f"invalid JSON body: {e}")
                return result
            if not isinstance(elements, list):
                self._fail(result, url, f"expected JSON array, got {type(elements).__name__}")
                return result

            result.pages += 1
            metrics.pages_total.labels(kind=kind.value).inc()

            batch = BulkWriter(self._store, kind, repository, self.owner)
            for element in elements:
                batch.add(element)
            result.documents += len(batch)
            result.writes.merge(await batch.flush())

            url = self._next_url(response, visited)

        metrics.fetch_total.labels(kind=kind.value, outcome="success").inc()
        logger.info(
            "fetch_complete",
            extra={
                "kind": kind.value,
                "repository": repository,
                "pages": result.pages,
                "documents": result.documents,
                "written": result.written,
                "skipped": result.skipped,
                "failed": result.failed,
            },
        )
        return result

    def _next_url(self, response: httpx.Response, visited: set[str]) -> str | None:
        """Next page URL from the Link header, or None when the chain ends."""
        link = find_next_link(response.headers.get("link"))
        if link is None:
            return None

        # Reject pagination URLs outside our API (open redirect / SSRF via Link)
        if not link.url.startswith(self.base_url + "/"):
            logger.warning("rejected_link_url", extra={"url": link.url[:100]})
            return None

        if link.url in visited:
            logger.warning("pagination_loop", extra={"url": link.url})
            return None

        logger.debug("paginating", extra={"page": link.page, "url": link.url})
        return link.url

    @staticmethod
    def _describe_status(response: httpx.Response) -> str:
        status = response.status_code
        if status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            return f"rate limited (HTTP {status}, resets at {reset})"
        return f"HTTP {status}"

    def _fail(self, result: FetchResult, url: str, error: str) -> None:
        result.error = error
        metrics.fetch_total.labels(kind=result.kind.value, outcome="failed").inc()
        logger.warning(
            "fetch_failed",
            extra={
                "kind": result.kind.value,
                "repository": result.repository,
                "url": url,
                "pages_written": result.pages,
                "error": error,
            },
        )

    async def _abandon(self, result: FetchResult, url: str, error: str) -> None:
        """Record a transient failure, then back off before returning."""
        self._fail(result, url, error)
        if self.failure_pause > 0:
            await self._sleep(self.failure_pause)
