"""GitHub Link header parsing.

Format: <https://api.github.com/...?page=2>; rel="next", <...?page=5>; rel="last"

Parsing never raises: a missing, empty or malformed header simply means there
are no further pages.
"""

import re
from dataclasses import dataclass
from typing import Optional

__all__ = ["PageLink", "find_next_link", "parse_link"]

# One entry: <URL>; rel="relation". The URL is limited to a conservative
# character set and must carry a page=N query parameter.
_LINK_RE = re.compile(r'\s*<([A-Za-z0-9/:.?_&=%+~-]+)>\s*;\s*rel="([a-z]+)"')
_PAGE_RE = re.compile(r"[?&]page=([0-9]+)")


@dataclass(frozen=True)
class PageLink:
    """One parsed Link header entry."""

    url: str
    page: int
    rel: str


def parse_link(value: Optional[str]) -> Optional[PageLink]:
    """Parse a single `<url>; rel="relation"` entry.

    Args:
        value: Raw entry text; may be None or empty

    Returns:
        PageLink, or None when the entry is absent or unparseable
    """
    if not value:
        return None

    match = _LINK_RE.match(value)
    if not match:
        return None

    url, rel = match.group(1), match.group(2)
    page = _PAGE_RE.search(url)
    if not page:
        return None

    return PageLink(url=url, page=int(page.group(1)), rel=rel)


def find_next_link(header: Optional[str]) -> Optional[PageLink]:
    """Return the rel="next" entry of a Link header, if any."""
    if not header:
        return None

    for part in header.split(","):
        link = parse_link(part)
        if link is not None and link.rel == "next":
            return link
    return None
