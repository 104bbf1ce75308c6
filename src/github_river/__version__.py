"""Version information for github-river.

Single source of truth for version number.
"""

__version__ = "1.2.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 1.2.0 - Qdrant document store, count-and-report write failures
# 1.1.0 - Basic authentication, closed issues, collaborators
# 1.0.0 - Initial release (events, issues, pull requests, milestones, labels)
