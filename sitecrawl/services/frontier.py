import logging
from collections import deque
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from sitecrawl.domain.page import FrontierEntry
from sitecrawl.domain.visited_tracker import VisitedTracker

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> Optional[str]:
    """Normalize a URL for deduplication, or return None if it is malformed.

    - Requires an absolute http(s) URL with a host
    - Lower-cases scheme and host
    - Drops the fragment (#...)
    - Strips a single trailing slash from the path
    - Keeps the query string (it matters for uniqueness)
    """
    if not url or not isinstance(url, str):
        return None
    try:
        parts = urlsplit(url.strip())
        # Accessing .port validates it; bad ports raise ValueError.
        parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") or not parts.hostname:
        return None

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"

    path = parts.path
    if path.endswith("/"):
        path = path[:-1]
    return urlunsplit((scheme, netloc, path, parts.query, ""))


class UrlFrontier:
    """FIFO queue of (url, depth) work items with deduplication and a page budget.

    A URL is marked visited in the same step it is queued, so a link that is
    rediscovered before being dequeued is never queued a second time.
    """

    def __init__(self, max_pages: int, max_depth: int, visited_tracker: Optional[VisitedTracker] = None):
        self.max_pages = int(max_pages)
        self.max_depth = int(max_depth)
        self.visited = visited_tracker if visited_tracker is not None else VisitedTracker(max_size=self.max_pages)
        self._queue: deque[FrontierEntry] = deque()

    def add(self, url: str, depth: int) -> bool:
        """Admit `url` at `depth`. Returns False when it is refused."""
        if depth < 0 or depth > self.max_depth:
            logger.debug("Not queued (depth %s > max %s): %s", depth, self.max_depth, url)
            return False
        normalized = normalize_url(url)
        if normalized is None:
            logger.debug("Not queued (malformed): %r", url)
            return False
        if self.visited.is_visited(normalized):
            return False
        if len(self.visited) >= self.max_pages:
            logger.debug("Not queued (page budget of %s reached): %s", self.max_pages, normalized)
            return False
        if not self.visited.mark(normalized):
            return False
        self._queue.append(FrontierEntry(normalized, depth))
        return True

    def next(self) -> Optional[FrontierEntry]:
        if not self._queue:
            return None
        return self._queue.popleft()

    def has_more(self) -> bool:
        return bool(self._queue)

    @property
    def size(self) -> int:
        """Number of URLs admitted so far (the visited set)."""
        return len(self.visited)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def discard(self) -> int:
        """Drop every queued entry, returning how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        return dropped
