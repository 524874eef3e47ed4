from typing import Optional


class VisitedTracker:
    """
    Tracks which URLs have been admitted during a crawl.

    The tracker only ever grows: a URL that was marked stays marked for the
    whole run, so a page can never be visited twice. Once `max_size` URLs are
    tracked further marks are refused instead of evicting older entries.
    """

    def __init__(self, max_size: Optional[int] = None):
        """Create a visited tracker.

        `max_size` is the page budget. If None or <= 0 the tracker is unbounded.
        """
        self._max_size = int(max_size) if max_size is not None else None
        if self._max_size is not None and self._max_size <= 0:
            self._max_size = None

        self._visited: set[str] = set()

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size

    def is_full(self) -> bool:
        return self._max_size is not None and len(self._visited) >= self._max_size

    def mark(self, url: str) -> bool:
        """Mark a URL as visited. Returns False if it was already tracked or the budget is spent."""
        if url in self._visited:
            return False
        if self.is_full():
            return False
        self._visited.add(url)
        return True

    def is_visited(self, url: str) -> bool:
        """Check if a URL has been visited."""
        return url in self._visited

    def __len__(self) -> int:
        return len(self._visited)

    def __contains__(self, url: str) -> bool:
        return url in self._visited
