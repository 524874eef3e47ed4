from typing import Iterable


class UserAgentRotator:
    """Round-robin over a fixed pool of user agents.

    One rotator lives for a whole crawl run so the position carries over from
    page to page.
    """

    def __init__(self, user_agents: Iterable[str]):
        self._pool = tuple(user_agents)
        if not self._pool:
            raise ValueError("user agent pool must not be empty")
        self._index = 0

    def next(self) -> str:
        ua = self._pool[self._index % len(self._pool)]
        self._index += 1
        return ua

    @property
    def index(self) -> int:
        return self._index
