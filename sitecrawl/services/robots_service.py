import logging
from typing import Optional
from urllib.parse import urljoin, urlparse
from urllib.robotparser import RobotFileParser

from sitecrawl.exceptions import HttpFetchError

logger = logging.getLogger(__name__)


class RobotsService:
    """
    Answers "may this URL be fetched?" for the crawl loop.

    The decision itself is delegated to the standard library `RobotFileParser`;
    this service only fetches robots.txt once per host, caches the parser, and
    fails open when robots.txt is missing or unreadable.

    Rules are matched against `user_agent`, the crawler's own identity
    (`USER_AGENT`), not the rotated browser agents pages are fetched with.
    Groups addressed to the crawler by name therefore apply even though
    page requests present browser user agents.
    """

    def __init__(self, http_service, user_agent: str):
        self.http_service = http_service
        self.user_agent = user_agent
        self._cache: dict[str, Optional[RobotFileParser]] = {}

    def _load(self, robots_url: str) -> Optional[RobotFileParser]:
        try:
            response = self.http_service.fetch_robots(robots_url)
        except HttpFetchError:
            logger.warning("Network error fetching robots.txt from %s", robots_url)
            return None

        if response.status_code != 200 or not response.text:
            return None

        robots_parser = RobotFileParser(robots_url)
        robots_parser.parse(response.text.splitlines())
        return robots_parser

    def allowed_by_robots(self, url: str, robots_enabled: bool) -> bool:
        if not robots_enabled:
            return True

        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            # Fail open: invalid/relative URLs should not block crawling.
            return True

        base = f"{parsed.scheme}://{parsed.netloc}"
        if base not in self._cache:
            self._cache[base] = self._load(urljoin(base, "/robots.txt"))
        robots_parser = self._cache[base]

        if robots_parser is None:
            return True
        return robots_parser.can_fetch(self.user_agent, url)
