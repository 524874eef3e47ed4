from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional

import requests

from sitecrawl.domain.config import CrawlConfig
from sitecrawl.services.fetcher import Fetcher, HttpServiceFetcher
from sitecrawl.services.headless_browser_fetcher import PlaywrightHeadlessFetcher, PlaywrightHeadlessOptions


@dataclass(frozen=True)
class FetcherFactory:
    """Builds a fresh, unopened fetcher for one crawl run."""

    user_agent: str
    session_factory: Callable[[], requests.Session] = requests.Session
    headless_launch_args: Optional[tuple[str, ...]] = None

    def get(self, config: CrawlConfig) -> Fetcher:
        fetch_mode = config.fetch_mode
        if fetch_mode is None or (isinstance(fetch_mode, str) and fetch_mode.strip() == ""):
            raise ValueError("fetch_mode is required")
        mode = fetch_mode.strip().lower()
        user_agent = config.user_agents[0] if config.user_agents else self.user_agent
        if mode == "http":
            return HttpServiceFetcher(
                user_agent=user_agent,
                timeout=config.page_timeout_ms / 1000,
                accept_language=config.accept_language,
                session_factory=self.session_factory,
            )
        if mode == "headless_chromium":
            options = PlaywrightHeadlessOptions(
                timeout_ms=config.page_timeout_ms,
                wait_until=config.wait_until,
                headless=not config.headed,
                block_resources=config.block_resources,
                accept_language=config.accept_language,
            )
            if self.headless_launch_args is not None:
                options = replace(options, launch_args=tuple(self.headless_launch_args))
            return PlaywrightHeadlessFetcher(user_agent=user_agent, options=options)
        raise ValueError(f"Unknown fetch_mode: {fetch_mode!r}")
