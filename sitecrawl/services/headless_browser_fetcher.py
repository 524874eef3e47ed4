from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sitecrawl.domain.http_response import HttpResponse

logger = logging.getLogger(__name__)

# Chromium flags suited to running inside containers and cron jobs on Linux.
DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-sync",
    "--disable-translate",
    "--disable-default-apps",
    "--mute-audio",
    "--hide-scrollbars",
    "--metrics-recording-only",
    "--no-default-browser-check",
    "--disable-hang-monitor",
    "--disable-prompt-on-repost",
    "--disable-client-side-phishing-detection",
    "--disable-component-update",
    "--disable-domain-reliability",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})


@dataclass(frozen=True)
class PlaywrightHeadlessOptions:
    timeout_ms: int = 15_000
    wait_until: str = "domcontentloaded"  # commit | domcontentloaded | load | networkidle
    headless: bool = True
    block_resources: bool = True
    accept_language: Optional[str] = None
    launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    viewport: dict = field(default_factory=lambda: {"width": 1280, "height": 900})


def _block_heavy_resources(route):
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class PlaywrightHeadlessFetcher:
    """Headless browser fetcher backed by Playwright.

    Renders JavaScript-heavy pages and returns the final DOM HTML via
    page.content().

    Notes:
    - The browser is launched once in `open()` and reused for every page of
      the run; each fetch gets its own context so the user agent can rotate.
    - Playwright is imported lazily so HTTP-only installs still work.
    - The sync API is thread-bound: open, fetch and close must happen on the
      same thread.
    """

    def __init__(self, *, user_agent: str, options: Optional[PlaywrightHeadlessOptions] = None):
        self._user_agent = user_agent
        self._options = options or PlaywrightHeadlessOptions()
        self._playwright = None
        self._browser = None

    @property
    def options(self) -> PlaywrightHeadlessOptions:
        return self._options

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    def open(self) -> None:
        if self._browser is not None:
            return
        try:
            from playwright.sync_api import sync_playwright  # type: ignore
        except ImportError as e:
            raise RuntimeError(
                "Headless fetch requested but Playwright is not installed. "
                "Install 'playwright' and run 'python -m playwright install chromium'."
            ) from e

        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self._options.headless,
                args=list(self._options.launch_args),
            )
        except Exception:
            self._playwright.stop()
            self._playwright = None
            raise
        logger.info("Browser launched (headless=%s)", self._options.headless)

    def close(self) -> None:
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        try:
            if browser is not None:
                browser.close()
                logger.info("Browser closed")
        finally:
            if pw is not None:
                pw.stop()

    def fetch(self, url: str, *, user_agent: Optional[str] = None) -> HttpResponse:
        if self._browser is None:
            raise RuntimeError("Headless browser is not open")

        headers = {"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"}
        if self._options.accept_language:
            headers["Accept-Language"] = self._options.accept_language

        context = self._browser.new_context(
            user_agent=user_agent or self._user_agent,
            extra_http_headers=headers,
            viewport=self._options.viewport,
        )
        try:
            page = context.new_page()
            if self._options.block_resources:
                page.route("**/*", _block_heavy_resources)
            resp = page.goto(url, wait_until=self._options.wait_until, timeout=self._options.timeout_ms)
            status = int(resp.status) if resp is not None else 0
            html = page.content()
            return HttpResponse(status_code=status, text=html, content_type="text/html", url=page.url)
        finally:
            context.close()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
