import requests
from typing import Callable, Optional

from sitecrawl.domain.http_response import HttpResponse
from sitecrawl.exceptions import HttpFetchError


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection (`requests.get` or a
    bound `Session.get`). This enables easy testing without patching.
    """

    def __init__(
        self,
        user_agent: str,
        http_client: Callable,
        timeout: float = 10,
        accept_language: Optional[str] = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client
        self.accept_language = accept_language

    def _headers(self, user_agent: Optional[str]) -> dict:
        headers = {
            "User-Agent": user_agent or self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        if self.accept_language:
            headers["Accept-Language"] = self.accept_language
        return headers

    def fetch(self, url: str, user_agent: Optional[str] = None) -> HttpResponse:
        """Fetch URL and return response with status code, body text, Content-Type and final URL."""
        try:
            resp = self.http_client(url, headers=self._headers(user_agent), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, "headers"):
            ct = resp.headers.get("Content-Type")

        final_url = getattr(resp, "url", None)
        if not isinstance(final_url, str):
            final_url = url
        return HttpResponse(resp.status_code, resp.text, ct, final_url)

    def fetch_robots(self, robots_url: str) -> HttpResponse:
        """Fetch robots.txt - delegates to fetch()."""
        return self.fetch(robots_url)
