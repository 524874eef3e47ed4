from __future__ import annotations

from typing import Callable, Optional, Protocol

import requests

from sitecrawl.domain.http_response import HttpResponse
from sitecrawl.services.http_service import HttpService

class Fetcher(Protocol):
    """Turn a URL into a loaded document.

    A fetcher holds one expensive resource (HTTP session, browser) for a whole
    crawl run: `open()` acquires it, `close()` releases it, and every `fetch()`
    in between reuses it.
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    def fetch(self, url: str, *, user_agent: Optional[str] = None) -> HttpResponse: ...


class HttpServiceFetcher:
    """Plain HTTP fetcher backed by a `requests.Session` per run."""

    def __init__(
        self,
        *,
        user_agent: str,
        timeout: float = 15,
        accept_language: Optional[str] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self._user_agent = user_agent
        self._timeout = timeout
        self._accept_language = accept_language
        self._session_factory = session_factory
        self._session: Optional[requests.Session] = None
        self._http_service: Optional[HttpService] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def open(self) -> None:
        if self._session is not None:
            return
        self._session = self._session_factory()
        self._http_service = HttpService(
            self._user_agent,
            http_client=self._session.get,
            timeout=self._timeout,
            accept_language=self._accept_language,
        )

    def close(self) -> None:
        session, self._session, self._http_service = self._session, None, None
        if session is not None:
            session.close()

    def fetch(self, url: str, *, user_agent: Optional[str] = None) -> HttpResponse:
        if self._http_service is None:
            raise RuntimeError("HTTP fetcher is not open")
        return self._http_service.fetch(url, user_agent=user_agent)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
