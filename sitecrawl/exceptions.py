"""Custom exceptions for SiteCrawl services."""


class ConfigNotFoundError(Exception):
    """Raised when a requested crawl config file cannot be found or parsed."""

    def __init__(self, config_path: str, reason: str = "not found"):
        self.config_path = config_path
        self.reason = reason
        super().__init__(f"Config '{config_path}' {reason}")


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class HttpStatusError(Exception):
    """Raised when a page answers with an HTTP status >= 400."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class FetchError(Exception):
    """Raised when every attempt to visit a page failed.

    `cause` is the error from the last attempt.
    """

    def __init__(self, url: str, cause: Exception, attempts: int = 1):
        self.url = url
        self.cause = cause
        self.attempts = attempts
        super().__init__(str(cause))


class CrawlInitializationError(Exception):
    """Raised when the fetch resource (browser or HTTP session) cannot be acquired."""

    def __init__(self, fetch_mode: str, original: Exception):
        self.fetch_mode = fetch_mode
        self.original = original
        super().__init__(f"Could not initialize {fetch_mode} fetcher: {original}")


class ReportWriteError(Exception):
    """Raised when the crawl report cannot be written to disk."""

    def __init__(self, path, original: Exception):
        self.path = path
        self.original = original
        super().__init__(f"Could not write report {path}: {original}")


class ResultFinalizedError(RuntimeError):
    """Raised when a finalized crawl result is mutated."""
