from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from a fetch operation."""
    status_code: int
    text: str
    content_type: Optional[str] = None
    url: Optional[str] = None
    """Final URL after redirects, when the fetcher knows it."""
