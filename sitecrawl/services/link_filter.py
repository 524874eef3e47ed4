import logging
from typing import Iterable, Optional, Union
from urllib.parse import urlparse

from sitecrawl.domain.link import Link

logger = logging.getLogger(__name__)


def same_host(base_host: str, other_url: str) -> bool:
    """True if `other_url` is on `base_host` or one of its subdomains."""
    try:
        o = urlparse(other_url).hostname
    except ValueError:
        logger.debug("Unparseable link %r", other_url)
        return False
    if not base_host or not o:
        return False
    b = base_host.lower()
    # Subdomains count as the same site: www.example.com and blog.example.com
    return o == b or o.endswith("." + b)


class LinkFilter:
    """Same-domain admission policy for discovered links.

    Links must already be absolute; no resolution happens here. Scheme and
    fragment screening is the extractor's job.
    """

    def __init__(self, base_host: str):
        self.base_host = (base_host or "").lower()

    @classmethod
    def from_url(cls, seed_url: str) -> "LinkFilter":
        return cls(urlparse(seed_url).hostname or "")

    def filter_admissible(self, links: Iterable[Union[Link, str]], base_host: Optional[str] = None) -> list[str]:
        """Return hrefs of `links` that stay on the site, in discovery order."""
        host = (base_host or self.base_host).lower()
        admissible = []
        for link in links:
            href = link.href if isinstance(link, Link) else link
            if not same_host(host, href):
                logger.debug("Skipping (external) %s -> not same host as %s", href, host)
                continue
            admissible.append(href)
        return admissible
