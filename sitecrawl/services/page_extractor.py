import logging
from typing import Callable, Optional, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from sitecrawl.domain.link import Heading, Image, Link
from sitecrawl.domain.page import ExtractedPage

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
SKIPPED_HREF_PREFIXES = ("javascript:", "#", "mailto:", "tel:", "data:")
MAX_ANCHOR_TEXT = 100
MAX_TABLE_ROWS = 10
MAX_TEXT_BLOCKS = 50


class Extractor(Protocol):
    def extract(self, base_url: str, html: Optional[str]) -> ExtractedPage: ...


def _text(el) -> str:
    return el.get_text(" ", strip=True) if el is not None else ""


def _attr(el, name: str) -> str:
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


class PageExtractor:
    """Pull titles, headings, links, images, tables, text blocks and meta tags out of HTML.

    Links and image sources come back absolute, resolved against `base_url`.
    `javascript:`, `mailto:`, `tel:` and bare fragment links are dropped here so
    downstream filtering only ever sees navigable URLs.
    """

    def __init__(
        self,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract(self, base_url: str, html: Optional[str]) -> ExtractedPage:
        if not html:
            return ExtractedPage()
        soup = self._soup_factory(html)
        return ExtractedPage(
            title=_text(soup.title),
            headings=tuple(self._headings(soup)),
            links=tuple(self.extract_links(base_url, soup)),
            images=tuple(self._images(base_url, soup)),
            tables=tuple(self._tables(soup)),
            text_blocks=tuple(self._text_blocks(soup)),
            meta=self._meta(soup),
        )

    def extract_links(self, base_url: str, soup: BeautifulSoup) -> list[Link]:
        links = []
        for a in soup.find_all("a", href=True):
            href = _attr(a, "href")
            if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
                continue
            try:
                abs_url = urljoin(base_url, href)
            except ValueError:
                logger.debug("Could not resolve link %r on %s", href, base_url)
                continue
            links.append(Link(abs_url, _text(a)[:MAX_ANCHOR_TEXT]))
        return links

    def _headings(self, soup: BeautifulSoup) -> list[Heading]:
        return [Heading(el.name.lower(), _text(el)) for el in soup.find_all(HEADING_TAGS)]

    def _images(self, base_url: str, soup: BeautifulSoup) -> list[Image]:
        images = []
        for img in soup.find_all("img", src=True):
            src = _attr(img, "src")
            if not src:
                continue
            try:
                src = urljoin(base_url, src)
            except ValueError:
                logger.debug("Keeping unresolvable image src %r on %s", src, base_url)
            images.append(Image(src, _attr(img, "alt")))
        return images

    def _tables(self, soup: BeautifulSoup) -> list[tuple[tuple[str, ...], ...]]:
        tables = []
        for table in soup.find_all("table"):
            rows = table.find_all("tr")[:MAX_TABLE_ROWS]
            tables.append(tuple(
                tuple(_text(cell) for cell in row.find_all(["td", "th"]))
                for row in rows
            ))
        return tables

    def _text_blocks(self, soup: BeautifulSoup) -> list[str]:
        blocks = []
        for el in soup.find_all(["p", "li"]):
            text = _text(el)
            if text:
                blocks.append(text)
            if len(blocks) >= MAX_TEXT_BLOCKS:
                break
        return blocks

    def _meta(self, soup: BeautifulSoup) -> dict:
        meta = {}
        for el in soup.find_all("meta"):
            key = _attr(el, "name") or _attr(el, "property")
            if key:
                meta[key] = _attr(el, "content")
        return meta
