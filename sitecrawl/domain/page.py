from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from sitecrawl.domain.link import Heading, Image, Link


class FrontierEntry(NamedTuple):
    """A normalized URL waiting in the frontier, tagged with its hop count from the seed."""
    url: str
    depth: int


@dataclass(frozen=True)
class ExtractedPage:
    """Structured data pulled out of a loaded document."""

    title: str = ""
    headings: tuple[Heading, ...] = ()
    links: tuple[Link, ...] = ()
    images: tuple[Image, ...] = ()
    tables: tuple[tuple[tuple[str, ...], ...], ...] = ()
    text_blocks: tuple[str, ...] = ()
    meta: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PageRecord:
    """One successfully fetched page."""

    url: str
    depth: int
    timestamp: str
    status_code: int
    load_time_ms: int
    title: str = ""
    headings: tuple[Heading, ...] = ()
    links: tuple[Link, ...] = ()
    images: tuple[Image, ...] = ()
    tables: tuple[tuple[tuple[str, ...], ...], ...] = ()
    text_blocks: tuple[str, ...] = ()
    meta: dict = field(default_factory=dict)

    @classmethod
    def from_extracted(
        cls,
        *,
        url: str,
        depth: int,
        timestamp: str,
        status_code: int,
        load_time_ms: int,
        extracted: ExtractedPage,
    ) -> "PageRecord":
        return cls(
            url=url,
            depth=depth,
            timestamp=timestamp,
            status_code=status_code,
            load_time_ms=load_time_ms,
            title=extracted.title,
            headings=tuple(extracted.headings),
            links=tuple(extracted.links),
            images=tuple(extracted.images),
            tables=tuple(extracted.tables),
            text_blocks=tuple(extracted.text_blocks),
            meta=dict(extracted.meta),
        )

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "depth": self.depth,
            "timestamp": self.timestamp,
            "statusCode": self.status_code,
            "loadTimeMs": self.load_time_ms,
            "title": self.title,
            "headings": [h.to_dict() for h in self.headings],
            "links": [link.to_dict() for link in self.links],
            "images": [img.to_dict() for img in self.images],
            "tables": [[list(row) for row in table] for table in self.tables],
            "textBlocks": list(self.text_blocks),
            "meta": dict(self.meta),
        }


@dataclass(frozen=True)
class ErrorRecord:
    """A URL whose every fetch attempt failed."""

    url: str
    error_message: str
    timestamp: str
    status_code: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "url": self.url,
            "error": self.error_message,
            "timestamp": self.timestamp,
        }
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        return data
