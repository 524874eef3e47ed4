"""Crawl result data model."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, NamedTuple, Optional

from sitecrawl.domain.page import ErrorRecord, PageRecord
from sitecrawl.exceptions import ResultFinalizedError
from sitecrawl.utils.datetime_utils import to_iso, utc_now


class ResultState(str, Enum):
    OPEN = "open"
    FINALIZED = "finalized"


@dataclass
class CrawlStats:
    """Running counters for a crawl. Only `CrawlResult` mutates them."""

    total_pages: int = 0
    successful_pages: int = 0
    failed_pages: int = 0
    total_links: int = 0
    total_images: int = 0
    total_tables: int = 0
    duration_ms: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "totalPages": self.total_pages,
            "successfulPages": self.successful_pages,
            "failedPages": self.failed_pages,
            "totalLinks": self.total_links,
            "totalImages": self.total_images,
            "totalTables": self.total_tables,
        }
        if self.duration_ms is not None:
            data["duration"] = self.duration_ms
        return data


class CrawlResult:
    """Aggregate of everything a crawl run collected.

    Starts OPEN and accepts page and error records. `finalize()` stamps the end
    time and duration and moves it to FINALIZED, after which any further
    mutation raises `ResultFinalizedError`.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._pages: list[PageRecord] = []
        self._errors: list[ErrorRecord] = []
        self.stats = CrawlStats()
        self.started_at: datetime = clock()
        self.finished_at: Optional[datetime] = None
        self.state = ResultState.OPEN

    @property
    def pages(self) -> tuple[PageRecord, ...]:
        return tuple(self._pages)

    @property
    def errors(self) -> tuple[ErrorRecord, ...]:
        return tuple(self._errors)

    @property
    def is_finalized(self) -> bool:
        return self.state is ResultState.FINALIZED

    def _ensure_open(self, operation: str) -> None:
        if self.state is not ResultState.OPEN:
            raise ResultFinalizedError(f"cannot {operation} on a finalized crawl result")

    def add_page(self, record: PageRecord) -> None:
        self._ensure_open("add_page")
        self._pages.append(record)
        self.stats.total_pages += 1
        self.stats.successful_pages += 1
        self.stats.total_links += len(record.links)
        self.stats.total_images += len(record.images)
        self.stats.total_tables += len(record.tables)

    def add_error(self, url: str, error: Exception) -> ErrorRecord:
        self._ensure_open("add_error")
        cause = getattr(error, "cause", error)
        record = ErrorRecord(
            url=url,
            error_message=str(error),
            timestamp=to_iso(self._clock()),
            status_code=getattr(cause, "status_code", None),
        )
        self._errors.append(record)
        self.stats.total_pages += 1
        self.stats.failed_pages += 1
        return record

    def finalize(self) -> "CrawlResult":
        self._ensure_open("finalize")
        self.finished_at = self._clock()
        delta = self.finished_at - self.started_at
        self.stats.duration_ms = int(delta.total_seconds() * 1000)
        self.state = ResultState.FINALIZED
        return self

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.stats.duration_ms is None:
            return None
        return self.stats.duration_ms / 1000

    def __repr__(self):
        return (
            f"<CrawlResult state={self.state.value} pages={len(self._pages)} "
            f"errors={len(self._errors)}>"
        )


class CrawlOutcome(NamedTuple):
    """What a crawl run produced.

    Lets callers log metrics and distinguish a completed run from a cancelled one.
    """
    result: CrawlResult
    stopped: bool
    """True if the crawl was stopped early via the stop event"""
    report_paths: tuple = ()
    report_error: Optional[Exception] = None
