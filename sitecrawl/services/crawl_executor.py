import logging
import time
from enum import Enum
from typing import Callable, Optional

from sitecrawl.domain.config import CrawlConfig
from sitecrawl.domain.crawl_result import CrawlOutcome, CrawlResult
from sitecrawl.domain.page import FrontierEntry, PageRecord
from sitecrawl.domain.user_agents import UserAgentRotator
from sitecrawl.exceptions import CrawlInitializationError, FetchError, HttpStatusError, ReportWriteError
from sitecrawl.services.fetcher import Fetcher
from sitecrawl.services.fetcher_factory import FetcherFactory
from sitecrawl.services.frontier import UrlFrontier
from sitecrawl.services.link_filter import LinkFilter
from sitecrawl.services.page_extractor import Extractor, PageExtractor
from sitecrawl.services.retry_policy import RetryPolicy
from sitecrawl.utils.datetime_utils import to_iso, utc_now


def _is_stopped(stop_event) -> bool:
    return stop_event is not None and stop_event.is_set()


class CrawlState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    RUNNING = "running"
    CANCELLING = "cancelling"
    FINALIZED = "finalized"
    FAILED = "failed"


class CrawlExecutor:
    """Executes one crawl run given configured collaborators.

    This class owns the crawl control-flow: breadth-first traversal of the
    frontier, retries around each page visit, same-site link admission,
    rate limiting, cancellation checks and the final hand-off to the report
    writer. It does NOT construct long-lived dependencies (that stays in the
    DI layer); per-run state (frontier, result, fetcher, user agents) is built
    inside `crawl()`.

    One executor runs one crawl. The container hands out a new one per run.
    """

    def __init__(
        self,
        *,
        fetcher_factory: FetcherFactory,
        extractor: Optional[Extractor] = None,
        report_writer=None,
        robots_service=None,
        sleep: Callable[[float], None] = time.sleep,
        timer: Callable[[], float] = time.monotonic,
        clock=utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        self.fetcher_factory = fetcher_factory
        self.extractor = extractor or PageExtractor()
        self.report_writer = report_writer
        self.robots_service = robots_service
        self._sleep = sleep
        self._timer = timer
        self._clock = clock
        self.log = logger if logger is not None else logging.getLogger(__name__)
        self.state = CrawlState.IDLE
        self.frontier: Optional[UrlFrontier] = None
        self.result: Optional[CrawlResult] = None

    def _open_fetcher(self, config: CrawlConfig) -> Fetcher:
        self.state = CrawlState.INITIALIZING
        self.log.info("Initializing crawler...")
        try:
            fetcher = self.fetcher_factory.get(config)
            fetcher.open()
        except Exception as e:
            self.state = CrawlState.FAILED
            self.log.error("Crawler initialization failed: %s", e)
            raise CrawlInitializationError(config.fetch_mode, e) from e
        return fetcher

    def _close_fetcher(self, fetcher: Fetcher) -> None:
        try:
            fetcher.close()
        except Exception:
            self.log.exception("Error releasing fetcher")

    def crawl(self, config: CrawlConfig, stop_event=None) -> CrawlOutcome:
        if config is None:
            raise ValueError("config is required for crawl")
        if self.state is not CrawlState.IDLE:
            raise RuntimeError("CrawlExecutor runs a single crawl; create a new executor per run")

        if config.concurrency > 1:
            self.log.warning(
                "concurrency=%s requested; pages are fetched one at a time", config.concurrency
            )

        fetcher = self._open_fetcher(config)
        self.frontier = UrlFrontier(max_pages=config.max_pages, max_depth=config.max_depth)
        self.result = CrawlResult(clock=self._clock)
        try:
            stopped = self._run(config, fetcher, stop_event)
        except Exception as e:
            # Flush what was collected, then let the caller see the failure.
            self.state = CrawlState.FAILED
            self.log.error("Crawl aborted: %s; saving partial results", e)
            self.result.finalize()
            self._write_report(config)
            raise
        finally:
            self._close_fetcher(fetcher)

        self.result.finalize()
        self.state = CrawlState.FINALIZED
        report_paths, report_error = self._write_report(config)
        return CrawlOutcome(
            result=self.result,
            stopped=stopped,
            report_paths=tuple(report_paths),
            report_error=report_error,
        )

    def _run(self, config: CrawlConfig, fetcher: Fetcher, stop_event) -> bool:
        """Drive the frontier until it drains, the budget is met, or a stop is requested.

        Returns True when the run was cancelled.
        """
        frontier, result = self.frontier, self.result
        user_agents = UserAgentRotator(config.user_agents)
        retry_policy = RetryPolicy(
            max_retries=config.max_retries,
            base_delay_seconds=config.retry_delay_seconds,
            sleep=self._sleep,
            logger=self.log,
        )
        link_filter = LinkFilter.from_url(config.target_url)

        self.state = CrawlState.RUNNING
        self.log.info("Starting crawl of %s", config.target_url)
        self.log.info("Max depth: %s, Max pages: %s", config.max_depth, config.max_pages)
        if not frontier.add(config.target_url, 0):
            self.log.warning("Seed URL was not admitted: %s", config.target_url)

        while True:
            if _is_stopped(stop_event):
                self.state = CrawlState.CANCELLING
                dropped = frontier.discard()
                self.log.warning("Stop requested; finishing early and discarding %s queued URLs", dropped)
                return True
            if not frontier.has_more():
                break
            if result.stats.successful_pages >= config.max_pages:
                self.log.info("Page budget of %s reached", config.max_pages)
                break

            entry = frontier.next()
            if entry.depth > config.max_depth:
                self.log.debug("Skipping %s (depth %s > max %s)", entry.url, entry.depth, config.max_depth)
                continue
            if self.robots_service is not None and not self.robots_service.allowed_by_robots(entry.url, config.robots):
                self.log.info("Skipping (robots) %s", entry.url)
                continue

            self._crawl_page(entry, config, fetcher, retry_policy, user_agents, link_filter)

            # Rate limiting applies after every processed page, success or failure.
            self._sleep(config.request_delay_seconds)

        return False

    def _crawl_page(
        self,
        entry: FrontierEntry,
        config: CrawlConfig,
        fetcher: Fetcher,
        retry_policy: RetryPolicy,
        user_agents: UserAgentRotator,
        link_filter: LinkFilter,
    ) -> Optional[PageRecord]:
        result = self.result
        self.log.info(
            "[%s/%s] Crawling: %s (depth: %s)",
            result.stats.total_pages + 1, config.max_pages, entry.url, entry.depth,
        )

        def visit(attempt: int) -> PageRecord:
            started = self._timer()
            response = fetcher.fetch(entry.url, user_agent=user_agents.next())
            if response.status_code >= 400:
                raise HttpStatusError(entry.url, response.status_code)
            extracted = self.extractor.extract(response.url or entry.url, response.text)
            return PageRecord.from_extracted(
                url=entry.url,
                depth=entry.depth,
                timestamp=to_iso(self._clock()),
                status_code=response.status_code,
                load_time_ms=int((self._timer() - started) * 1000),
                extracted=extracted,
            )

        try:
            record = retry_policy.execute(entry.url, visit)
        except FetchError as e:
            result.add_error(entry.url, e)
            return None

        result.add_page(record)
        self.log.info("  OK (%sms) - %s", record.load_time_ms, record.title or "No title")

        if entry.depth < config.max_depth:
            candidates = link_filter.filter_admissible(record.links)
            added = sum(1 for href in candidates if self.frontier.add(href, entry.depth + 1))
            self.log.debug("  Discovered %s links, queued %s new", len(candidates), added)
        return record

    def _write_report(self, config: CrawlConfig):
        if self.report_writer is None:
            return [], None
        try:
            return self.report_writer.write(self.result, config), None
        except ReportWriteError as e:
            self.log.error("Save error: %s", e)
            return [], e
