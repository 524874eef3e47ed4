import logging
import threading
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from sitecrawl.domain.config import CrawlConfig

logger = logging.getLogger(__name__)


def _parse_schedule(schedule: Any) -> Optional[CronTrigger]:
    """Return an APScheduler CronTrigger from a cron schedule string.

    Accepts cron strings like '0 */6 * * *' (crontab format).
    Returns None if schedule is missing or cannot be parsed.
    """
    if schedule is None:
        return None
    if isinstance(schedule, str):
        try:
            return CronTrigger.from_crontab(schedule)
        except ValueError:
            logger.exception("Error parsing cron schedule: %s", schedule)
            return None
    logger.warning("Unsupported schedule format: %s (only cron strings supported)", type(schedule))
    return None


class SchedulerService:
    """Runs a crawl repeatedly on a cron schedule.

    Every scheduled run calls `start_crawl_callback(config, stop_event)`. The
    stop event is shared: once it is set the active run winds down gracefully
    and no further runs start.
    """

    def __init__(
        self,
        start_crawl_callback: Callable[[CrawlConfig, threading.Event], Any],
        stop_event: Optional[threading.Event] = None,
        scheduler_factory: Callable[[], BackgroundScheduler] = BackgroundScheduler,
    ):
        self.start_crawl_callback = start_crawl_callback
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._scheduler_factory = scheduler_factory
        self._sched: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._sched is not None

    def start(self, config: CrawlConfig) -> None:
        if self._sched is not None:
            return
        trigger = _parse_schedule(config.schedule)
        if trigger is None:
            raise ValueError(f"Invalid cron schedule: {config.schedule!r}")

        self._sched = self._scheduler_factory()
        self._sched.add_job(
            self._execute_scheduled_crawl,
            trigger=trigger,
            args=[config],
            id=f"schedule:{config.target_url}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._sched.start()
        logger.info("Scheduled crawl of %s -> %s", config.target_url, config.schedule)

    def shutdown(self, wait: bool = True) -> None:
        if not self._sched:
            return
        try:
            self._sched.shutdown(wait=wait)
            logger.info("Scheduler shut down")
        finally:
            self._sched = None

    def run_forever(self, config: CrawlConfig, poll_seconds: float = 1.0) -> None:
        """Start the schedule and block until the stop event is set."""
        self.start(config)
        try:
            while not self.stop_event.wait(poll_seconds):
                pass
        finally:
            self.shutdown(wait=True)

    def _execute_scheduled_crawl(self, config: CrawlConfig) -> None:
        """Execute one scheduled crawl; failures are logged and the schedule keeps running."""
        if self.stop_event.is_set():
            logger.info("Skipping scheduled crawl of %s; shutdown in progress", config.target_url)
            return
        try:
            self.start_crawl_callback(config, self.stop_event)
        except Exception:
            logger.exception("Scheduled crawl failed for %s", config.target_url)
