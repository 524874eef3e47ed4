import logging
import time
from typing import Callable, Optional, TypeVar

from sitecrawl.exceptions import FetchError

T = TypeVar("T")


class RetryPolicy:
    """Runs a single page visit with bounded retries and linear backoff.

    `visit` is attempted up to `max_retries + 1` times. After the k-th failed
    attempt the policy waits `base_delay_seconds * k` before trying again.
    Every exception raised by `visit` counts as a retryable failure; when the
    attempts run out the last one is raised as `FetchError`.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = int(max_retries)
        self.base_delay_seconds = float(base_delay_seconds)
        self._sleep = sleep
        self._log = logger if logger is not None else logging.getLogger(__name__)

    def backoff_delay(self, failures: int) -> float:
        return self.base_delay_seconds * failures

    def execute(self, url: str, visit: Callable[[int], T]) -> T:
        """Call `visit(attempt)` until it succeeds; `attempt` starts at 1."""
        failures = 0
        while True:
            try:
                return visit(failures + 1)
            except Exception as e:
                failures += 1
                if failures > self.max_retries:
                    self._log.error("  FAILED after %s retries: %s (%s)", self.max_retries, e, url)
                    raise FetchError(url, e, attempts=failures) from e
                self._log.warning("  Retry %s/%s: %s", failures, self.max_retries, e)
                self._sleep(self.backoff_delay(failures))
