from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional
from urllib.parse import urlparse


DEFAULT_USER_AGENTS = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
)

FETCH_MODES = ("http", "headless_chromium")
OUTPUT_FORMATS = ("json", "csv", "both")
WAIT_UNTIL_VALUES = ("commit", "domcontentloaded", "load", "networkidle")


@dataclass(frozen=True)
class CrawlConfig:
    """Settings for a single crawl run.

    Passed explicitly into the executor; nothing reads crawl settings from
    module globals.
    """

    target_url: str
    max_depth: int = 3
    max_pages: int = 50
    # Reserved for a worker pool; the crawl loop is sequential.
    concurrency: int = 3
    request_delay_seconds: float = 0.5
    page_timeout_ms: int = 15_000
    robots: bool = True
    max_retries: int = 3
    retry_delay_seconds: float = 2.0
    output_format: str = "json"
    output_dir: str = "output/crawl-data"
    log_dir: str = "logs"
    headed: bool = False
    fetch_mode: str = "headless_chromium"
    wait_until: str = "domcontentloaded"
    block_resources: bool = True
    accept_language: str = "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7"
    user_agents: tuple[str, ...] = field(default=DEFAULT_USER_AGENTS)
    schedule: Optional[str] = None
    config_path: Optional[str] = None

    def __post_init__(self):
        if not self.target_url or not isinstance(self.target_url, str):
            raise ValueError("target_url is required")
        parsed = urlparse(self.target_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"target_url must be an absolute http(s) URL: {self.target_url!r}")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_pages <= 0:
            raise ValueError("max_pages must be > 0")
        if self.concurrency <= 0:
            raise ValueError("concurrency must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.request_delay_seconds < 0 or self.retry_delay_seconds < 0:
            raise ValueError("delays must be >= 0")
        if self.page_timeout_ms <= 0:
            raise ValueError("page_timeout_ms must be > 0")
        if self.fetch_mode is None or (isinstance(self.fetch_mode, str) and self.fetch_mode.strip() == ""):
            raise ValueError("fetch_mode is required")
        if self.fetch_mode not in FETCH_MODES:
            raise ValueError(f"Unknown fetch_mode: {self.fetch_mode!r}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output_format: {self.output_format!r}")
        if self.wait_until not in WAIT_UNTIL_VALUES:
            raise ValueError(f"Unknown wait_until: {self.wait_until!r}")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "user_agents", tuple(self.user_agents or ()))
        if not self.user_agents:
            raise ValueError("user_agents must not be empty")

    def summary(self) -> dict:
        """Options echoed into the report header."""
        data = asdict(self)
        return {
            "maxDepth": data["max_depth"],
            "maxPages": data["max_pages"],
            "concurrency": data["concurrency"],
            "requestDelaySeconds": data["request_delay_seconds"],
            "pageTimeoutMs": data["page_timeout_ms"],
            "maxRetries": data["max_retries"],
            "retryDelaySeconds": data["retry_delay_seconds"],
            "fetchMode": data["fetch_mode"],
            "robots": data["robots"],
        }

    def __repr__(self):
        return f"<CrawlConfig url={self.target_url} depth={self.max_depth} pages={self.max_pages} mode={self.fetch_mode}>"
