"""Dependency injection container for SiteCrawl."""
from dependency_injector import containers, providers
import requests

from sitecrawl import config as env
from sitecrawl.domain.config import DEFAULT_USER_AGENTS
from sitecrawl.services.config_file_store import ConfigFileStore
from sitecrawl.services.crawl_config_parser import CrawlConfigParser
from sitecrawl.services.crawl_executor import CrawlExecutor
from sitecrawl.services.fetcher_factory import FetcherFactory
from sitecrawl.services.http_service import HttpService
from sitecrawl.services.page_extractor import PageExtractor
from sitecrawl.services.report_writer import ReportWriter
from sitecrawl.services.robots_service import RobotsService
from sitecrawl.services.scheduler_service import SchedulerService


# Environment variables used by the container (read via `sitecrawl.config` helpers).
#
# Notes:
# - Types are enforced by the helper used (`get_int_env`, `get_float_env`, etc.).
# - Defaults shown here are the effective defaults used when the env var is unset.
# - Crawl settings here are only defaults: a YAML crawl file overrides them and
#   CLI flags override both.
#
# USER_AGENT (str, default: "SiteCrawl/0.1")
#   Identity used for robots.txt checks and as the fallback user agent.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Timeout for robots.txt requests.
#
# CRAWL_DELAY (float seconds, default: 0.5)
#   Politeness delay between page visits.
#
# SITECRAWL_TARGET_URL (str | optional)
#   Seed URL used when neither the CLI nor the crawl file names one.
#
# SITECRAWL_MAX_DEPTH (int, default: 3) / SITECRAWL_MAX_PAGES (int, default: 50)
#   Traversal bounds.
#
# SITECRAWL_CONCURRENCY (int, default: 3)
#   Accepted for forward compatibility; pages are fetched one at a time.
#
# SITECRAWL_PAGE_TIMEOUT_MS (int ms, default: 15000)
#   Per-page navigation timeout.
#
# SITECRAWL_MAX_RETRIES (int, default: 3) / SITECRAWL_RETRY_DELAY (float seconds, default: 2.0)
#   Retry budget and linear backoff base per page.
#
# SITECRAWL_FETCH_MODE (str, default: "headless_chromium")
#   "headless_chromium" (Playwright) or "http" (requests).
#
# SITECRAWL_HEADED (bool, default: false) / SITECRAWL_ROBOTS (bool, default: true)
#
# SITECRAWL_OUTPUT_FORMAT (str, default: "json") / SITECRAWL_OUTPUT_DIR / SITECRAWL_LOG_DIR
#
# SITECRAWL_USER_AGENTS (str, "|"-separated, default: three Linux desktop agents)
#   Pool rotated round-robin across page visits.
ENV = {
    "USER_AGENT": env.get_str_env("USER_AGENT", "SiteCrawl/0.1"),
    "HTTP_TIMEOUT": env.get_int_env("HTTP_TIMEOUT", 10),
    "CRAWL_DELAY": env.get_float_env("CRAWL_DELAY", 0.5),
    "SITECRAWL_TARGET_URL": env.get_optional_str_env("SITECRAWL_TARGET_URL"),
    "SITECRAWL_MAX_DEPTH": env.get_int_env("SITECRAWL_MAX_DEPTH", 3),
    "SITECRAWL_MAX_PAGES": env.get_int_env("SITECRAWL_MAX_PAGES", 50),
    "SITECRAWL_CONCURRENCY": env.get_int_env("SITECRAWL_CONCURRENCY", 3),
    "SITECRAWL_PAGE_TIMEOUT_MS": env.get_int_env("SITECRAWL_PAGE_TIMEOUT_MS", 15_000),
    "SITECRAWL_MAX_RETRIES": env.get_int_env("SITECRAWL_MAX_RETRIES", 3),
    "SITECRAWL_RETRY_DELAY": env.get_float_env("SITECRAWL_RETRY_DELAY", 2.0),
    "SITECRAWL_FETCH_MODE": env.get_str_env("SITECRAWL_FETCH_MODE", "headless_chromium").strip().lower(),
    "SITECRAWL_HEADED": env.get_bool_env("SITECRAWL_HEADED", False),
    "SITECRAWL_ROBOTS": env.get_bool_env("SITECRAWL_ROBOTS", True),
    "SITECRAWL_OUTPUT_FORMAT": env.get_str_env("SITECRAWL_OUTPUT_FORMAT", "json").strip().lower(),
    "SITECRAWL_OUTPUT_DIR": env.get_str_env("SITECRAWL_OUTPUT_DIR", "output/crawl-data"),
    "SITECRAWL_LOG_DIR": env.get_str_env("SITECRAWL_LOG_DIR", "logs"),
    "SITECRAWL_USER_AGENTS": env.get_list_env("SITECRAWL_USER_AGENTS", DEFAULT_USER_AGENTS),
}


def crawl_defaults_from_settings(settings: dict) -> dict:
    """Map container settings onto CrawlConfig keyword arguments."""
    defaults = {
        "target_url": settings.get("SITECRAWL_TARGET_URL"),
        "max_depth": settings.get("SITECRAWL_MAX_DEPTH"),
        "max_pages": settings.get("SITECRAWL_MAX_PAGES"),
        "concurrency": settings.get("SITECRAWL_CONCURRENCY"),
        "request_delay_seconds": settings.get("CRAWL_DELAY"),
        "page_timeout_ms": settings.get("SITECRAWL_PAGE_TIMEOUT_MS"),
        "max_retries": settings.get("SITECRAWL_MAX_RETRIES"),
        "retry_delay_seconds": settings.get("SITECRAWL_RETRY_DELAY"),
        "fetch_mode": settings.get("SITECRAWL_FETCH_MODE"),
        "headed": settings.get("SITECRAWL_HEADED"),
        "robots": settings.get("SITECRAWL_ROBOTS"),
        "output_format": settings.get("SITECRAWL_OUTPUT_FORMAT"),
        "output_dir": settings.get("SITECRAWL_OUTPUT_DIR"),
        "log_dir": settings.get("SITECRAWL_LOG_DIR"),
    }
    user_agents = settings.get("SITECRAWL_USER_AGENTS")
    if user_agents:
        defaults["user_agents"] = tuple(user_agents)
    return {k: v for k, v in defaults.items() if v is not None}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for SiteCrawl application."""

    # Configuration
    config = providers.Configuration(default=ENV)

    crawl_defaults = providers.Callable(crawl_defaults_from_settings, config)

    # Config loading
    config_file_store = providers.Singleton(ConfigFileStore)

    crawl_config_parser = providers.Singleton(CrawlConfigParser)

    # Services - Singleton instances
    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int),
    )

    # Fresh robots.txt cache for every run
    robots_service = providers.Factory(
        RobotsService,
        http_service=http_service,
        user_agent=config.USER_AGENT.as_(str),
    )

    fetcher_factory = providers.Singleton(
        FetcherFactory,
        user_agent=config.USER_AGENT.as_(str),
    )

    page_extractor = providers.Singleton(
        PageExtractor
    )

    report_writer = providers.Factory(
        ReportWriter
    )

    # One executor per crawl run
    crawl_executor = providers.Factory(
        CrawlExecutor,
        fetcher_factory=fetcher_factory,
        extractor=page_extractor,
        report_writer=report_writer,
        robots_service=robots_service,
    )

    scheduler_service = providers.Factory(
        SchedulerService
    )
