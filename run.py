"""Command-line entry point: crawl a site once, or on a cron schedule."""
import argparse
import dataclasses
import logging
import signal
import sys
import threading
from typing import Optional

from sitecrawl import config as env
from sitecrawl.container import Container
from sitecrawl.domain.config import FETCH_MODES, OUTPUT_FORMATS, CrawlConfig
from sitecrawl.domain.crawl_result import CrawlOutcome
from sitecrawl.exceptions import ConfigNotFoundError, CrawlInitializationError
from sitecrawl.utils.logging_utils import configure_logging

logger = logging.getLogger("sitecrawl")

EXIT_OK = 0
EXIT_INIT_FAILURE = 1
EXIT_BAD_CONFIG = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitecrawl",
        description="Crawl a site breadth-first and write a JSON/CSV report of its pages.",
    )
    parser.add_argument("url", nargs="?", help="Seed URL (overrides the crawl file)")
    parser.add_argument("-c", "--config", help="YAML crawl file")
    parser.add_argument("-d", "--depth", type=int, dest="max_depth", help="Maximum crawl depth (default: 3)")
    parser.add_argument("-p", "--max-pages", type=int, dest="max_pages", help="Maximum pages to crawl (default: 50)")
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, dest="output_format", help="Report format (default: json)")
    parser.add_argument("-o", "--output", dest="output_dir", help="Report directory")
    parser.add_argument("--log-dir", dest="log_dir", help="Directory for run and error logs")
    parser.add_argument("--fetch-mode", choices=FETCH_MODES, dest="fetch_mode", help="Fetcher to use")
    parser.add_argument("--headed", action="store_true", default=None, help="Show the browser window")
    parser.add_argument("--delay", type=float, dest="request_delay_seconds", help="Seconds to wait between pages")
    parser.add_argument("--timeout-ms", type=int, dest="page_timeout_ms", help="Per-page timeout in milliseconds")
    parser.add_argument("--retries", type=int, dest="max_retries", help="Retries per page")
    parser.add_argument("--no-robots", action="store_false", default=None, dest="robots", help="Ignore robots.txt")
    parser.add_argument("--schedule", help="Cron expression; keep running and crawl on this schedule")
    parser.add_argument("--once", action="store_true", help="Ignore any schedule and crawl once")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def load_crawl_config(args: argparse.Namespace, container: Container) -> CrawlConfig:
    """Merge env defaults, the optional YAML crawl file, and CLI flags into a CrawlConfig."""
    data = {}
    if args.config:
        data = container.config_file_store().load_yaml_dict(args.config)
    overrides = {
        "target_url": args.url,
        "max_depth": args.max_depth,
        "max_pages": args.max_pages,
        "output_format": args.output_format,
        "output_dir": args.output_dir,
        "log_dir": args.log_dir,
        "fetch_mode": args.fetch_mode,
        "headed": args.headed,
        "request_delay_seconds": args.request_delay_seconds,
        "page_timeout_ms": args.page_timeout_ms,
        "max_retries": args.max_retries,
        "robots": args.robots,
        "schedule": args.schedule,
    }
    cfg = container.crawl_config_parser().parse(
        data=data,
        config_path=args.config,
        defaults=container.crawl_defaults(),
        overrides=overrides,
    )
    if args.once and cfg.schedule:
        cfg = dataclasses.replace(cfg, schedule=None)
    return cfg


def install_signal_handlers(stop_event: threading.Event) -> dict:
    """Route SIGINT/SIGTERM to `stop_event`. Returns the previous handlers."""
    def _handle(signum, frame):
        logger.warning("Received %s, shutting down gracefully...", signal.Signals(signum).name)
        stop_event.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[sig] = signal.signal(sig, _handle)
        except ValueError:
            # Not the main thread; the caller owns the stop event.
            logger.debug("Cannot install handler for %s outside the main thread", sig)
    return previous


def restore_signal_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def run_crawl(container: Container, cfg: CrawlConfig, stop_event: threading.Event) -> CrawlOutcome:
    """Run one crawl with a fresh executor and print its summary."""
    executor = container.crawl_executor()
    outcome = executor.crawl(cfg, stop_event=stop_event)
    print_summary(outcome, cfg)
    stats = outcome.result.stats
    logger.info(
        "Crawl %s: %s pages in %.2fs",
        "cancelled" if outcome.stopped else "complete",
        stats.successful_pages,
        outcome.result.duration_seconds or 0.0,
    )
    return outcome


def print_summary(outcome: CrawlOutcome, cfg: CrawlConfig, stream=None) -> None:
    stream = stream or sys.stdout
    stats = outcome.result.stats
    status = "CANCELLED" if outcome.stopped else "COMPLETE"
    lines = [
        "=" * 50,
        "CRAWL REPORT",
        "=" * 50,
        f"Status:          {status}",
        f"Duration:        {outcome.result.duration_seconds or 0.0:.2f}s",
        f"Pages crawled:   {stats.successful_pages}",
        f"Pages failed:    {stats.failed_pages}",
        f"Links found:     {stats.total_links}",
        f"Images found:    {stats.total_images}",
        f"Tables found:    {stats.total_tables}",
        f"Output dir:      {cfg.output_dir}",
    ]
    for path in outcome.report_paths:
        lines.append(f"Report:          {path}")
    if outcome.report_error is not None:
        lines.append(f"Report error:    {outcome.report_error}")
    stream.write("\n".join(lines) + "\n")


def main(argv: Optional[list] = None, container: Optional[Container] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    debug = args.debug or env.debug_enabled()
    container = container or Container()

    try:
        cfg = load_crawl_config(args, container)
    except (ConfigNotFoundError, ValueError, TypeError) as e:
        configure_logging(None, debug)
        logger.error("Invalid configuration: %s", e)
        return EXIT_BAD_CONFIG

    configure_logging(cfg.log_dir, debug)
    stop_event = threading.Event()
    previous = install_signal_handlers(stop_event)
    try:
        if cfg.schedule:
            scheduler = container.scheduler_service(
                start_crawl_callback=lambda c, ev: run_crawl(container, c, ev),
                stop_event=stop_event,
            )
            try:
                scheduler.run_forever(cfg)
            except ValueError as e:
                logger.error("Invalid configuration: %s", e)
                return EXIT_BAD_CONFIG
            return EXIT_OK

        run_crawl(container, cfg, stop_event)
        return EXIT_OK
    except CrawlInitializationError as e:
        logger.error("Crawl failed: %s", e)
        return EXIT_INIT_FAILURE
    finally:
        restore_signal_handlers(previous)


if __name__ == "__main__":
    raise SystemExit(main())
