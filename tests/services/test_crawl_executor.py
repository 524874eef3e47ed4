import threading
from unittest.mock import Mock

import pytest

from sitecrawl.domain.config import CrawlConfig
from sitecrawl.domain.http_response import HttpResponse
from sitecrawl.exceptions import CrawlInitializationError, ReportWriteError
from sitecrawl.services.crawl_executor import CrawlExecutor, CrawlState
from sitecrawl.services.report_writer import ReportWriter


def _html(title, *hrefs):
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>{title}</title></head><body>{anchors}</body></html>"


class FakeFetcher:
    """Serves pages from a dict; `script` maps a URL to responses/exceptions consumed in order."""

    def __init__(self, site, script=None, on_fetch=None):
        self.site = site
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.on_fetch = on_fetch
        self.fetched = []
        self.user_agents = []
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True

    def fetch(self, url, *, user_agent=None):
        self.fetched.append(url)
        self.user_agents.append(user_agent)
        if self.on_fetch is not None:
            self.on_fetch(self)
        if self.script.get(url):
            step = self.script[url].pop(0)
            if isinstance(step, Exception):
                raise step
            return step
        if url not in self.site:
            return HttpResponse(404, "not found", "text/html", url)
        return HttpResponse(200, self.site[url], "text/html", url)


class FakeFactory:
    def __init__(self, fetcher):
        self.fetcher = fetcher

    def get(self, config):
        return self.fetcher


def _config(**overrides):
    params = dict(
        target_url="https://example.com",
        max_depth=3,
        max_pages=50,
        concurrency=1,
        request_delay_seconds=0.5,
        max_retries=3,
        retry_delay_seconds=2.0,
        fetch_mode="http",
    )
    params.update(overrides)
    return CrawlConfig(**params)


def _executor(fetcher, **kwargs):
    sleeps = kwargs.pop("sleeps", [])
    return CrawlExecutor(
        fetcher_factory=FakeFactory(fetcher),
        sleep=sleeps.append,
        timer=lambda: 0.0,
        **kwargs,
    )


SITE = {
    "https://example.com": _html("A", "/b", "/c", "https://other.com/x"),
    "https://example.com/b": _html("B", "/d", "/"),
    "https://example.com/c": _html("C", "/b"),
    "https://example.com/d": _html("D"),
}


def test_breadth_first_order():
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config())

    assert [p.title for p in outcome.result.pages] == ["A", "B", "C", "D"]
    assert fetcher.fetched == [
        "https://example.com",
        "https://example.com/b",
        "https://example.com/c",
        "https://example.com/d",
    ]
    assert [p.depth for p in outcome.result.pages] == [0, 1, 1, 2]
    assert outcome.stopped is False


def test_external_links_never_fetched():
    fetcher = FakeFetcher(SITE)
    _executor(fetcher).crawl(_config())
    assert not any("other.com" in url for url in fetcher.fetched)


def test_depth_bound():
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config(max_depth=1))
    assert [p.title for p in outcome.result.pages] == ["A", "B", "C"]
    assert all(p.depth <= 1 for p in outcome.result.pages)


def test_zero_depth_crawls_only_seed():
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config(max_depth=0))
    assert fetcher.fetched == ["https://example.com"]
    assert outcome.result.stats.successful_pages == 1


def test_page_budget():
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config(max_pages=2))
    assert outcome.result.stats.successful_pages == 2
    assert [p.title for p in outcome.result.pages] == ["A", "B"]


def test_retry_then_success_records_one_page_and_backs_off_twice():
    site = {"https://example.com": _html("Seed")}
    fetcher = FakeFetcher(site, script={
        "https://example.com": [RuntimeError("timeout"), RuntimeError("timeout")],
    })
    sleeps = []
    outcome = _executor(fetcher, sleeps=sleeps).crawl(_config())

    assert outcome.result.stats.successful_pages == 1
    assert outcome.result.stats.failed_pages == 0
    assert outcome.result.errors == ()
    # Two linear backoffs, then the rate-limit delay after the page
    assert sleeps == [2.0, 4.0, 0.5]


def test_http_error_status_is_retried_then_recorded():
    fetcher = FakeFetcher({})
    sleeps = []
    outcome = _executor(fetcher, sleeps=sleeps).crawl(_config(max_retries=1))

    assert fetcher.fetched == ["https://example.com", "https://example.com"]
    assert outcome.result.stats.failed_pages == 1
    assert outcome.result.stats.total_pages == 1
    error = outcome.result.errors[0]
    assert error.url == "https://example.com"
    assert error.error_message == "HTTP 404"
    assert error.status_code == 404
    assert sleeps == [2.0, 0.5]


def test_failed_page_does_not_stop_the_crawl():
    site = dict(SITE)
    del site["https://example.com/b"]
    fetcher = FakeFetcher(site)
    outcome = _executor(fetcher).crawl(_config(max_retries=0))

    assert [p.title for p in outcome.result.pages] == ["A", "C"]
    assert [e.url for e in outcome.result.errors] == ["https://example.com/b"]
    stats = outcome.result.stats
    assert stats.total_pages == stats.successful_pages + stats.failed_pages


def test_rate_limit_after_every_processed_page():
    site = dict(SITE)
    del site["https://example.com/c"]
    fetcher = FakeFetcher(site)
    sleeps = []
    _executor(fetcher, sleeps=sleeps).crawl(_config(max_retries=0, request_delay_seconds=1.25))
    # A, B, C (failed), D
    assert sleeps == [1.25] * 4


def test_user_agents_rotate_across_pages():
    fetcher = FakeFetcher(SITE)
    _executor(fetcher).crawl(_config(user_agents=("ua1", "ua2", "ua3")))
    assert fetcher.user_agents == ["ua1", "ua2", "ua3", "ua1"]


def test_cancel_after_three_pages_discards_the_rest():
    site = {"https://example.com": _html("Home", *[f"/p{i}" for i in range(1, 10)])}
    for i in range(1, 10):
        site[f"https://example.com/p{i}"] = _html(f"P{i}")
    stop_event = threading.Event()

    def stop_on_third(fetcher):
        if len(fetcher.fetched) == 3:
            stop_event.set()

    fetcher = FakeFetcher(site, on_fetch=stop_on_third)
    report_writer = Mock()
    report_writer.write.return_value = ["report.json"]
    executor = _executor(fetcher, report_writer=report_writer)

    outcome = executor.crawl(_config(max_pages=10, max_depth=1), stop_event=stop_event)

    assert outcome.stopped is True
    assert outcome.result.stats.successful_pages == 3
    assert len(fetcher.fetched) == 3
    # The page in flight when the stop arrived completes normally
    assert outcome.result.errors == ()
    assert executor.frontier.pending == 0
    assert executor.state is CrawlState.FINALIZED
    assert fetcher.closed
    # Partial results are still flushed
    report_writer.write.assert_called_once()
    assert outcome.report_paths == ("report.json",)


def test_stop_before_first_page_yields_empty_result():
    stop_event = threading.Event()
    stop_event.set()
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config(), stop_event=stop_event)
    assert outcome.stopped is True
    assert fetcher.fetched == []
    assert outcome.result.is_finalized


def test_init_failure_raises_and_writes_no_report():
    fetcher = FakeFetcher(SITE)
    fetcher.open = Mock(side_effect=RuntimeError("no browser"))
    report_writer = Mock()
    executor = _executor(fetcher, report_writer=report_writer)

    with pytest.raises(CrawlInitializationError) as exc:
        executor.crawl(_config())

    assert isinstance(exc.value.original, RuntimeError)
    assert executor.state is CrawlState.FAILED
    assert fetcher.fetched == []
    report_writer.write.assert_not_called()


def test_fetcher_released_when_loop_raises():
    fetcher = FakeFetcher(SITE)
    robots = Mock()
    robots.allowed_by_robots.side_effect = [True, RuntimeError("unexpected")]
    report_writer = Mock()
    executor = _executor(fetcher, robots_service=robots, report_writer=report_writer)

    with pytest.raises(RuntimeError, match="unexpected"):
        executor.crawl(_config())

    assert fetcher.closed
    assert executor.state is CrawlState.FAILED
    # The page collected before the failure is flushed
    assert executor.result.is_finalized
    assert executor.result.stats.successful_pages == 1
    report_writer.write.assert_called_once()
    assert report_writer.write.call_args.args[0] is executor.result


def test_fetcher_opened_and_closed_once_per_run():
    fetcher = FakeFetcher(SITE)
    fetcher.open = Mock()
    fetcher.close = Mock()
    _executor(fetcher).crawl(_config())
    fetcher.open.assert_called_once_with()
    fetcher.close.assert_called_once_with()


def test_robots_disallowed_urls_are_skipped_without_delay():
    fetcher = FakeFetcher(SITE)
    robots = Mock()
    robots.allowed_by_robots.side_effect = lambda url, enabled: not url.endswith("/c")
    sleeps = []
    outcome = _executor(fetcher, robots_service=robots, sleeps=sleeps).crawl(_config())

    assert [p.title for p in outcome.result.pages] == ["A", "B", "D"]
    assert outcome.result.errors == ()
    assert sleeps == [0.5] * 3


def test_report_failure_is_captured_on_outcome():
    fetcher = FakeFetcher(SITE)
    report_writer = Mock()
    report_writer.write.side_effect = ReportWriteError("out/crawl.json", OSError("disk full"))
    outcome = _executor(fetcher, report_writer=report_writer).crawl(_config())

    assert isinstance(outcome.report_error, ReportWriteError)
    assert outcome.report_paths == ()
    assert outcome.result.stats.successful_pages == 4


def test_report_written_to_disk(tmp_path):
    fetcher = FakeFetcher(SITE)
    writer = ReportWriter()
    outcome = _executor(fetcher, report_writer=writer).crawl(
        _config(output_dir=str(tmp_path), output_format="both")
    )
    names = sorted(p.name.rsplit(".", 1)[1] for p in outcome.report_paths)
    assert names == ["csv", "json"]
    assert all(p.exists() for p in outcome.report_paths)


def test_executor_runs_a_single_crawl():
    executor = _executor(FakeFetcher(SITE))
    executor.crawl(_config())
    with pytest.raises(RuntimeError):
        executor.crawl(_config())


def test_concurrency_above_one_is_accepted_with_warning(caplog):
    fetcher = FakeFetcher(SITE)
    outcome = _executor(fetcher).crawl(_config(concurrency=4))
    assert outcome.result.stats.successful_pages == 4
    assert "concurrency=4" in caplog.text
