import io
import logging

import pytest

from sitecrawl.utils.logging_utils import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_console_only_without_log_dir(restore_root_logger):
    stream = io.StringIO()
    paths = configure_logging(None, debug=False, stream=stream)

    logging.getLogger("sitecrawl.test").info("hello %s", "world")

    assert paths == []
    assert "[INFO] sitecrawl.test: hello world" in stream.getvalue()
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_run_and_error_logs_written(tmp_path, restore_root_logger):
    stream = io.StringIO()
    run_log, error_log = configure_logging(str(tmp_path / "logs"), debug=True, stream=stream)

    log = logging.getLogger("sitecrawl.test")
    log.debug("visiting")
    log.error("Save error: disk full")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert run_log.name.startswith("crawl-")
    assert error_log.name.startswith("crawl-error-")
    run_text = run_log.read_text(encoding="utf-8")
    error_text = error_log.read_text(encoding="utf-8")
    assert "visiting" in run_text
    assert "Save error" in run_text
    assert "Save error" in error_text
    assert "visiting" not in error_text
