import logging
import sys
from pathlib import Path
from typing import Optional

from sitecrawl.utils.datetime_utils import file_timestamp

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_dir: Optional[str] = None, debug: bool = False, stream=None) -> list[Path]:
    """Set up console logging plus, when `log_dir` is given, a run log and an error-only log.

    Returns the paths of the log files that were opened.
    """
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    # Third-party chatter stays at WARNING unless debugging.
    for noisy in ("urllib3", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)

    if not log_dir:
        return []

    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    stamp = file_timestamp()
    run_log = path / f"crawl-{stamp}.log"
    error_log = path / f"crawl-error-{stamp}.log"

    file_handler = logging.FileHandler(run_log, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    error_handler = logging.FileHandler(error_log, encoding="utf-8", delay=True)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root.addHandler(error_handler)

    return [run_log, error_log]
