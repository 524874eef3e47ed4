import csv
import io
import json
import logging
from pathlib import Path
from typing import Optional

from sitecrawl.domain.config import CrawlConfig
from sitecrawl.domain.crawl_result import CrawlResult
from sitecrawl.exceptions import ReportWriteError
from sitecrawl.utils.datetime_utils import file_timestamp, to_iso

logger = logging.getLogger(__name__)

CSV_HEADERS = ["url", "depth", "title", "statusCode", "loadTimeMs", "linksCount", "imagesCount", "timestamp"]


def build_report(result: CrawlResult, config: CrawlConfig) -> dict:
    """Assemble the JSON report document for a finalized result."""
    return {
        "crawl": {
            "targetUrl": config.target_url,
            "startTime": to_iso(result.started_at),
            "endTime": to_iso(result.finished_at) if result.finished_at else None,
            "duration": f"{result.duration_seconds:.2f}s" if result.duration_seconds is not None else None,
            "config": config.summary(),
        },
        "stats": result.stats.to_dict(),
        "pages": [p.to_dict() for p in result.pages],
        "errors": [e.to_dict() for e in result.errors],
    }


def render_csv(result: CrawlResult) -> str:
    """One row per page; string fields are quoted with internal quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for p in result.pages:
        writer.writerow([
            p.url,
            p.depth,
            p.title or "",
            p.status_code,
            p.load_time_ms,
            len(p.links),
            len(p.images),
            p.timestamp,
        ])
    return buf.getvalue()


class ReportWriter:
    """Serializes a finalized crawl result to disk as JSON and/or CSV.

    A separate `-errors.json` file is written only when the run recorded errors.
    """

    def __init__(self, output_dir: Optional[str] = None, output_format: Optional[str] = None):
        self.output_dir = output_dir
        self.output_format = output_format

    def _write(self, path: Path, content: str) -> Path:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ReportWriteError(path, e) from e
        return path

    def write(self, result: CrawlResult, config: CrawlConfig) -> list[Path]:
        if not result.is_finalized:
            raise ValueError("crawl result must be finalized before it is written")

        output_dir = Path(self.output_dir or config.output_dir)
        output_format = self.output_format or config.output_format
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReportWriteError(output_dir, e) from e

        base = output_dir / f"crawl-{file_timestamp(result.started_at)}"
        written = []

        if output_format in ("json", "both"):
            payload = json.dumps(build_report(result, config), indent=2, ensure_ascii=False)
            written.append(self._write(base.with_name(base.name + ".json"), payload))
            logger.info("JSON output saved: %s", written[-1])

        if output_format in ("csv", "both"):
            written.append(self._write(base.with_name(base.name + ".csv"), render_csv(result)))
            logger.info("CSV output saved: %s", written[-1])

        if result.errors:
            payload = json.dumps([e.to_dict() for e in result.errors], indent=2, ensure_ascii=False)
            written.append(self._write(base.with_name(base.name + "-errors.json"), payload))
            logger.info("Error log saved: %s", written[-1])

        return written
