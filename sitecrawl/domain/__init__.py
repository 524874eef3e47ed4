"""Domain objects for SiteCrawl - explicit re-exports to satisfy linters."""
from .config import CrawlConfig as CrawlConfig
from .crawl_result import CrawlOutcome as CrawlOutcome
from .crawl_result import CrawlResult as CrawlResult
from .crawl_result import CrawlStats as CrawlStats
from .link import Heading as Heading
from .link import Image as Image
from .link import Link as Link
from .page import ErrorRecord as ErrorRecord
from .page import ExtractedPage as ExtractedPage
from .page import FrontierEntry as FrontierEntry
from .page import PageRecord as PageRecord

__all__ = [
    "CrawlConfig",
    "CrawlOutcome",
    "CrawlResult",
    "CrawlStats",
    "ErrorRecord",
    "ExtractedPage",
    "FrontierEntry",
    "Heading",
    "Image",
    "Link",
    "PageRecord",
]
