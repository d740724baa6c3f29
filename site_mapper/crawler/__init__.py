"""site_mapper.crawler: Recursive sitemap crawler, fetcher and HTTP transport."""

from site_mapper.crawler.crawler import SitemapCrawler
from site_mapper.crawler.fetcher import Fetcher
from site_mapper.crawler.models import (
    CrawlError,
    CrawlResult,
    ErrorKind,
    FetchFailure,
    SitesData,
    merge_results,
)
from site_mapper.crawler.transport import (
    AiohttpTransport,
    Transport,
    TransportError,
    TransportResponse,
)

__all__ = [
    "AiohttpTransport",
    "CrawlError",
    "CrawlResult",
    "ErrorKind",
    "FetchFailure",
    "Fetcher",
    "SitemapCrawler",
    "SitesData",
    "Transport",
    "TransportError",
    "TransportResponse",
    "merge_results",
]
