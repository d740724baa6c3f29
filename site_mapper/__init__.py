"""
SiteMapper package initializer.
Defines package version and exposes the crawler API.
"""
__version__ = "0.1.0"

from site_mapper.config import MapperConfig, load_config
from site_mapper.crawler import CrawlError, CrawlResult, ErrorKind, SitemapCrawler, SitesData
from site_mapper.engine import start_crawl
from site_mapper.parser import SitemapField

__all__ = [
    "__version__",
    "CrawlError",
    "CrawlResult",
    "ErrorKind",
    "MapperConfig",
    "SitemapCrawler",
    "SitemapField",
    "SitesData",
    "load_config",
    "start_crawl",
]
