# === FILE: site_mapper/crawler/crawler.py ===
from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

from site_mapper.config import MapperConfig
from site_mapper.crawler.fetcher import Fetcher, Parser
from site_mapper.crawler.models import (
    CrawlResult,
    ErrorKind,
    FetchFailure,
    Site,
    SitesData,
    merge_results,
)
from site_mapper.crawler.transport import AiohttpTransport, Transport
from site_mapper.logger import get_logger
from site_mapper.parser.fields import project_entry
from site_mapper.parser.sitemap_parser import (
    SitemapDocument,
    SitemapIndex,
    UrlEntry,
    UrlSet,
    parse_sitemap,
)

__all__ = ("SitemapCrawler",)


class SitemapCrawler:
    """Асинхронный обход дерева sitemap с общим лимитом параллельности и retry."""

    def __init__(
        self,
        config: MapperConfig,
        *,
        transport: Optional[Transport] = None,
        parser: Parser = parse_sitemap,
    ) -> None:
        self.config = config
        self.logger = get_logger("crawler")
        self._owned_transport: Optional[AiohttpTransport] = None
        if transport is None:
            self._owned_transport = AiohttpTransport(proxy=config.proxy)
            transport = self._owned_transport
        self.fetcher = Fetcher(transport, config, parser=parser)
        # one FIFO limiter for the whole tree, shared by every recursive call
        self._limiter = asyncio.Semaphore(config.concurrency)

    async def __aenter__(self) -> SitemapCrawler:
        if self._owned_transport is not None:
            await self._owned_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owned_transport is not None:
            await self._owned_transport.close()

    async def fetch(self, url: Optional[str] = None) -> SitesData:
        """Обходит дерево от *url* (или ``config.url``); никогда не бросает исключений."""
        url = url or self.config.url
        if not url:
            return SitesData.from_result(
                "", CrawlResult.failed("", ErrorKind.INTERNAL_ERROR, "No sitemap URL given")
            )
        if self.config.lastmod:
            self.logger.debug("Using minimum lastmod value of %s", self.config.lastmod)

        try:
            result = await self.crawl(url)
        except Exception as exc:
            self.logger.error("Crawl of %s failed: %s", url, exc)
            result = CrawlResult.failed(url, ErrorKind.INTERNAL_ERROR, _describe(exc))
        self.logger.info(
            "Crawled %s: %d sites, %d errors", url, len(result.sites), len(result.errors)
        )
        return SitesData.from_result(url, result)

    async def crawl(
        self, url: str, retry_index: int = 0, ancestors: Tuple[str, ...] = ()
    ) -> CrawlResult:
        """Crawl one node; failures become a CrawlError for this branch only."""
        try:
            try:
                document = await self._fetch_limited(url)
            except FetchFailure as failure:
                if retry_index < self.config.retries:
                    self._log_retry(url, retry_index, failure.kind.value)
                    return await self.crawl(url, retry_index + 1, ancestors)
                self.logger.warning("Error occurred during crawl('%s'): %s", url, failure.message)
                return CrawlResult.failed(url, failure.kind, failure.message, retry_index)

            if isinstance(document, UrlSet):
                self.logger.debug("Urlset found during crawl('%s')", url)
                return CrawlResult(sites=self._extract_sites(url, document.entries))

            if isinstance(document, SitemapIndex):
                self.logger.debug("Additional sitemap found during crawl('%s')", url)
                return await self._crawl_children(url, document.sitemaps, ancestors + (url,))

            if retry_index < self.config.retries:
                self._log_retry(url, retry_index, "UnknownState")
                return await self.crawl(url, retry_index + 1, ancestors)
            self.logger.error("Unknown state during crawl('%s'): %r", url, document)
            return CrawlResult.failed(
                url,
                ErrorKind.INTERNAL_ERROR,
                f"Unrecognized sitemap document: {document!r}",
                retry_index,
            )
        except Exception as exc:
            self.logger.exception("Unexpected error during crawl('%s')", url)
            return CrawlResult.failed(url, ErrorKind.INTERNAL_ERROR, _describe(exc), retry_index)

    async def _fetch_limited(self, url: str) -> SitemapDocument:
        async with self._limiter:
            return await self.fetcher.fetch(url)

    async def _crawl_children(
        self, url: str, children: Tuple[str, ...], lineage: Tuple[str, ...]
    ) -> CrawlResult:
        depth = len(lineage)
        tasks = []
        for child in children:
            guard = self._guard(child, lineage, depth)
            if guard is not None:
                tasks.append(_resolved(guard))
            else:
                tasks.append(self.crawl(child, ancestors=lineage))
        # gather keeps listing order whatever the completion order
        results: List[CrawlResult] = await asyncio.gather(*tasks)
        # a child with errors contributes only its errors
        return merge_results(r if not r.errors else CrawlResult(errors=r.errors) for r in results)

    def _guard(self, child: str, lineage: Tuple[str, ...], depth: int) -> Optional[CrawlResult]:
        if child in lineage:
            self.logger.warning("Sitemap cycle detected: %s", child)
            return CrawlResult.failed(child, ErrorKind.INTERNAL_ERROR, "Sitemap cycle detected")
        if self.config.max_depth is not None and depth > self.config.max_depth:
            self.logger.warning("Maximum sitemap depth exceeded: %s", child)
            return CrawlResult.failed(
                child, ErrorKind.INTERNAL_ERROR, "Maximum sitemap depth exceeded"
            )
        return None

    def _extract_sites(self, url: str, entries: Tuple[UrlEntry, ...]) -> Tuple[Site, ...]:
        threshold = self.config.lastmod
        if threshold:
            entries = tuple(
                e for e in entries if e.lastmod is not None and e.lastmod.timestamp() >= threshold
            )
        if not self.config.fields:
            return tuple(e.loc for e in entries)
        return tuple(project_entry(e, self.config.fields, url) for e in entries)

    def _log_retry(self, url: str, retry_index: int, reason: str) -> None:
        self.logger.info(
            "(Retry attempt: %d / %d) %s due to %s on previous request",
            retry_index + 1,
            self.config.retries,
            url,
            reason,
        )


async def _resolved(result: CrawlResult) -> CrawlResult:
    return result


def _describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"
