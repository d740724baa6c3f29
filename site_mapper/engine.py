# File: site_mapper/engine.py
"""site_mapper.engine: Orchestration layer для запуска обхода sitemap."""

from __future__ import annotations

from typing import Optional

from site_mapper.config import MapperConfig
from site_mapper.crawler.crawler import SitemapCrawler
from site_mapper.crawler.models import SitesData
from site_mapper.crawler.transport import Transport
from site_mapper.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    cfg: MapperConfig,
    url: Optional[str] = None,
    *,
    transport: Optional[Transport] = None,
) -> SitesData:
    """
    Запускает SitemapCrawler в контексте и возвращает помеченный результат.

    Parameters
    ----------
    cfg : MapperConfig
        Конфигурация обхода.
    url : str, optional
        Корневой sitemap; по умолчанию ``cfg.url``.
    transport : Transport, optional
        Альтернативный HTTP-транспорт (по умолчанию aiohttp).

    Returns
    -------
    SitesData
        Сайты и ошибки всего дерева.
    """
    logger.info("Starting crawl of %s", url or cfg.url)
    async with SitemapCrawler(cfg, transport=transport) as crawler:
        return await crawler.fetch(url)
