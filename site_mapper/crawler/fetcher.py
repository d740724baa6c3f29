# site_mapper/crawler/fetcher.py
"""
Fetcher module: one HTTP request per call with a per-request deadline,
outcome classification, gzip detection and XML parsing.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Union

from site_mapper.config import MapperConfig
from site_mapper.crawler.models import ErrorKind, FetchFailure
from site_mapper.crawler.transport import Transport, TransportError, TransportResponse
from site_mapper.logger import get_logger
from site_mapper.parser.sitemap_parser import SitemapDocument, SitemapParseError, parse_sitemap
from site_mapper.utils import gunzip, is_gzip

Parser = Callable[[Union[str, bytes]], SitemapDocument]


class Fetcher:
    """Downloads and parses a single sitemap; failures raise :class:`FetchFailure`."""

    def __init__(
        self,
        transport: Transport,
        config: MapperConfig,
        parser: Parser = parse_sitemap,
    ) -> None:
        self.transport = transport
        self.config = config
        self.parser = parser
        self.logger = get_logger("fetcher")

    async def fetch(self, url: str) -> SitemapDocument:
        """
        Fetch *url* once and return the parsed document.

        Raises FetchFailure with kind Timeout, HttpError or ParseError.
        """
        response = await self._request(url)

        if response.status != 200:
            raise FetchFailure(
                ErrorKind.HTTP_ERROR,
                f"HTTP Error occurred: {response.status} {response.reason}".rstrip(),
            )

        body = await self._decode(url, response.body)
        try:
            return self.parser(body)
        except SitemapParseError as exc:
            raise FetchFailure(ErrorKind.PARSE_ERROR, f"{exc} (url: '{url}')") from exc

    async def _request(self, url: str) -> TransportResponse:
        # wait_for scopes the cancellation to this call: the pending send is
        # cancelled on expiry and nothing outlives the await.
        try:
            return await asyncio.wait_for(
                self.transport.send(
                    url,
                    headers=self.config.request_headers,
                    verify_ssl=self.config.verify_ssl,
                ),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            raise FetchFailure(
                ErrorKind.TIMEOUT,
                f"Request timed out after {self.config.timeout} seconds for url: '{url}'",
            ) from None
        except TransportError as exc:
            raise FetchFailure(ErrorKind.HTTP_ERROR, f"Error occurred: {exc}") from exc

    async def _decode(self, url: str, body: bytes) -> bytes:
        if not is_gzip(body):
            return body
        self.logger.debug("Gzip payload detected for %s", url)
        try:
            return await asyncio.to_thread(gunzip, body)
        except ValueError as exc:
            raise FetchFailure(ErrorKind.PARSE_ERROR, f"{exc} (url: '{url}')") from exc
