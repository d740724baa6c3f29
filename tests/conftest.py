# File: tests/conftest.py
import asyncio
import gzip
from collections import Counter
from collections.abc import AsyncIterator, Callable
from typing import Dict, Union

import pytest
from aiohttp import web

from site_mapper.config import MapperConfig
from site_mapper.crawler.transport import TransportResponse

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def urlset_xml(*entries: Union[str, Dict[str, str]], extra_ns: str = "") -> str:
    """Build a <urlset>; an entry is a loc string or a mapping of child tags."""
    items = []
    for entry in entries:
        fields = {"loc": entry} if isinstance(entry, str) else entry
        body = "".join(f"<{tag}>{value}</{tag}>" for tag, value in fields.items())
        items.append(f"<url>{body}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="{SITEMAP_NS}"{extra_ns}>{"".join(items)}</urlset>'
    )


def index_xml(*locations: str) -> str:
    body = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locations)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="{SITEMAP_NS}">{body}</sitemapindex>'


Route = Union[str, bytes, TransportResponse, BaseException, Callable[[int], object]]


class FakeTransport:
    """In-memory transport: routes map a URL to a body, a response or an exception.

    A callable route receives the 1-based attempt number for that URL.
    """

    def __init__(self, routes: Dict[str, Route], delay: Union[float, Dict[str, float]] = 0.0) -> None:
        self.routes = routes
        self.delay = delay
        self.calls: Counter = Counter()
        self.order: list = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _delay_for(self, url: str) -> float:
        if isinstance(self.delay, dict):
            return self.delay.get(url, 0.0)
        return self.delay

    async def send(self, url, *, headers, verify_ssl):
        self.calls[url] += 1
        self.order.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delay_for(url))
            route = self.routes.get(url)
            if callable(route):
                route = route(self.calls[url])
            if route is None:
                return TransportResponse(404, "Not Found", b"")
            if isinstance(route, BaseException):
                raise route
            if isinstance(route, TransportResponse):
                return route
            body = route.encode("utf-8") if isinstance(route, str) else route
            return TransportResponse(200, "OK", body)
        finally:
            self.in_flight -= 1


class RecordingTransport(FakeTransport):
    """FakeTransport that also remembers the request options."""

    def __init__(self, routes, **kwargs) -> None:
        super().__init__(routes, **kwargs)
        self.requests: list = []

    async def send(self, url, *, headers, verify_ssl):
        self.requests.append({"url": url, "headers": dict(headers), "verify_ssl": verify_ssl})
        return await super().send(url, headers=headers, verify_ssl=verify_ssl)


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app, shutdown_timeout=0.5)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def basic_config() -> MapperConfig:
    """Return a basic valid MapperConfig for crawler tests."""
    return MapperConfig(timeout=2.0, concurrency=4, retries=0)


@pytest.fixture()
def gzipped() -> Callable[[str], bytes]:
    return lambda text: gzip.compress(text.encode("utf-8"))


