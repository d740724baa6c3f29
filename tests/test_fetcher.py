# File: tests/test_fetcher.py
import asyncio

import pytest

from conftest import FakeTransport, urlset_xml
from site_mapper.config import MapperConfig
from site_mapper.crawler.fetcher import Fetcher
from site_mapper.crawler.models import ErrorKind, FetchFailure
from site_mapper.crawler.transport import TransportError, TransportResponse
from site_mapper.parser.sitemap_parser import UrlSet

URL = "https://example.com/sitemap.xml"


def make_fetcher(route, **config) -> Fetcher:
    return Fetcher(FakeTransport({URL: route}), MapperConfig(**config))


@pytest.mark.asyncio()
async def test_fetch_plain_urlset():
    doc = await make_fetcher(urlset_xml("https://example.com/a")).fetch(URL)

    assert isinstance(doc, UrlSet)
    assert [e.loc for e in doc.entries] == ["https://example.com/a"]


@pytest.mark.asyncio()
async def test_fetch_gzip_by_signature(gzipped):
    doc = await make_fetcher(gzipped(urlset_xml("https://example.com/a"))).fetch(URL)

    assert [e.loc for e in doc.entries] == ["https://example.com/a"]


@pytest.mark.asyncio()
async def test_non_200_is_http_error_without_parsing():
    calls = []

    def parser(body):
        calls.append(body)
        raise AssertionError("body must not be parsed")

    fetcher = Fetcher(
        FakeTransport({URL: TransportResponse(301, "Moved Permanently", b"<urlset/>")}),
        MapperConfig(),
        parser=parser,
    )
    with pytest.raises(FetchFailure) as excinfo:
        await fetcher.fetch(URL)

    assert excinfo.value.kind is ErrorKind.HTTP_ERROR
    assert excinfo.value.message == "HTTP Error occurred: 301 Moved Permanently"
    assert calls == []


@pytest.mark.asyncio()
async def test_transport_error_is_http_error():
    with pytest.raises(FetchFailure) as excinfo:
        await make_fetcher(TransportError("ClientConnectorError: refused")).fetch(URL)

    assert excinfo.value.kind is ErrorKind.HTTP_ERROR
    assert "refused" in excinfo.value.message


@pytest.mark.asyncio()
async def test_timeout_cancels_request():
    transport = FakeTransport({URL: urlset_xml()}, delay=1.0)
    fetcher = Fetcher(transport, MapperConfig(timeout=0.05))

    with pytest.raises(FetchFailure) as excinfo:
        await fetcher.fetch(URL)
    await asyncio.sleep(0)

    assert excinfo.value.kind is ErrorKind.TIMEOUT
    assert URL in excinfo.value.message
    assert transport.in_flight == 0


@pytest.mark.asyncio()
async def test_malformed_xml_is_parse_error():
    with pytest.raises(FetchFailure) as excinfo:
        await make_fetcher("<urlset><url>").fetch(URL)

    assert excinfo.value.kind is ErrorKind.PARSE_ERROR


@pytest.mark.asyncio()
async def test_empty_body_is_parse_error():
    with pytest.raises(FetchFailure) as excinfo:
        await make_fetcher(b"").fetch(URL)

    assert excinfo.value.kind is ErrorKind.PARSE_ERROR
