# File: site_mapper/parser/sitemap_parser.py
"""site_mapper.parser.sitemap_parser: XML deserialization of sitemap documents.

A sitemap body is turned into one of three shapes:

* :class:`UrlSet` – a ``<urlset>`` leaf with its ``<url>`` entries;
* :class:`SitemapIndex` – a ``<sitemapindex>`` listing child sitemap locations;
* :class:`UnknownDocument` – any other well-formed XML root.

Malformed XML raises :class:`SitemapParseError`.

Пример:
```python
from site_mapper.parser.sitemap_parser import parse_sitemap, UrlSet

doc = parse_sitemap(b"<urlset><url><loc>https://example.com/</loc></url></urlset>")
assert isinstance(doc, UrlSet)
print([entry.loc for entry in doc.entries])
```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union

from lxml import etree

from site_mapper.utils import parse_lastmod

__all__ = (
    "SitemapDocument",
    "SitemapIndex",
    "SitemapParseError",
    "UnknownDocument",
    "UrlEntry",
    "UrlSet",
    "parse_sitemap",
)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# Namespace URI -> prefix used for value keys ("" keeps the bare local name).
_NS_PREFIXES: Dict[str, str] = {
    SITEMAP_NS: "",
    "http://www.google.com/schemas/sitemap/0.84": "",
    "http://www.google.com/schemas/sitemap-image/1.1": "image",
    "http://www.google.com/schemas/sitemap-video/1.1": "video",
    "http://www.google.com/schemas/sitemap-news/0.9": "news",
    "http://www.w3.org/1999/xhtml": "xhtml",
}


class SitemapParseError(ValueError):
    """Raised when a sitemap body is not well-formed XML."""


@dataclass(frozen=True, slots=True)
class UrlEntry:
    """One ``<url>`` element: location, parsed lastmod and raw child values."""

    loc: str
    lastmod: Optional[datetime] = None
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only view over a private copy
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


@dataclass(frozen=True, slots=True)
class UrlSet:
    entries: Tuple[UrlEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class SitemapIndex:
    sitemaps: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UnknownDocument:
    tag: str


SitemapDocument = Union[UrlSet, SitemapIndex, UnknownDocument]


def _key(element: etree._Element) -> str:
    qname = etree.QName(element)
    prefix = _NS_PREFIXES.get(qname.namespace or "", "")
    return f"{prefix}:{qname.localname}" if prefix else qname.localname


def _text(element: etree._Element) -> str:
    return (element.text or "").strip()


def _elements(parent: etree._Element):
    # comments and processing instructions have a non-string tag
    return (child for child in parent if isinstance(child.tag, str))


def _collect_values(url_el: etree._Element) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for child in _elements(url_el):
        nested = list(_elements(child))
        if not nested:
            values.setdefault(_key(child), _text(child))
            continue
        for grandchild in nested:
            values.setdefault(_key(grandchild), _text(grandchild))
    return values


def _parse_urlset(root: etree._Element) -> UrlSet:
    entries = []
    for url_el in _elements(root):
        if _key(url_el) != "url":
            continue
        values = _collect_values(url_el)
        loc = values.get("loc")
        if not loc:
            continue
        entries.append(UrlEntry(loc=loc, lastmod=parse_lastmod(values.get("lastmod")), values=values))
    return UrlSet(entries=tuple(entries))


def _parse_index(root: etree._Element) -> SitemapIndex:
    locations = []
    for sitemap_el in _elements(root):
        if _key(sitemap_el) != "sitemap":
            continue
        for child in _elements(sitemap_el):
            if _key(child) == "loc" and _text(child):
                locations.append(_text(child))
                break
    return SitemapIndex(sitemaps=tuple(locations))


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает XML sitemap и возвращает распознанный документ.

    Args:
        xml_content: тело sitemap (``bytes`` или ``str``).

    Returns:
        :class:`UrlSet`, :class:`SitemapIndex` или :class:`UnknownDocument`.

    Raises:
        SitemapParseError: если XML некорректен.
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    if not xml_content.strip():
        raise SitemapParseError("Empty sitemap document")
    parser = etree.XMLParser(ns_clean=True, recover=False, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise SitemapParseError(f"Malformed sitemap XML: {exc}") from exc
    if root is None:
        raise SitemapParseError("Empty sitemap document")

    tag = _key(root)
    if tag == "urlset":
        return _parse_urlset(root)
    if tag == "sitemapindex":
        return _parse_index(root)
    return UnknownDocument(tag=tag)
