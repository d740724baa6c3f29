"""site_mapper.parser: XML deserialization of sitemap documents and field projection."""

from site_mapper.parser.fields import FIELD_EXTRACTORS, SitemapField, project_entry, resolve_fields
from site_mapper.parser.sitemap_parser import (
    SitemapDocument,
    SitemapIndex,
    SitemapParseError,
    UnknownDocument,
    UrlEntry,
    UrlSet,
    parse_sitemap,
)

__all__ = [
    "FIELD_EXTRACTORS",
    "SitemapDocument",
    "SitemapField",
    "SitemapIndex",
    "SitemapParseError",
    "UnknownDocument",
    "UrlEntry",
    "UrlSet",
    "parse_sitemap",
    "project_entry",
    "resolve_fields",
]
