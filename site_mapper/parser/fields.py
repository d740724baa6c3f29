# File: site_mapper/parser/fields.py
"""site_mapper.parser.fields: Recognised sitemap fields and their extractors.

Field projection is selected once, at configuration time, from the closed
set :class:`SitemapField`. Each member maps to a function pulling its value
out of a :class:`~site_mapper.parser.sitemap_parser.UrlEntry`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from site_mapper.parser.sitemap_parser import UrlEntry

__all__ = ("FIELD_EXTRACTORS", "SitemapField", "project_entry", "resolve_fields")


class SitemapField(str, Enum):
    LOC = "loc"
    LASTMOD = "lastmod"
    CHANGEFREQ = "changefreq"
    PRIORITY = "priority"
    SITEMAP = "sitemap"
    IMAGE_LOC = "image:loc"
    IMAGE_TITLE = "image:title"
    IMAGE_CAPTION = "image:caption"
    VIDEO_TITLE = "video:title"
    VIDEO_DESCRIPTION = "video:description"
    VIDEO_THUMBNAIL_LOC = "video:thumbnail_loc"
    NEWS_TITLE = "news:title"
    NEWS_PUBLICATION_DATE = "news:publication_date"


#: (entry, url of the sitemap the entry was listed in) -> value
FieldExtractor = Callable[[UrlEntry, str], Optional[str]]


def _raw_value(name: str) -> FieldExtractor:
    def extract(entry: UrlEntry, _sitemap_url: str) -> Optional[str]:
        return entry.values.get(name)

    return extract


FIELD_EXTRACTORS: Dict[SitemapField, FieldExtractor] = {
    SitemapField.LOC: lambda entry, _sitemap_url: entry.loc,
    SitemapField.SITEMAP: lambda _entry, sitemap_url: sitemap_url,
}
for _field in SitemapField:
    FIELD_EXTRACTORS.setdefault(_field, _raw_value(_field.value))


def project_entry(
    entry: UrlEntry, selector: Sequence[SitemapField], sitemap_url: str
) -> Dict[str, Optional[str]]:
    """Return a record holding only the selected fields (missing ones as ``None``)."""
    return {f.value: FIELD_EXTRACTORS[f](entry, sitemap_url) for f in selector}


def resolve_fields(value: Any) -> Optional[Tuple[SitemapField, ...]]:
    """Normalise a field selector into an ordered tuple of :class:`SitemapField`.

    Accepts ``None``/``False`` (projection disabled), a mapping of
    ``{name: bool}`` (truthy names kept) or an iterable of names. Unknown
    names raise :class:`ValueError`. An empty selection disables projection.
    """
    if value is None or value is False:
        return None
    if isinstance(value, str):
        names: Iterable[Any] = [value]
    elif isinstance(value, Mapping):
        names = [name for name, active in value.items() if active]
    else:
        names = value

    selected = []
    for name in names:
        try:
            member = name if isinstance(name, SitemapField) else SitemapField(str(name))
        except ValueError:
            known = ", ".join(f.value for f in SitemapField)
            raise ValueError(f"Unknown sitemap field {name!r}; expected one of: {known}") from None
        if member not in selected:
            selected.append(member)
    return tuple(selected) or None
