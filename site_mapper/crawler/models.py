# site_mapper/crawler/models.py
"""
Data models for the SiteMapper crawler: error kinds, per-branch errors and
immutable crawl results merged by order-preserving concatenation.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

#: A crawled site is either its bare location or a record of selected fields.
Site = Union[str, Dict[str, Optional[str]]]


class ErrorKind(str, Enum):
    TIMEOUT = "Timeout"
    HTTP_ERROR = "HttpError"
    PARSE_ERROR = "ParseError"
    INTERNAL_ERROR = "InternalError"


class FetchFailure(Exception):
    """Typed failure raised by the fetcher for a single request."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True, slots=True)
class CrawlError:
    """One sitemap URL that could not be crawled after exhausting its retries."""

    url: str
    kind: ErrorKind
    message: str
    retries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "url": self.url,
            "retries": self.retries,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Sites and errors collected below one node of the sitemap tree."""

    sites: Tuple[Site, ...] = ()
    errors: Tuple[CrawlError, ...] = ()

    @classmethod
    def failed(cls, url: str, kind: ErrorKind, message: str, retries: int = 0) -> CrawlResult:
        return cls(errors=(CrawlError(url=url, kind=kind, message=message, retries=retries),))


def merge_results(results: Iterable[CrawlResult]) -> CrawlResult:
    """Concatenate ``sites`` and ``errors`` in the order *results* are given."""
    sites: list[Site] = []
    errors: list[CrawlError] = []
    for result in results:
        sites.extend(result.sites)
        errors.extend(result.errors)
    return CrawlResult(sites=tuple(sites), errors=tuple(errors))


@dataclass(frozen=True, slots=True)
class SitesData:
    """Final crawl output tagged with the requested root URL."""

    url: str
    sites: Tuple[Site, ...] = ()
    errors: Tuple[CrawlError, ...] = ()

    @classmethod
    def from_result(cls, url: str, result: CrawlResult) -> SitesData:
        return cls(url=url, sites=result.sites, errors=result.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "sites": list(self.sites),
            "errors": [error.to_dict() for error in self.errors],
        }


__all__ = [
    "CrawlError",
    "CrawlResult",
    "ErrorKind",
    "FetchFailure",
    "Site",
    "SitesData",
    "merge_results",
]
