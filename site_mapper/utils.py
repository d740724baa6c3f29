# File: site_mapper/utils.py
"""site_mapper.utils: Утилиты для распаковки gzip-ответов и разбора дат lastmod."""

from __future__ import annotations

import gzip
import zlib
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from site_mapper.logger import get_logger

__all__: Sequence[str] = (
    "GZIP_MAGIC",
    "is_gzip",
    "gunzip",
    "parse_lastmod",
    "to_timestamp",
)

logger = get_logger("utils")

GZIP_MAGIC = b"\x1f\x8b"

# W3C Datetime allows year-only and year-month values
_PARTIAL_DATE_FORMATS = ("%Y-%m", "%Y")


def is_gzip(data: bytes) -> bool:
    """Проверяет сигнатуру gzip (``1f 8b 08``) независимо от заголовков сервера."""
    return len(data) >= 3 and data[:2] == GZIP_MAGIC and data[2] == 8


def gunzip(data: bytes) -> bytes:
    """Распаковывает gzip; повреждённый архив даёт :class:`ValueError`."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise ValueError(f"Corrupted gzip payload: {exc}") from exc


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """Разбирает W3C datetime из ``<lastmod>``; без часового пояса считается UTC.

    Нераспознанные значения возвращают ``None``.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = _parse_partial_date(text)
        if parsed is None:
            logger.debug("Unparseable lastmod value: %r", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_partial_date(text: str) -> Optional[datetime]:
    for fmt in _PARTIAL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def to_timestamp(value: Union[int, float, str, datetime, None]) -> float:
    """Приводит порог lastmod (число, ISO-строка или datetime) к Unix timestamp."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            parsed = parse_lastmod(value)
            if parsed is None:
                raise ValueError(f"Invalid lastmod threshold: {value!r}") from None
            return parsed.timestamp()
    return float(value)
