"""
Модуль для загрузки и валидации конфигурации SiteMapper.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from site_mapper.parser.fields import SitemapField, resolve_fields
from site_mapper.utils import to_timestamp


class MapperConfig(BaseModel):
    """Конфигурация одного обхода дерева sitemap (неизменяема на время обхода)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: Optional[str] = Field(None, description="Корневой URL sitemap по умолчанию.")
    timeout: float = Field(15.0, gt=0, description="Таймаут на один запрос (секунд).")
    lastmod: float = Field(
        0.0, ge=0, description="Минимальный lastmod (Unix timestamp); 0 без фильтра."
    )
    request_headers: Dict[str, str] = Field(
        default_factory=dict, description="Заголовки для каждого запроса."
    )
    concurrency: int = Field(10, ge=1, description="Сколько sitemap загружается одновременно.")
    retries: int = Field(0, ge=0, description="Число повторных попыток для неудачного узла.")
    verify_ssl: bool = Field(True, description="Проверять TLS-сертификаты.")
    fields: Optional[Tuple[SitemapField, ...]] = Field(
        None, description="Поля записи вместо голого URL (None: только loc)."
    )
    proxy: Optional[str] = Field(None, description="HTTP-прокси для всех запросов.")
    max_depth: Optional[int] = Field(
        None, ge=0, description="Максимальная вложенность индексов (None: без ограничения)."
    )

    @field_validator("url", mode="before")
    def _strip_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("lastmod", mode="before")
    def _lastmod_to_timestamp(cls, v: Any) -> Any:
        return to_timestamp(v)

    @field_validator("fields", mode="before")
    def _resolve_fields(cls, v: Any) -> Any:
        return resolve_fields(v)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top-level YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top-level JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> MapperConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MapperConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return MapperConfig(**data)


def override_config(config: MapperConfig, **overrides: Any) -> MapperConfig:
    """Возвращает новую проверенную конфигурацию с заменёнными полями (``None`` пропускается)."""
    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return config
    return MapperConfig(**{**config.model_dump(), **updates})


__all__ = ["MapperConfig", "ValidationError", "load_config", "override_config"]
