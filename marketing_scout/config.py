# === FILE: marketing_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера MarketingScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketing_scout.crawler.classifier import (
    DEFAULT_KEYWORDS,
    DEFAULT_RECORD_EXCLUSIONS,
    DEFAULT_TRAVERSAL_EXCLUSIONS,
)

DEFAULT_SEED_URLS: tuple[str, ...] = (
    "https://neilpatel.com/blog/",
    "https://moz.com/blog",
    "https://www.hubspot.com/marketing",
    "https://blog.rockcontent.com/br/",
    "https://www.searchenginejournal.com/",
    "https://contentmarketinginstitute.com/",
    "https://adespresso.com/blog/",
    "https://blog.hootsuite.com/",
    "https://blog.rdstation.com/",
    "https://resultadosdigitais.com.br/blog/",
    "https://www.semrush.com/blog/",
    "https://marketingdeconteudo.com/",
    "https://klickpages.com.br/blog/",
    "https://www.vtex.com/pt-br/blog/",
    "https://ecommercenapratica.com/blog/",
    "https://shopify.com.br/blog/",
    "https://marketing.substack.com/",
    "https://growthhackers.com/blog/",
    "https://www.martechalliance.com/blog",
    "https://blog.agenciaeplus.com.br/",
    "https://www.mktdigital.com.br/blog/",
    "https://www.ecommercebrasil.com.br/artigos/",
    "https://ecommercefluente.com.br/",
    "https://mundodomarketing.com.br/",
    "https://sebrae.com.br/sites/PortalSebrae/cursosonline/como-fazer-marketing-digital-para-sua-empresa,2a9fe47f1c070410VgnVCM1000004c00210aRCRD",
    "https://www.hostgator.com.br/blog/marketing-digital/",
    "https://digitalhouse.com/br/blog/marketing-digital/",
    "https://www.alura.com.br/artigos/marketing-digital",
    "https://www.ecommerce.org.br/artigos",
    "https://conradoadolpho.com/blog/",
)

DEFAULT_ALLOWED_DOMAINS: tuple[str, ...] = (
    "neilpatel.com",
    "moz.com",
    "hubspot.com",
    "blog.rockcontent.com",
    "searchenginejournal.com",
    "contentmarketinginstitute.com",
    "adespresso.com",
    "blog.hootsuite.com",
    "blog.rdstation.com",
    "resultadosdigitais.com.br",
    "semrush.com",
    "marketingdeconteudo.com",
    "klickpages.com.br",
    "vtex.com",
    "ecommercenapratica.com",
    "shopify.com.br",
    "marketing.substack.com",
    "growthhackers.com",
    "martechalliance.com",
    "blog.agenciaeplus.com.br",
    "mktdigital.com.br",
    "ecommercebrasil.com.br",
    "ecommercefluente.com.br",
    "mundodomarketing.com.br",
    "sebrae.com.br",
    "hostgator.com.br",
    "digitalhouse.com",
    "alura.com.br",
    "ecommerce.org.br",
    "conradoadolpho.com",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/100.0.4896.127 Safari/537.36"
)


class CrawlerConfig(BaseModel):
    """Конфигурация одного запуска обхода. Неизменяема после создания."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_urls: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SEED_URLS), min_length=1, description="Стартовые URL."
    )
    allowed_domains: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_DOMAINS),
        min_length=1,
        description="Разрешённые хосты (подстроки или суффиксы).",
    )
    strict_domains: bool = Field(False, description="Только точный хост или его поддомены.")
    concurrency: int = Field(20, ge=1, description="Размер общего пула воркеров.")
    per_host_parallelism: int = Field(10, ge=1, description="Параллельных запросов на один хост.")
    per_host_delay: float = Field(10.0, ge=0, description="Пауза между запросами к одному хосту (секунд).")
    keywords: List[str] = Field(
        default_factory=lambda: list(DEFAULT_KEYWORDS), min_length=1, description="Маркетинговые ключевые слова."
    )
    record_exclusions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_RECORD_EXCLUSIONS),
        description="Расширения документов, которые не записываются.",
    )
    traversal_exclusions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRAVERSAL_EXCLUSIONS),
        description="Расширения статических файлов, по которым не ходим.",
    )
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    max_pages: Optional[int] = Field(None, ge=1, description="Лимит загруженных страниц (None - без лимита).")
    output: str = Field("marketing_urls.json", min_length=1, description="Файл для итогового JSON.")

    @field_validator("seed_urls")
    @classmethod
    def _check_seeds(cls, v: List[str]) -> List[str]:
        seeds = []
        for raw in v:
            url = raw.strip()
            parts = urlsplit(url)
            if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
                raise ValueError(f"seed URL must be absolute http(s): {raw!r}")
            seeds.append(url)
        return seeds

    @field_validator("allowed_domains", "keywords")
    @classmethod
    def _strip_entries(cls, v: List[str]) -> List[str]:
        entries = [e.strip().lower() for e in v if e.strip()]
        if not entries:
            raise ValueError("list must contain at least one non-empty entry")
        return entries

    @field_validator("record_exclusions", "traversal_exclusions")
    @classmethod
    def _dotted_extensions(cls, v: List[str]) -> List[str]:
        exts = []
        for e in v:
            e = e.strip().lower()
            if e:
                exts.append(e if e.startswith(".") else "." + e)
        return exts


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    Без пути берёт configs/default.yaml, а если его нет - встроенные значения.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
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
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlerConfig(**data)
