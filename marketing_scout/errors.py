# File: marketing_scout/errors.py
"""marketing_scout.errors: Иерархия исключений краулера."""

from __future__ import annotations

__all__ = [
    "MarketingScoutError",
    "ParseError",
    "FetchError",
    "PersistenceError",
    "ConfigurationError",
]


class MarketingScoutError(Exception):
    """Базовое исключение проекта."""


class ParseError(MarketingScoutError, ValueError):
    """Ссылку нельзя превратить в корректный абсолютный URL."""

    def __init__(self, href: str, reason: str) -> None:
        super().__init__(f"cannot parse {href!r}: {reason}")
        self.href = href
        self.reason = reason


class FetchError(MarketingScoutError):
    """Ошибка сети, транспорта или HTTP при загрузке страницы."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class PersistenceError(MarketingScoutError):
    """Не удалось сохранить итоговый снимок результатов."""


class ConfigurationError(MarketingScoutError):
    """Не хватает обязательных настроек; обход не запускается."""
