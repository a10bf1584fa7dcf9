# marketing_scout/crawler/normalizer.py
"""
URL normalization for MarketingScout.

Turns a raw ``href`` into the canonical absolute form used as the dedup key:
lower-case scheme and host, no fragment, ``/`` for an empty path.
"""
from __future__ import annotations

from urllib.parse import urljoin, urlsplit, urlunsplit

from marketing_scout.errors import ParseError

__all__ = ("normalize", "host_of")

_SCHEMES = ("http", "https")


def normalize(raw_href: str, base_url: str) -> str:
    """
    Resolve *raw_href* against *base_url* and return the canonical absolute URL.

    Raises ParseError for empty or fragment-only hrefs, non-HTTP schemes
    (``mailto:``, ``javascript:``...), missing hosts and unparsable URLs.
    """
    href = (raw_href or "").strip()
    if not href:
        raise ParseError(raw_href, "empty href")
    if href.startswith("#"):
        raise ParseError(raw_href, "fragment-only href")
    try:
        parsed = urlsplit(urljoin(base_url, href))
        host = parsed.hostname
        port = parsed.port
    except ValueError as exc:
        raise ParseError(raw_href, str(exc)) from exc

    scheme = parsed.scheme.lower()
    if scheme not in _SCHEMES:
        raise ParseError(raw_href, f"unsupported scheme {scheme!r}")
    if not host:
        raise ParseError(raw_href, "empty host")

    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None else f"{host}:{port}"
    if "@" in parsed.netloc:
        netloc = f"{parsed.netloc.rsplit('@', 1)[0]}@{netloc}"
    return urlunsplit((scheme, netloc, parsed.path or "/", parsed.query, ""))


def host_of(url: str) -> str:
    """Return the lower-case hostname of *url*, or an empty string."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""
