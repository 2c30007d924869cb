"""
Media reference resolution for page consumers.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from __future__ import annotations

import time
from typing import Callable
from urllib.parse import urlsplit, urlunsplit

from steelbuckle.utils.cache import BoundedCache

# Last resort when neither the database nor the caller has an image.
FALLBACK_IMAGE_URL = "https://res.cloudinary.com/dxr4omqbd/image/upload/v1744754188/media/Shkirotava_(14).jpg"

CACHE_BUST_PARAM = "_t"

# Page media results shared by every PageMedia instance.
MAX_CACHED_PAGES = 20
shared_media_cache = BoundedCache(MAX_CACHED_PAGES)


def now_ms() -> int:
    return int(time.time() * 1000)


def add_cache_bust(url: str, timestamp: int | str | None = None) -> str:
    """Append `_t=<timestamp>` to the query (before any fragment); an existing `_t` is replaced."""
    if not url:
        return url
    if timestamp is None:
        timestamp = now_ms()
    parts = urlsplit(url)
    segments = _query_without_cache_bust(parts.query)
    segments.append(f"{CACHE_BUST_PARAM}={timestamp}")
    return urlunsplit(parts._replace(query="&".join(segments)))


def strip_cache_bust(url: str) -> str:
    """Remove `_t`; the other query parameters keep their original encoding."""
    if not url or "?" not in url:
        return url
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query="&".join(_query_without_cache_bust(parts.query))))


def _query_without_cache_bust(query: str) -> list[str]:
    return [s for s in query.split("&") if s and s.split("=", 1)[0] != CACHE_BUST_PARAM]


def strip_query(url: str) -> str:
    """Drop the whole query string (and fragment)."""
    return (url or "").split("?", 1)[0].split("#", 1)[0]


def key_variants(page_prefix: str, key: str) -> list[str]:
    """Lookup order for a key: as given, then `<prefix>.images.<key>` and `<prefix>.<key>` for short keys."""
    if "." in key:
        return [key]
    return [key, f"{page_prefix}.images.{key}", f"{page_prefix}.{key}"]


def belongs_to_page(reference_key: str, page_prefix: str) -> bool:
    return reference_key.startswith(f"{page_prefix}.") or reference_key.startswith(f"{page_prefix}_page.")


class PageMedia:
    """
    Resolves image keys for one page.

    Fallback order for every key: the stored reference, then the caller's
    default URL, then this page's default table, then FALLBACK_IMAGE_URL.

    `fetcher(keys=[...], page_id=prefix)` returns {reference_key: url}.
    """

    def __init__(
        self,
        page_prefix: str,
        defaults: dict[str, str] | None = None,
        fetcher: Callable[..., dict[str, str]] | None = None,
        cache: BoundedCache | None = None,
    ):
        self.page_prefix = page_prefix
        self.defaults = dict(defaults or {})
        self.fetcher = fetcher
        self.cache = cache if cache is not None else shared_media_cache

    @property
    def keys(self) -> list[str]:
        found = set()
        for key in self.defaults:
            found.update(key_variants(self.page_prefix, key))
        return sorted(found)

    @property
    def cache_key(self) -> str:
        return f"{self.page_prefix}:{','.join(self.keys)}"

    def _media(self) -> dict[str, str]:
        if self.fetcher is None:
            return {}
        data = self.cache.get_or_fetch(
            self.cache_key, lambda: self.fetcher(keys=self.keys, page_id=self.page_prefix)
        )
        return data or {}

    def get_url(self, key: str, default_url: str | None = None) -> str:
        media = self._media()
        candidates = key_variants(self.page_prefix, key)
        for candidate in candidates:
            if media.get(candidate):
                return media[candidate]
        if default_url:
            return default_url
        for candidate in candidates:
            if self.defaults.get(candidate):
                return self.defaults[candidate]
        return FALLBACK_IMAGE_URL

    def get_urls(self, keys) -> dict[str, str]:
        return {key: self.get_url(key) for key in keys}

    def get_urls_for_page(self) -> dict[str, str]:
        return {k: v for k, v in self._media().items() if v and belongs_to_page(k, self.page_prefix)}

    def refresh(self) -> None:
        self.cache.invalidate()


def subscribe_media_cache(bus, cache: BoundedCache | None = None):
    """Invalidate page media whenever media changes on `bus`."""
    target = cache if cache is not None else shared_media_cache
    return bus.on_content_changed("media", lambda _payload: target.invalidate())
