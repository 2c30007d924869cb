"""
Per-language translation trees behind a bounded cache.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

import time
from typing import Any, Callable, Dict, Optional

from steelbuckle.utils.cache import BoundedCache
from steelbuckle.utils.content import build_tree, resolve_value

# Languages kept in memory at once.
MAX_CACHED_LANGUAGES = 5


def fetch_tree_from_db(lang: str) -> Dict[str, Any]:
    """Load one language from the database as a nested tree (needs an app context)."""
    from steelbuckle.models.translation import Translation

    return build_tree(Translation.rows_for_language(lang))


class TranslationStore:
    def __init__(
        self,
        fetcher: Callable[[str], Dict[str, Any]],
        max_languages: int = MAX_CACHED_LANGUAGES,
        clock: Callable[[], float] = time.time,
    ):
        self.fetcher = fetcher
        self.cache = BoundedCache(max_languages, clock=clock)

    def tree(self, lang: str) -> Dict[str, Any]:
        """The nested tree for `lang`; stale or empty data while a refetch is in flight."""
        return self.cache.get_or_fetch(lang, lambda: self.fetcher(lang))

    def resolve(self, key_path: str, lang: str, default: Optional[str] = None) -> str:
        return resolve_value(self.tree(lang), key_path, default)

    def invalidate(self, _payload=None) -> float:
        return self.cache.invalidate()

    def subscribe_to(self, bus) -> Callable[[], None]:
        """Invalidate whenever translations change anywhere on `bus`."""
        return bus.on_content_changed("translations", self.invalidate)
