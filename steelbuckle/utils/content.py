"""
Key-path lookups over nested translation trees.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from flask import current_app, request

logger = logging.getLogger(__name__)


def build_tree(rows: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """
    Turn flat (key_path, value) rows into a nested dict.

    "hero.title" -> {"hero": {"title": value}}. On a conflict between a leaf
    and a subtree the first row wins and the later one is skipped.
    """
    tree: dict[str, Any] = {}
    for key_path, value in rows:
        parts = [p for p in (key_path or "").split(".") if p]
        if not parts:
            continue
        cur = tree
        conflict = False
        for part in parts[:-1]:
            nxt = cur.get(part)
            if nxt is None:
                nxt = cur[part] = {}
            elif not isinstance(nxt, dict):
                conflict = True
                break
            cur = nxt
        leaf = parts[-1]
        if conflict or isinstance(cur.get(leaf), dict):
            logger.warning("Skipping translation %r: conflicts with an existing entry", key_path)
            continue
        cur.setdefault(leaf, value)
    return tree


def get_nested(d: dict[str, Any], dotted_key: str) -> Any:
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def resolve_value(tree: dict[str, Any] | None, key_path: str, default: str | None = None) -> str:
    """The string at `key_path`, else `default`, else the key path itself."""
    value = get_nested(tree or {}, key_path)
    if isinstance(value, str):
        return value
    return default if default is not None else key_path


def t(key: str, default: str | None = None, lang: str = "et", **kwargs) -> str:
    """
    Translate a dotted key through the app's translation store.

    - key: dotted key (e.g. "errors.not_found")
    - kwargs: formatting placeholders (Python .format)
    """
    store = current_app.extensions.get("translation_store")
    try:
        value = store.resolve(key, lang, default) if store is not None else (default or key)
    except Exception:
        logger.warning("Translation lookup failed for %r", key, exc_info=True)
        value = default if default is not None else key
    try:
        return value.format(**kwargs) if kwargs else value
    except (KeyError, IndexError, ValueError):
        # If formatting fails, return the raw string rather than erroring the request.
        return value


def request_language(default: str | None = None) -> str:
    """The `lang` query parameter when it names a supported language, else the default."""
    from steelbuckle.models.translation import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

    lang = (request.args.get("lang") or "").strip().lower()
    if lang in SUPPORTED_LANGUAGES:
        return lang
    return default or DEFAULT_LANGUAGE
