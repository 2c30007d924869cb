"""
Content-changed notifications across views of the same site.

Two channels are combined by ContentBus:
- a same-process channel (InMemoryBroadcaster)
- a shared-storage channel (StorageBroadcaster) with browser storage-event
  semantics: a write is seen by every *other* attached view, never the writer.

Delivery is best-effort, may be duplicated, and is unordered. Receivers are
expected to be idempotent (they just invalidate a cache).

IMPORTANT: Read `DESIGN.md` before making changes.
"""

import json
import logging
import time
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

SCOPES = ("translations", "media", "colorScheme")
STORAGE_KEY_PREFIX = "content-changed:"

Handler = Callable[[dict], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class Broadcaster:
    """Topic based publish/subscribe."""

    def publish(self, topic: str, payload: dict) -> None:
        raise NotImplementedError

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        raise NotImplementedError


class _HandlerRegistry:
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = Lock()

    def add(self, topic: str, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers[topic].append(handler)

        def unsubscribe():
            with self._lock:
                try:
                    self._handlers[topic].remove(handler)
                except ValueError:
                    pass

        return unsubscribe

    def dispatch(self, topic: str, payload: dict) -> None:
        with self._lock:
            handlers = list(self._handlers.get(topic, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.error("Content-changed handler failed for %s", topic, exc_info=True)


class InMemoryBroadcaster(Broadcaster):
    """Synchronous same-process delivery; a failing handler does not stop the others."""

    def __init__(self):
        self._registry = _HandlerRegistry()

    def publish(self, topic, payload):
        self._registry.dispatch(topic, payload)

    def subscribe(self, topic, handler):
        return self._registry.add(topic, handler)


class SharedStorage:
    """
    Key/value storage shared by several views (like a browser's localStorage).

    Every write or removal is announced to all attached listeners except the
    one that made it, as (key, old_value, new_value).
    """

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._listeners: List = []
        self._lock = Lock()

    def attach(self, listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def detach():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return detach

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str, source=None) -> None:
        with self._lock:
            old = self._items.get(key)
            self._items[key] = value
        self._notify(key, old, value, source)

    def remove_item(self, key: str, source=None) -> None:
        with self._lock:
            old = self._items.pop(key, None)
        if old is not None:
            self._notify(key, old, None, source)

    def _notify(self, key, old, new, source):
        with self._lock:
            listeners = [listener for listener in self._listeners if listener is not source]
        for listener in listeners:
            listener.on_storage_event(key, old, new)


class StorageBroadcaster(Broadcaster):
    """One view attached to a SharedStorage."""

    def __init__(self, storage: SharedStorage):
        self.storage = storage
        self._registry = _HandlerRegistry()
        self._detach = storage.attach(self)

    def publish(self, topic, payload):
        key = f"{STORAGE_KEY_PREFIX}{topic}"
        # Set then remove right away: other views see the write, storage stays clean.
        self.storage.set_item(key, json.dumps(payload), source=self)
        self.storage.remove_item(key, source=self)

    def subscribe(self, topic, handler):
        return self._registry.add(topic, handler)

    def on_storage_event(self, key, old_value, new_value):
        if new_value is None or not key.startswith(STORAGE_KEY_PREFIX):
            return
        try:
            payload = json.loads(new_value)
        except ValueError:
            logger.warning("Ignoring malformed storage event for %s", key)
            return
        self._registry.dispatch(key[len(STORAGE_KEY_PREFIX):], payload)

    def close(self):
        self._detach()


class ContentBus:
    """notify_content_changed / on_content_changed over a local and an optional shared channel."""

    def __init__(self, local: Optional[Broadcaster] = None, shared: Optional[Broadcaster] = None):
        self.local = local or InMemoryBroadcaster()
        self.shared = shared
        self._versions: Dict[str, int] = {scope: 0 for scope in SCOPES}
        self._lock = Lock()

    @staticmethod
    def _check_scope(scope):
        if scope not in SCOPES:
            raise ValueError(f"Unknown content scope: {scope!r}")

    def notify_content_changed(self, scope: str, **details) -> dict:
        self._check_scope(scope)
        with self._lock:
            stamp = max(_now_ms(), self._versions[scope] + 1)
            self._versions[scope] = stamp
        payload = {"scope": scope, "timestamp": stamp}
        payload.update(details)

        self.local.publish(scope, payload)
        if self.shared is not None:
            self.shared.publish(scope, payload)
        return payload

    def on_content_changed(self, scope: str, handler: Handler) -> Callable[[], None]:
        self._check_scope(scope)
        unsubscribers = [self.local.subscribe(scope, handler)]
        if self.shared is not None:
            unsubscribers.append(self.shared.subscribe(scope, handler))

        def unsubscribe():
            for unsub in unsubscribers:
                unsub()

        return unsubscribe

    def versions(self) -> Dict[str, int]:
        """Last change timestamp (ms) per scope; 0 when unchanged since start."""
        with self._lock:
            return dict(self._versions)


class Debouncer:
    """Drop calls that arrive within `interval` seconds of the last accepted one."""

    def __init__(self, handler: Handler, interval: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.handler = handler
        self.interval = interval
        self._clock = clock
        self._last: Optional[float] = None
        self._lock = Lock()

    def __call__(self, payload: dict) -> bool:
        with self._lock:
            now = self._clock()
            if self._last is not None and now - self._last < self.interval:
                return False
            self._last = now
        self.handler(payload)
        return True
