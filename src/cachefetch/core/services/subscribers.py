"""Per-key listener registry."""

import logging
from collections.abc import Callable
from typing import Any

from cachefetch.core.interfaces.cache_store import CacheListener

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """Maps cache keys to the listeners interested in them.

    Listeners are called synchronously, in subscription order, with the
    post-mutation payload or None when the key is gone. A failing
    listener is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        # dict preserves subscription order
        self._listeners: dict[str, dict[int, CacheListener]] = {}
        self._next_id = 0

    def subscribe(self, key: str, listener: CacheListener) -> Callable[[], None]:
        """Register ``listener`` for ``key``.

        Subscribing to an absent key is valid; the listener fires on the
        next write.

        Args:
            key: The cache key to watch.
            listener: Called with the new payload, or None on removal.

        Returns:
            A callable that removes exactly this subscription.
        """
        token = self._next_id
        self._next_id += 1
        self._listeners.setdefault(key, {})[token] = listener

        def unsubscribe() -> None:
            listeners = self._listeners.get(key)
            if listeners is None:
                return
            listeners.pop(token, None)
            if not listeners:
                del self._listeners[key]

        return unsubscribe

    def notify(self, key: str, value: Any) -> None:
        listeners = self._listeners.get(key)
        if not listeners:
            return
        for listener in list(listeners.values()):
            try:
                listener(value)
            except Exception:
                logger.exception("Cache listener for key %r failed", key)

    def keys(self) -> list[str]:
        return list(self._listeners)

    def listener_count(self, key: str) -> int:
        return len(self._listeners.get(key, ()))

    def clear(self) -> None:
        self._listeners.clear()
