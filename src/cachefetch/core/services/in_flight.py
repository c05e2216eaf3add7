"""Table of pending fetches, one per cache key."""

import asyncio
from typing import Any


class InFlightTable:
    """Deduplicates concurrent fetches sharing a cache key.

    Check and registration must happen without an ``await`` in between;
    under asyncio that makes the pair atomic.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future[Any]] = {}

    def has(self, key: str) -> bool:
        return key in self._pending

    def get(self, key: str) -> asyncio.Future[Any] | None:
        return self._pending.get(key)

    def set(self, key: str, pending: asyncio.Future[Any]) -> None:
        if key in self._pending:
            raise RuntimeError(f"A fetch for {key!r} is already in flight")
        self._pending[key] = pending

    def delete(self, key: str, pending: asyncio.Future[Any] | None = None) -> None:
        """Remove the entry for ``key``.

        When ``pending`` is given, the entry is removed only if it is
        still that same future.
        """
        if pending is not None and self._pending.get(key) is not pending:
            return
        self._pending.pop(key, None)

    def cancel_all(self) -> None:
        for pending in self._pending.values():
            pending.cancel()
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
