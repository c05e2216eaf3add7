"""Secondary index from tag to cache keys."""

from collections.abc import Iterable


class TagIndex:
    """Multimap from a tag label to the keys carrying it.

    A key is listed under a tag if and only if the entry stored for
    that key carries the tag. Only the cache store mutates it.
    """

    def __init__(self) -> None:
        self._keys_by_tag: dict[str, set[str]] = {}

    def add(self, key: str, tags: Iterable[str]) -> None:
        for tag in tags:
            self._keys_by_tag.setdefault(tag, set()).add(key)

    def remove(self, key: str, tags: Iterable[str]) -> None:
        for tag in tags:
            keys = self._keys_by_tag.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._keys_by_tag[tag]

    def keys_for(self, tag: str) -> list[str]:
        """Return a snapshot of the keys under ``tag``."""
        return list(self._keys_by_tag.get(tag, ()))

    def drop(self, tag: str) -> None:
        self._keys_by_tag.pop(tag, None)

    def clear(self) -> None:
        self._keys_by_tag.clear()

    def tags(self) -> list[str]:
        return list(self._keys_by_tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._keys_by_tag
