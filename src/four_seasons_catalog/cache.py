import time
from typing import Callable, Dict, Optional, Tuple


class ImageUrlCache:
    """Resolved image URLs keyed by ``"{id}-{size}"``.

    ``ttl=None`` keeps entries for the lifetime of the object. Media ids are
    immutable once published, so one instance per process is the normal
    setup; tests build a fresh one each.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        max_entries: int = 4096,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[Optional[float], str]] = {}
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    @staticmethod
    def key(media_id: int, size: str) -> str:
        return f"{media_id}-{size}"

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if not entry:
            self._stats["misses"] += 1
            return None
        expires_at, value = entry
        if expires_at is not None and expires_at < self._clock():
            self._entries.pop(key, None)
            self._stats["misses"] += 1
            return None
        self._stats["hits"] += 1
        return value

    def set(self, key: str, value: str) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest_key = next(iter(self._entries))
            self._entries.pop(oldest_key, None)
            self._stats["evictions"] += 1
        expires_at = None if self.ttl is None else self._clock() + self.ttl
        self._entries[key] = (expires_at, value)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        if not entry:
            return False
        expires_at = entry[0]
        return expires_at is None or expires_at >= self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    def stats(self) -> dict:
        return dict(self._stats)
