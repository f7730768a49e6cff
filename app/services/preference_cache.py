"""Time-bounded cache of each user's top categories."""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreferenceCacheEntry:
    user_id: str
    top_categories: tuple[str, ...]
    computed_at: float


class PreferenceCache:
    """
    Maps a user id to its most recently computed top categories.

    Entries expire ``ttl_seconds`` after they were computed; expiry is checked
    lazily on read. With ``max_entries`` set, the least recently used entry is
    evicted once the bound is exceeded. Writes for the same user are
    last-write-wins.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, PreferenceCacheEntry] = OrderedDict()

    def get(self, user_id: str) -> list[str] | None:
        """Return cached categories, or None when absent or expired."""
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if self._clock() - entry.computed_at >= self._ttl:
            logger.debug("Preference cache entry expired for user %s", user_id)
            return None
        if self._max_entries is not None:
            self._entries.move_to_end(user_id)
        return list(entry.top_categories)

    def put(self, user_id: str, categories: Sequence[str]) -> None:
        self._entries[user_id] = PreferenceCacheEntry(
            user_id=user_id,
            top_categories=tuple(categories[:3]),
            computed_at=self._clock(),
        )
        if self._max_entries is not None:
            self._entries.move_to_end(user_id)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted preference cache entry for user %s", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
