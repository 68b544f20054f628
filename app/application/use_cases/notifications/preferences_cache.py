"""Read-through cache for notification preferences."""

from __future__ import annotations

import copy
import time
from collections import OrderedDict
from typing import Callable

from app.domain.entities import NotificationPreferences


class PreferencesCache:
    """Process-local TTL cache with least-recently-used eviction.

    Entries are copied on the way in and out so callers cannot mutate the
    cached record. Updates on other processes are not seen until the entry
    expires.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 300.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, NotificationPreferences]] = (
            OrderedDict()
        )

    def get(self, user_id: str) -> NotificationPreferences | None:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        expires_at, preferences = entry
        if self._clock() >= expires_at:
            del self._entries[user_id]
            return None
        self._entries.move_to_end(user_id)
        return copy.deepcopy(preferences)

    def put(self, preferences: NotificationPreferences) -> None:
        """Store ``preferences``, replacing any previous entry for the user."""

        user_id = preferences.user_id
        self._entries[user_id] = (self._clock() + self._ttl, copy.deepcopy(preferences))
        self._entries.move_to_end(user_id)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, user_id: str) -> None:
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["PreferencesCache"]
