"""Tests for the process-local preferences cache."""

from __future__ import annotations

from app.application.use_cases.notifications import PreferencesCache
from app.domain.entities import NotificationPreferences


class _Ticker:
    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def test_entries_expire_after_ttl() -> None:
    ticker = _Ticker()
    cache = PreferencesCache(ttl_seconds=10, clock=ticker)
    cache.put(NotificationPreferences(user_id="user-1"))

    ticker.value = 9.9
    assert cache.get("user-1") is not None
    ticker.value = 10.0
    assert cache.get("user-1") is None
    assert len(cache) == 0


def test_least_recently_used_entry_is_evicted() -> None:
    cache = PreferencesCache(max_entries=2)
    cache.put(NotificationPreferences(user_id="a"))
    cache.put(NotificationPreferences(user_id="b"))
    cache.get("a")
    cache.put(NotificationPreferences(user_id="c"))

    assert cache.get("a") is not None
    assert cache.get("b") is None
    assert cache.get("c") is not None


def test_cached_records_cannot_be_mutated_by_callers() -> None:
    cache = PreferencesCache()
    preferences = NotificationPreferences(user_id="user-1")
    cache.put(preferences)

    preferences.channels["email"] = False
    cached = cache.get("user-1")
    cached.channels["sms"] = False

    assert cache.get("user-1").channels == {"in_app": True, "email": True, "sms": True}


def test_invalidate_drops_one_user() -> None:
    cache = PreferencesCache()
    cache.put(NotificationPreferences(user_id="a"))
    cache.put(NotificationPreferences(user_id="b"))

    cache.invalidate("a")

    assert cache.get("a") is None
    assert cache.get("b") is not None
