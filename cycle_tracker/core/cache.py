"""In-memory caching layer for derived program aggregates.

Every entry remembers the generation it was computed under. A mutation of the
session log bumps the generation, which makes every older entry stale at once;
entries also expire after a time-to-live. A read is served from cache only when
both checks pass, so time-based and change-based invalidation can never
disagree.
"""
from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterable, Mapping, TypeVar

from cycle_tracker.core.logging import get_logger
from cycle_tracker.core.metrics import cache_hits, cache_invalidations, cache_misses

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A computed value with the time and generation it was computed at."""
    value: T
    computed_at: float
    generation: int


def session_fingerprint(sessions: Iterable[Any]) -> str:
    """
    Content fingerprint of a loaded session list.

    Built from ``date|completed|scheduled_day_id|notes`` per record in date
    order, so reloading an unchanged log yields the same fingerprint regardless
    of the order the store returned rows in.

    Args:
        sessions: Session records exposing ``date``, ``completed``,
            ``scheduled_day_id`` and ``notes``

    Returns:
        Hex digest of the joined record lines
    """
    lines = sorted(
        f"{s.date.isoformat()}|{int(s.completed)}|{s.scheduled_day_id}|{s.notes or ''}"
        for s in sessions
    )
    return hashlib.sha256("\n".join(lines).encode()).hexdigest()


class ProgressCache:
    """
    Generation-stamped memo table.

    Args:
        ttl_seconds: Maximum age of an entry before it is recomputed
        timer: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._timer = timer
        self._entries: dict[tuple[str, tuple], CacheEntry] = {}
        self._generation = 0
        self._fingerprint: str | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    def __len__(self) -> int:
        return len(self._entries)

    def is_valid(self, entry: CacheEntry) -> bool:
        if entry.generation != self._generation:
            return False
        return (self._timer() - entry.computed_at) < self.ttl_seconds

    def get_or_compute(self, name: str, compute: Callable[[], T], *args: Hashable) -> T:
        """
        Return the cached value for ``(name, args)`` or compute and store it.

        Args:
            name: Aggregate name, also used as the metrics label
            compute: Zero-argument callable producing the value
            *args: Extra key parts (e.g. the reference date)
        """
        key = (name, args)
        entry = self._entries.get(key)
        if entry is not None and self.is_valid(entry):
            cache_hits.labels(key=name).inc()
            return entry.value

        cache_misses.labels(key=name).inc()
        # Entries for other reference dates are never read again
        self._evict_other_args(args)
        value = compute()
        self._entries[key] = CacheEntry(
            value=value,
            computed_at=self._timer(),
            generation=self._generation,
        )
        return value

    def _evict_other_args(self, args: tuple) -> None:
        stale = [key for key in self._entries if key[1] != args]
        for key in stale:
            del self._entries[key]

    def invalidate(self, reason: str = "mutation") -> int:
        """Bump the generation and drop every entry computed under older ones."""
        self._generation += 1
        self._entries.clear()
        cache_invalidations.labels(reason=reason).inc()
        logger.debug("cache_invalidated", reason=reason, generation=self._generation)
        return self._generation

    def refresh(self, loaders: Mapping[str, Callable[[], Any]], *args: Hashable) -> None:
        """Invalidate, then eagerly recompute each named aggregate."""
        self.invalidate(reason="refresh")
        for name, compute in loaders.items():
            self.get_or_compute(name, compute, *args)

    def observe_sessions(self, sessions: Iterable[Any]) -> bool:
        """
        Record the fingerprint of a freshly loaded session list.

        Returns:
            True if the content differed from the previous load and the cache
            was invalidated, False if it was unchanged
        """
        fingerprint = session_fingerprint(sessions)
        if fingerprint == self._fingerprint:
            return False
        self._fingerprint = fingerprint
        self.invalidate(reason="content_changed")
        return True

    def reset(self) -> None:
        """Drop all entries and the remembered fingerprint."""
        self._fingerprint = None
        self._entries.clear()
        self.invalidate(reason="reset")
