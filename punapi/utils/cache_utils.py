"""
Time-to-live cache for decoded price datasets.

Entries are keyed by calendar day ("2024-3-31") or month ("2024-3") and
expire lazily: an entry older than the TTL is reported as missing and
replaced by the next put().
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..models import DailyDataset

Datasets = Tuple[DailyDataset, ...]


def daily_key(day: date) -> str:
    """Cache key for a calendar day."""
    return f"{day.year}-{day.month}-{day.day}"


def monthly_key(day: date) -> str:
    """Cache key for the calendar month containing day."""
    return f"{day.year}-{day.month}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    datasets: Datasets
    created_at: datetime


@dataclass
class _InFlight:
    """A computation other callers for the same key can wait on."""
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[Datasets] = None
    error: Optional[BaseException] = None


class DatasetCache:
    """
    Thread-safe TTL cache of dataset sequences.

    The lock guards the key/entry mapping only and is never held while a
    dataset is being computed.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], datetime] = datetime.now):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.logger = logging.getLogger(__name__)
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, _InFlight] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, force_miss: bool = False) -> Tuple[Optional[Datasets], bool]:
        """
        Look up key.

        Returns:
            (datasets, True) for a fresh entry, (None, False) when the key is
            absent, expired, or force_miss is set.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or force_miss or self._is_expired(entry):
                self.misses += 1
                return None, False
            self.hits += 1
            return entry.datasets, True

    def put(self, key: str, datasets: Sequence[DailyDataset]) -> None:
        """Store datasets under key, replacing any previous entry."""
        entry = CacheEntry(key=key, datasets=tuple(datasets), created_at=self.clock())
        with self._lock:
            self._entries[key] = entry

    def get_or_compute(self, key: str, compute: Callable[[], Sequence[DailyDataset]],
                       force_miss: bool = False) -> Datasets:
        """
        Return the cached datasets for key, computing them on a miss.

        Concurrent misses for the same key share a single call to compute();
        callers that arrive while it runs wait for its result or re-raise its
        exception. Failures are not cached.
        """
        datasets, found = self.get(key, force_miss=force_miss)
        if found:
            return datasets

        with self._lock:
            pending = self._in_flight.get(key)
            leader = pending is None
            if leader:
                pending = _InFlight()
                self._in_flight[key] = pending

        if not leader:
            self.logger.info(f"Waiting for in-flight retrieval of {key}")
            pending.done.wait()
            if pending.error is not None:
                raise pending.error
            return pending.result

        try:
            pending.result = tuple(compute())
            self.put(key, pending.result)
            return pending.result
        except BaseException as e:
            pending.error = e
            raise
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            pending.done.set()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                'entries': len(self._entries),
                'hits': self.hits,
                'misses': self.misses,
                'ttl_seconds': self.ttl_seconds,
            }

    def _is_expired(self, entry: CacheEntry) -> bool:
        return (self.clock() - entry.created_at).total_seconds() > self.ttl_seconds
