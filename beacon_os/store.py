"""
beacon_os/store.py

Key/value store with per-entry TTL.

Owning components receive a store instance instead of keeping module-level
dicts. Expired entries are evicted on access; set() also sweeps the whole
store at most once per sweep_interval.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, Optional, TypeVar
import logging
import time

logger = logging.getLogger(__name__)

V = TypeVar("V")


class IKeyValueStore(ABC, Generic[V]):
    """Store interface"""

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        """Value for key, or None when missing/expired"""

    @abstractmethod
    def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """Store a value; ttl in seconds overrides the default"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key"""


@dataclass
class _Entry(Generic[V]):
    value: V
    expires_at: Optional[float]


class TTLStore(IKeyValueStore[V]):
    """
    In-memory TTL store.

    Args:
        default_ttl: Seconds an entry lives; None means no expiry
        clock: Monotonic time source (injectable for tests)
        sweep_interval: Minimum seconds between the sweeps run by set()
    """

    def __init__(
        self,
        default_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ):
        self._default_ttl = default_ttl
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        self._entries: Dict[str, _Entry[V]] = {}

    def _expired(self, entry: _Entry[V]) -> bool:
        return entry.expires_at is not None and entry.expires_at <= self._clock()

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self._next_sweep = now + self._sweep_interval
            self.purge_expired()

        ttl = self._default_ttl if ttl is None else ttl
        expires_at = now + ttl if ttl is not None else None
        self._entries[key] = _Entry(value, expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Evict expired entries; returns how many were removed"""
        expired = [k for k, e in self._entries.items() if self._expired(e)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired entries")
        return len(expired)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)

    def keys(self) -> Iterator[str]:
        self.purge_expired()
        return iter(list(self._entries))
