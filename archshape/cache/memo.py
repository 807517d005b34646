"""
Compute-once memo table.

Maps keys to values computed on first access. Concurrent first accesses of one
key share a single in-flight computation; different keys never block each other.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, MutableMapping, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class MemoStats:
    hits: int = 0
    misses: int = 0
    failures: int = 0


class ComputeOnceTable(Generic[K, V]):
    """
    Thread-safe memo table with at-most-one computation per key.

    Failed computations are not cached: the exception reaches every caller
    waiting on that computation, and the next call computes again.

    Invalidating a key also detaches a computation still in flight for it.
    Its callers still receive the result, but the result is not stored and
    the next call computes again.

    Args:
        storage: Mapping that holds finished values. Injectable so the owner
            can share or inspect it; a plain dict by default.
    """

    def __init__(self, storage: Optional[MutableMapping[K, V]] = None):
        self._lock = threading.Lock()
        self._values: MutableMapping[K, V] = storage if storage is not None else {}
        self._pending: Dict[K, Future] = {}
        self._stats = MemoStats()

    def get_or_compute(
        self,
        key: K,
        compute: Callable[[], V],
        keep: Optional[Callable[[V], bool]] = None,
    ) -> V:
        """
        Value for key, computing it if needed.

        Args:
            key: Table key.
            compute: Called without the table lock held.
            keep: Optional predicate; a computed value it rejects is handed to
                the waiting callers but not stored.
        """
        with self._lock:
            if key in self._values:
                self._stats.hits += 1
                return self._values[key]
            future = self._pending.get(key)
            owner = future is None
            if owner:
                self._stats.misses += 1
                future = Future()
                self._pending[key] = future
            else:
                self._stats.hits += 1

        if not owner:
            return future.result()

        try:
            value = compute()
        except BaseException as e:
            with self._lock:
                self._stats.failures += 1
                self._release(key, future)
            future.set_exception(e)
            raise

        store = keep is None or keep(value)
        with self._lock:
            if self._release(key, future) and store:
                self._values[key] = value
        future.set_result(value)
        return value

    def _release(self, key: K, future: Future) -> bool:
        """Drop the pending marker. False if it was detached meanwhile."""
        if self._pending.get(key) is future:
            del self._pending[key]
            return True
        return False

    def peek(self, key: K) -> Optional[V]:
        """Finished value for key, without computing."""
        with self._lock:
            return self._values.get(key)

    def invalidate(self, key: K) -> bool:
        """Drop a finished value and detach a pending computation. Returns True if a value was present."""
        with self._lock:
            self._pending.pop(key, None)
            return self._values.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[K], bool]) -> int:
        """Invalidate every key matching predicate. Returns the number of values dropped."""
        with self._lock:
            for key in [k for k in self._pending if predicate(k)]:
                del self._pending[key]
            dropped = [k for k in self._values if predicate(k)]
            for key in dropped:
                del self._values[key]
            return len(dropped)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
            self._values.clear()

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._values)

    @property
    def stats(self) -> MemoStats:
        with self._lock:
            return MemoStats(self._stats.hits, self._stats.misses, self._stats.failures)

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
