"""In-process serialization of compound mutations."""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class _Holder:
    lock: threading.Lock = field(default_factory=threading.Lock)
    waiting: int = 0


@dataclass
class KeyedLocks:
    """Registry of locks keyed by an arbitrary hashable value.

    Services are synchronous, so handlers on one event loop never interleave
    inside them; these locks cover threaded callers. A key's lock is dropped
    as soon as nobody holds or waits for it.
    """

    _holders: dict[Hashable, _Holder] = field(default_factory=dict)
    _guard: threading.Lock = field(default_factory=threading.Lock)

    def __len__(self) -> int:
        with self._guard:
            return len(self._holders)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for key for the duration of the block."""
        with self._guard:
            holder = self._holders.get(key)
            if holder is None:
                holder = _Holder()
                self._holders[key] = holder
            holder.waiting += 1
        try:
            with holder.lock:
                yield
        finally:
            with self._guard:
                holder.waiting -= 1
                if not holder.waiting:
                    del self._holders[key]
