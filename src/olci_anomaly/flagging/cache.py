"""Per-rectangle cache of tile results shared between target bands.

The flag band and both diagnostic bands come out of the same pixel loop. The
first request for a rectangle computes everything; requests for the other
target bands over the identical rectangle reuse that result. An entry is
evicted once every declared target band has been served from it, and the
cache never holds more than ``capacity`` entries.

All bookkeeping happens under one lock. The pixel work itself runs outside
the lock; concurrent misses on the same rectangle wait for the first one
instead of computing twice.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Iterable

import numpy as np

__all__ = ['TileResult', 'TileResultCache']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileResult:
    """Everything the engine derives for one rectangle."""
    flags: np.ndarray
    max_slope: np.ndarray
    band_index: np.ndarray

    def __post_init__(self):
        for arr in (self.flags, self.max_slope, self.band_index):
            arr.setflags(write=False)


@dataclass
class _Entry:
    result: TileResult
    served: set = field(default_factory=set)


class TileResultCache:
    """Thread-safe, capacity-bounded, use-counted tile result cache.

    Parameters
    ----------
    target_bands : iterable of str
        Bands expected to be requested per rectangle. An entry is dropped
        after each of them has been served once.
    capacity : int
        Maximum number of cached rectangles (least recently used evicted first).
    """

    def __init__(self, target_bands: Iterable[str], capacity: int = 64):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self.target_bands = frozenset(target_bands)
        self.capacity = capacity
        self._lock = threading.Lock()
        self._entries = OrderedDict()
        self._pending = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, rectangle) -> bool:
        with self._lock:
            return rectangle in self._entries

    def clear(self):
        with self._lock:
            self._entries.clear()

    def get_or_compute(self, rectangle, target_band: str,
                       compute: Callable[[object], TileResult]) -> TileResult:
        """Return the cached result for ``rectangle``, computing it on a miss.

        Exceptions from ``compute`` (including cancellation) propagate and
        leave nothing behind, so a later request starts over.
        """
        while True:
            with self._lock:
                entry = self._entries.get(rectangle)
                if entry is not None:
                    self.hits += 1
                    return self._serve(rectangle, entry, target_band)
                event = self._pending.get(rectangle)
                owner = event is None
                if owner:
                    event = threading.Event()
                    self._pending[rectangle] = event
                    self.misses += 1
            if owner:
                break
            event.wait()

        try:
            result = compute(rectangle)
        except BaseException:
            with self._lock:
                self._pending.pop(rectangle, None)
            event.set()
            raise

        with self._lock:
            self._pending.pop(rectangle, None)
            entry = _Entry(result)
            self._entries[rectangle] = entry
            self._evict_over_capacity()
            served = self._serve(rectangle, entry, target_band)
        event.set()
        return served

    def _serve(self, rectangle, entry: _Entry, target_band: str) -> TileResult:
        # Caller holds the lock
        entry.served.add(target_band)
        if self.target_bands <= entry.served:
            self._entries.pop(rectangle, None)
        elif rectangle in self._entries:
            self._entries.move_to_end(rectangle)
        return entry.result

    def _evict_over_capacity(self):
        # Caller holds the lock
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Tile cache full, evicted %s", evicted)
