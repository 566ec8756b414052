"""Tests for the per-rectangle tile result cache."""

import threading
import time

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from olci_anomaly.contracts import TileCancelled
from olci_anomaly.core.product import Rectangle
from olci_anomaly.flagging.cache import TileResult, TileResultCache

TARGETS = ("anomaly_flags", "max_spectral_slope", "max_slope_band_index")


def make_result(value=0):
    return TileResult(
        flags=np.full((2, 2), value, dtype=np.int8),
        max_slope=np.zeros((2, 2), dtype=np.float32),
        band_index=np.zeros((2, 2), dtype=np.int8),
    )


class CountingCompute:
    def __init__(self, delay=0.0):
        self.calls = 0
        self.delay = delay
        self._lock = threading.Lock()

    def __call__(self, rect):
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return make_result(rect.x)


def test_result_arrays_are_read_only():
    result = make_result()
    with pytest.raises(ValueError):
        result.flags[0, 0] = 1


def test_second_band_reuses_result():
    cache = TileResultCache(TARGETS)
    compute = CountingCompute()
    rect = Rectangle(0, 0, 2, 2)

    first = cache.get_or_compute(rect, "anomaly_flags", compute)
    second = cache.get_or_compute(rect, "max_spectral_slope", compute)

    assert compute.calls == 1
    assert first is second
    assert cache.hits == 1 and cache.misses == 1


def test_entry_evicted_once_every_band_served():
    cache = TileResultCache(TARGETS)
    compute = CountingCompute()
    rect = Rectangle(0, 0, 2, 2)

    for band in TARGETS[:2]:
        cache.get_or_compute(rect, band, compute)
    assert rect in cache

    cache.get_or_compute(rect, TARGETS[2], compute)

    assert rect not in cache
    assert len(cache) == 0


def test_single_target_band_is_never_retained():
    cache = TileResultCache(("anomaly_flags",))
    cache.get_or_compute(Rectangle(0, 0, 2, 2), "anomaly_flags", CountingCompute())
    assert len(cache) == 0


def test_capacity_evicts_least_recently_used():
    cache = TileResultCache(TARGETS, capacity=2)
    compute = CountingCompute()
    a, b, c = (Rectangle(i, 0, 2, 2) for i in range(3))

    cache.get_or_compute(a, "anomaly_flags", compute)
    cache.get_or_compute(b, "anomaly_flags", compute)
    cache.get_or_compute(a, "max_spectral_slope", compute)
    cache.get_or_compute(c, "anomaly_flags", compute)

    assert len(cache) == 2
    assert a in cache and c in cache
    assert b not in cache


def test_evicted_entry_is_recomputed_identically():
    cache = TileResultCache(TARGETS, capacity=1)
    compute = CountingCompute()
    a, b = Rectangle(5, 0, 2, 2), Rectangle(7, 0, 2, 2)

    first = cache.get_or_compute(a, "anomaly_flags", compute)
    cache.get_or_compute(b, "anomaly_flags", compute)
    again = cache.get_or_compute(a, "max_spectral_slope", compute)

    assert compute.calls == 3
    np.testing.assert_array_equal(first.flags, again.flags)


def test_failed_compute_leaves_nothing_behind():
    cache = TileResultCache(TARGETS)
    rect = Rectangle(0, 0, 2, 2)

    def cancelled(r):
        raise TileCancelled(r)

    with pytest.raises(TileCancelled):
        cache.get_or_compute(rect, "anomaly_flags", cancelled)

    assert rect not in cache
    compute = CountingCompute()
    cache.get_or_compute(rect, "anomaly_flags", compute)
    assert compute.calls == 1


def test_concurrent_misses_compute_once():
    cache = TileResultCache(TARGETS)
    compute = CountingCompute(delay=0.05)
    rect = Rectangle(0, 0, 2, 2)
    barrier = threading.Barrier(len(TARGETS))
    results = {}

    def request(band):
        barrier.wait()
        results[band] = cache.get_or_compute(rect, band, compute)

    threads = [threading.Thread(target=request, args=(band,)) for band in TARGETS]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert compute.calls == 1
    assert len({id(r) for r in results.values()}) == 1
    assert len(cache) == 0


def test_invalid_capacity():
    with pytest.raises(ValueError, match="capacity"):
        TileResultCache(TARGETS, capacity=0)
