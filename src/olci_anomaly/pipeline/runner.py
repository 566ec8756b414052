"""Whole-scene tile scheduling for anomaly flagging.

Splits the scene into rectangles and asks the engine for every
(target band, rectangle) pair from a thread pool, writing into disjoint
slices of the output bands. Stands in for the host framework that would
otherwise request tiles on demand.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from typing import TYPE_CHECKING

import numpy as np
import xarray as xr

from olci_anomaly.contracts import (
    ContractViolation,
    TileCancelled,
    assert_output_schema,
    assert_tie_point_coverage,
    validate_input_product,
)
from olci_anomaly.core.bands import BandSet
from olci_anomaly.core.output import FLAG_BAND, build_output_schema, target_band_names
from olci_anomaly.core.product import CancellationToken, RasterProduct, Rectangle, iter_rectangles
from olci_anomaly.flagging.engine import AnomalyFlaggingEngine

if TYPE_CHECKING:
    from olci_anomaly.schemas import InternalConfig

__all__ = ['AnomalyFlaggingRunner']

logger = logging.getLogger(__name__)


class AnomalyFlaggingRunner:
    """Validates a product, allocates the flagged output and fills it tile by tile.

    **Stages:**

    1. **Validate**: every radiance, solar flux, lambda0 band, the altitude
       band and the SZA tie-point grid must exist, and all bands must share
       the scene extent.

    2. **Allocate**: output product with ``anomaly_flags`` (and the slope
       diagnostics when enabled).

    3. **Compute**: one task per rectangle on a ``ThreadPoolExecutor``; each
       task requests every target band for its rectangle from the engine.

    The first failing tile cancels the rest and its exception is re-raised.
    Calling :meth:`stop` from another thread abandons the run with
    :class:`TileCancelled`.

    Example usage::

        config = resolve_config(ParamConfig(), UserConfig(EMIT_DIAGNOSTICS=True))
        runner = AnomalyFlaggingRunner(config)
        out = runner.run(ds)
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.band_set = BandSet.from_config(config.bands)
        self.emit_diagnostics = config.flagging.emit_diagnostics
        self.tile_size = config.processing.tile_size
        self.max_workers = config.processing.max_workers
        self.cancel_token = CancellationToken()
        self._stop_requested = threading.Event()
        self.engine = None
        self.tiles_done = 0
        self._count_lock = threading.Lock()

    def stop(self):
        """Stop the runner for good.

        Running tiles stop at their next row and every later :meth:`run`
        raises :class:`TileCancelled`. A failed run only cancels its own
        remaining tiles; the next :meth:`run` starts with a fresh token.
        """
        self._stop_requested.set()
        self.cancel_token.cancel()

    def stopped(self) -> bool:
        return self._stop_requested.is_set()

    def _reset_cancel_token(self):
        self.cancel_token = CancellationToken()
        if self._stop_requested.is_set():
            self.cancel_token.cancel()

    def prepare(self, ds: xr.Dataset) -> xr.Dataset:
        """Validate ``ds`` and return the allocated (unfilled) output product."""
        validate_input_product(ds, self.band_set)
        assert_tie_point_coverage(ds, self.band_set.sza_grid)

        out = build_output_schema(ds, self.emit_diagnostics, self.band_set)
        assert_output_schema(out, FLAG_BAND, self.emit_diagnostics)

        self.engine = AnomalyFlaggingEngine(
            RasterProduct(ds), self.config,
            band_set=self.band_set,
            cancel_token=self.cancel_token,
        )
        return out

    def run(self, ds: xr.Dataset) -> xr.Dataset:
        """Flag every pixel of ``ds`` and return the output product.

        Raises
        ------
        MissingInputError
            If a required band or grid is absent.
        TileComputationError
            If a source tile cannot be read while computing.
        TileCancelled
            If :meth:`stop` was called before all tiles completed.
        """
        self._reset_cancel_token()
        out = self.prepare(ds)
        targets = target_band_names(self.emit_diagnostics)
        buffers = {name: out[name].values for name in targets}

        height, width = ds.sizes["y"], ds.sizes["x"]
        rectangles = iter_rectangles(width, height, self.tile_size)
        logger.info("Flagging %s: %d tiles of %d px, %d workers, targets=%s",
                    out.attrs.get("product_name"), len(rectangles), self.tile_size,
                    self.max_workers, ", ".join(targets))

        start = time.time()
        self.tiles_done = 0
        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix="AnomalyTile") as executor:
            futures = [
                executor.submit(self._process_rectangle, rect, targets, buffers)
                for rect in rectangles
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in done if f.exception() is not None]
            if failed:
                self.cancel_token.cancel()
                for f in pending:
                    f.cancel()
                wait(pending)
                self._raise_first(failed)

        logger.info("Flagged %d tiles in %.2fs", self.tiles_done, time.time() - start)
        self._log_summary(out)
        return out

    def _process_rectangle(self, rect: Rectangle, targets: tuple, buffers: dict):
        for name in targets:
            self.engine.compute_tile(name, rect, buffers[name][rect.rows, rect.cols])
        with self._count_lock:
            self.tiles_done += 1

    @staticmethod
    def _raise_first(failed: list):
        # Prefer a real failure over the cancellations it triggered
        errors = [f.exception() for f in failed]
        for exc in errors:
            if not isinstance(exc, TileCancelled):
                if isinstance(exc, ContractViolation):
                    logger.critical("Contract violated while flagging: %s", exc)
                raise exc
        logger.warning("Flagging cancelled before all tiles completed")
        raise errors[0]

    def _log_summary(self, out: xr.Dataset):
        flags = out[FLAG_BAND].values
        total = flags.size
        for name, mask in zip(out[FLAG_BAND].attrs["flag_meanings"].split(),
                              out[FLAG_BAND].attrs["flag_masks"]):
            count = int(np.count_nonzero(flags & mask))
            pct = 100.0 * count / total if total else 0.0
            logger.info("  %s: %d pixels (%.2f%%)", name, count, pct)
