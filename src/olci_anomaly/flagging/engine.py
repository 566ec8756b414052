"""Tile engine for OLCI anomaly flagging.

For each requested rectangle the engine

1. loads radiance, solar flux, and centre wavelength for every band of the
   band table, plus the interpolated SZA tile and the altitude tile
2. converts radiance to reflectance
3. finds the maximal slope between spectrally adjacent bands and flags
   ``ANOM_SPECTRAL_MEASURE`` where it exceeds the configured threshold
4. flags ``ALT_OUT_OF_RANGE`` where altitude leaves the nominal range

The result of one rectangle serves every target band (flags and both
diagnostics) through :class:`TileResultCache`, so the band that happens to be
requested first does not change what the others see.
"""

import logging
from typing import NamedTuple, TYPE_CHECKING

import numpy as np

from olci_anomaly.contracts.base import require
from olci_anomaly.core.bands import BandSet
from olci_anomaly.core.flags import ALT_OUT_OF_RANGE, ANOM_SPECTRAL_MEASURE, FLAG_DTYPE
from olci_anomaly.core.output import FLAG_BAND, SLOPE_BAND, target_band_names
from olci_anomaly.core.product import CancellationToken, RasterProduct, Rectangle
from olci_anomaly.flagging.altitude import flag_altitude_outliers
from olci_anomaly.flagging.cache import TileResult, TileResultCache
from olci_anomaly.flagging.reflectance import to_reflectance
from olci_anomaly.flagging.slope import NO_SLOPE_INDEX, max_spectral_slope, spectral_anomaly_mask

if TYPE_CHECKING:
    from olci_anomaly.schemas import InternalConfig

__all__ = ['AnomalyFlaggingEngine']

logger = logging.getLogger(__name__)


class _SourceTiles(NamedTuple):
    radiance: np.ndarray     # (bands, height, width)
    solar_flux: np.ndarray   # (bands, height, width)
    lambda0: np.ndarray      # (bands, height, width)
    sza: np.ndarray          # (height, width)
    altitude: np.ndarray     # (height, width)


class AnomalyFlaggingEngine:
    """Computes anomaly flags and slope diagnostics tile by tile.

    Safe to call from several worker threads at once: the source product is
    only read, and each call writes solely into the target tile it is given.

    Example usage::

        engine = AnomalyFlaggingEngine(RasterProduct(ds), config)
        rect = Rectangle(0, 0, 64, 64)
        tile = out["anomaly_flags"].values[rect.rows, rect.cols]
        engine.compute_tile("anomaly_flags", rect, tile)
    """

    def __init__(self, product: RasterProduct, config: "InternalConfig",
                 band_set: BandSet = None,
                 cancel_token: CancellationToken = None,
                 cache: TileResultCache = None):
        """Initialize engine with validated configuration.

        Parameters
        ----------
        product : RasterProduct
            Validated source product.

        config : InternalConfig
            Fully validated runtime configuration.

        band_set : BandSet, optional
            Band table; built from ``config.bands`` when omitted.

        cancel_token : CancellationToken, optional
            Polled before every row of pixel work.

        cache : TileResultCache, optional
            Shared result cache; a private one is created when omitted.
        """
        self.product = product
        self.config = config
        self.band_set = band_set or BandSet.from_config(config.bands)
        self.cancel_token = cancel_token or CancellationToken()

        flagging = config.flagging
        self.threshold = flagging.spectral_anomaly_threshold
        self.altitude_max = flagging.altitude_max
        self.altitude_min = flagging.altitude_min
        self.sza_units = flagging.sza_units
        self.emit_diagnostics = flagging.emit_diagnostics

        self.target_bands = target_band_names(self.emit_diagnostics)
        self.cache = cache or TileResultCache(
            self.target_bands, capacity=config.processing.cache_capacity
        )

        logger.info(
            "AnomalyFlaggingEngine initialized: bands=%d, threshold=%s, altitude=[%s, %s], diagnostics=%s",
            len(self.band_set), self.threshold, self.altitude_min, self.altitude_max,
            self.emit_diagnostics,
        )

    def compute_tile(self, target_band: str, rectangle: Rectangle, target_tile: np.ndarray) -> None:
        """Fill ``target_tile`` with ``target_band`` samples for ``rectangle``.

        Raises
        ------
        ValueError
            If ``target_band`` is not one of the declared target bands.
        TileComputationError
            If a source band or grid cannot be read.
        TileCancelled
            If cancellation was requested before the tile completed.
        """
        if target_band not in self.target_bands:
            raise ValueError(f"Unknown target band '{target_band}', expected one of {self.target_bands}")
        require(
            target_tile.shape == rectangle.shape,
            f"Tile contract violated: target tile shape {target_tile.shape} "
            f"does not match rectangle {rectangle}"
        )

        result = self.cache.get_or_compute(rectangle, target_band, self._compute_rectangle)

        if target_band == FLAG_BAND:
            np.copyto(target_tile, result.flags, casting="same_kind")
        elif target_band == SLOPE_BAND:
            np.copyto(target_tile, result.max_slope, casting="same_kind")
        else:
            np.copyto(target_tile, result.band_index, casting="same_kind")

    def _load_source_tiles(self, rectangle: Rectangle) -> _SourceTiles:
        bs = self.band_set
        get = self.product.get_tile
        return _SourceTiles(
            radiance=np.stack([get(name, rectangle) for name in bs.radiance_names()]),
            solar_flux=np.stack([get(name, rectangle) for name in bs.solar_flux_names()]),
            lambda0=np.stack([get(name, rectangle) for name in bs.lambda0_names()]),
            sza=self.product.get_tie_point_tile(bs.sza_grid, rectangle),
            altitude=get(bs.altitude_band, rectangle),
        )

    def _compute_rectangle(self, rectangle: Rectangle) -> TileResult:
        """Run both anomaly passes over ``rectangle``; nothing is written here."""
        self.cancel_token.raise_if_cancelled(rectangle)
        src = self._load_source_tiles(rectangle)

        height, width = rectangle.shape
        flags = np.zeros((height, width), dtype=FLAG_DTYPE)
        max_slope = np.full((height, width), np.nan, dtype=np.float32)
        band_index = np.full((height, width), NO_SLOPE_INDEX, dtype=np.int8)

        for row in range(height):
            self.cancel_token.raise_if_cancelled(rectangle)
            refl = to_reflectance(
                src.radiance[:, row, :], src.solar_flux[:, row, :],
                src.sza[row][None, :], self.sza_units,
            )
            slope, idx = max_spectral_slope(refl, src.lambda0[:, row, :], self.band_set.indices)
            flags[row, spectral_anomaly_mask(slope, self.threshold)] |= FLAG_DTYPE(ANOM_SPECTRAL_MEASURE)
            max_slope[row] = slope
            band_index[row] = idx

        for row in range(height):
            self.cancel_token.raise_if_cancelled(rectangle)
            flag_altitude_outliers(flags[row], src.altitude[row], self.altitude_max, self.altitude_min)

        logger.debug("Computed tile %s: spectral=%d, altitude=%d",
                     rectangle,
                     int(np.count_nonzero(flags & ANOM_SPECTRAL_MEASURE)),
                     int(np.count_nonzero(flags & ALT_OUT_OF_RANGE)))
        return TileResult(flags=flags, max_slope=max_slope, band_index=band_index)
