"""Input product contract.

Confirms that every band and tie-point grid the engine will read is present
before any tile work starts. The first missing input aborts with an error
naming it.
"""

import logging
from typing import List

import xarray as xr

from olci_anomaly.contracts.base import require
from olci_anomaly.contracts.failure import MissingInputError
from olci_anomaly.core.bands import BandSet
from olci_anomaly.core.bands import BAND_DIMS, TIE_POINT_DIMS

logger = logging.getLogger(__name__)


def _has_band(ds: xr.Dataset, name: str) -> bool:
    return name in ds.data_vars and ds[name].dims == BAND_DIMS


def _has_tie_point_grid(ds: xr.Dataset, name: str) -> bool:
    return name in ds.data_vars and ds[name].dims == TIE_POINT_DIMS


def _required_inputs(band_set: BandSet) -> list:
    """(name, kind, message) for every required input, in check order."""
    items = [
        (name, "band", f"Input variable '{name}' missing.")
        for name in band_set.radiance_names() + band_set.solar_flux_names() + band_set.lambda0_names()
    ]
    items.append((band_set.altitude_band, "band", f"Band '{band_set.altitude_band}' missing."))
    items.append((band_set.sza_grid, "tie_point_grid", f"Tie point grid '{band_set.sza_grid}' missing."))
    return items


def _missing_inputs(ds: xr.Dataset, band_set: BandSet) -> list:
    """(name, kind, message) for every required input absent from ``ds``, in check order."""
    missing = []
    for name, kind, message in _required_inputs(band_set):
        present = _has_tie_point_grid(ds, name) if kind == "tie_point_grid" else _has_band(ds, name)
        if not present:
            missing.append((name, kind, message))
    return missing


def collect_missing_inputs(ds: xr.Dataset, band_set: BandSet) -> List[str]:
    """Names of all required inputs absent from ``ds`` (empty when valid)."""
    return [name for name, _, _ in _missing_inputs(ds, band_set)]


def validate_input_product(ds: xr.Dataset, band_set: BandSet) -> None:
    """Enforce the input product contract.

    Every missing input is logged; the first one is raised.

    Parameters
    ----------
    ds : xr.Dataset
        Input product.

    band_set : BandSet
        Spectral band table naming the required variables.

    Raises
    ------
    MissingInputError
        For the first missing radiance, solar flux, lambda0 or altitude band,
        or the SZA tie-point grid.
    """
    missing = _missing_inputs(ds, band_set)
    if missing:
        logger.error("Input product rejected, %d required inputs missing: %s",
                     len(missing), ", ".join(name for name, _, _ in missing))
        name, kind, message = missing[0]
        raise MissingInputError(name, kind, message)
    logger.debug("Input product contract satisfied (%d spectral bands)", len(band_set))


def assert_tie_point_coverage(ds: xr.Dataset, grid_name: str) -> None:
    """The tie-point grid must span the scene without extrapolating past a whole step.

    Along each axis ``(n_tie_points - 1) * subsampling`` must reach the last
    pixel, ``extent - 1``.
    """
    require("x" in ds.dims and "y" in ds.dims,
            "Product contract violated: missing 'x'/'y' dimensions")
    grid = ds[grid_name]
    n_tp_y, n_tp_x = grid.shape
    for axis, n_tp, extent in (("x", n_tp_x, ds.sizes["x"]), ("y", n_tp_y, ds.sizes["y"])):
        subsampling = float(grid.attrs.get(f"subsampling_{axis}", 1.0))
        require(
            (n_tp - 1) * subsampling >= extent - 1,
            f"Product contract violated: tie point grid '{grid_name}' covers "
            f"{(n_tp - 1) * subsampling:g} px along {axis}, scene needs {extent - 1}"
        )
