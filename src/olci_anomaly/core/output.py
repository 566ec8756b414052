"""Output product schema.

Declares the shape of the flagged product: a shallow view of every input
variable plus the anomaly flag band and, optionally, the two spectral slope
diagnostic bands. Nothing is computed here; the bands are allocated with
their no-data values and filled tile by tile by the engine.
"""

import logging

import numpy as np
import xarray as xr

from olci_anomaly.core.bands import BandSet, BAND_DIMS
from olci_anomaly.core.flags import FLAG_DTYPE, flag_coding_attrs

__all__ = [
    'build_output_schema',
    'target_band_names',
    'PRODUCT_SUFFIX',
    'FLAG_BAND',
    'SLOPE_BAND',
    'SLOPE_INDEX_BAND',
]

logger = logging.getLogger(__name__)

PRODUCT_SUFFIX = "_ANOM_FLAG"
FLAG_BAND = "anomaly_flags"
SLOPE_BAND = "max_spectral_slope"
SLOPE_INDEX_BAND = "max_slope_band_index"
SLOPE_INDEX_NO_DATA = -1


def target_band_names(emit_diagnostics: bool) -> tuple:
    """Bands the engine writes, in the order a scheduler should request them."""
    if emit_diagnostics:
        return (FLAG_BAND, SLOPE_BAND, SLOPE_INDEX_BAND)
    return (FLAG_BAND,)


def build_output_schema(ds: xr.Dataset, emit_diagnostics: bool,
                        band_set: BandSet = None) -> xr.Dataset:
    """Allocate the flagged output product.

    Parameters
    ----------
    ds : xr.Dataset
        Validated input product.

    emit_diagnostics : bool
        Add ``max_spectral_slope`` and ``max_slope_band_index``.

    band_set : BandSet, optional
        Used only to document the participating bands on the slope band.

    Returns
    -------
    xr.Dataset
        Shallow copy of ``ds`` (bands, tie-point grids, flag codings,
        geocoding coordinates, and metadata shared by reference) with the
        new target bands added.
    """
    band_set = band_set or BandSet()
    height, width = ds.sizes["y"], ds.sizes["x"]

    out = ds.copy(deep=False)
    out.attrs = dict(ds.attrs)
    name = ds.attrs.get("product_name", "product")
    product_type = ds.attrs.get("product_type", "UNKNOWN")
    out.attrs["product_name"] = f"{name}{PRODUCT_SUFFIX}"
    out.attrs["product_type"] = f"{product_type}{PRODUCT_SUFFIX}"
    out.attrs["description"] = "OLCI anomaly flagged L1b"
    for key in ("start_time", "end_time"):
        if key in ds.attrs:
            out.attrs[key] = ds.attrs[key]

    flag_attrs = {
        "long_name": "Anomaly flags",
        "description": "Flags indicating OLCI data anomalies",
        "units": "1",
    }
    flag_attrs.update(flag_coding_attrs())
    out[FLAG_BAND] = xr.DataArray(
        np.zeros((height, width), dtype=FLAG_DTYPE), dims=BAND_DIMS, attrs=flag_attrs
    )

    if emit_diagnostics:
        index_list = ", ".join(str(i) for i in band_set.indices)
        out[SLOPE_BAND] = xr.DataArray(
            np.full((height, width), np.nan, dtype=np.float32),
            dims=BAND_DIMS,
            attrs={
                "long_name": "Maximal spectral slope",
                "description": f"Absolute value of maximal spectral slope for bands {index_list}",
                "units": "1/nm",
                "no_data_value": np.float32(np.nan),
            },
        )
        out[SLOPE_BAND].encoding["_FillValue"] = np.float32(np.nan)
        out[SLOPE_INDEX_BAND] = xr.DataArray(
            np.full((height, width), SLOPE_INDEX_NO_DATA, dtype=np.int8),
            dims=BAND_DIMS,
            attrs={
                "long_name": "Maximal slope band index",
                "description": "Band index where the maximal slope is detected",
                "units": "1",
                "no_data_value": np.int8(SLOPE_INDEX_NO_DATA),
            },
        )
        out[SLOPE_INDEX_BAND].encoding["_FillValue"] = np.int8(SLOPE_INDEX_NO_DATA)

    logger.info("Output schema: %s (%dx%d), diagnostics=%s",
                out.attrs["product_name"], width, height, emit_diagnostics)
    return out
