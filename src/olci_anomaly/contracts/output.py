"""Output product contract.

Enforces that the schema builder produced a flag band with its coding and,
when requested, both diagnostic bands with their no-data conventions.
"""

import numpy as np
import xarray as xr

from olci_anomaly.contracts.base import require


def assert_output_schema(ds: xr.Dataset, flag_band: str, emit_diagnostics: bool,
                         slope_band: str = "max_spectral_slope",
                         index_band: str = "max_slope_band_index") -> None:
    """Enforce output schema contract.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(flag_band in ds.data_vars,
            f"Output contract violated: '{flag_band}' not found")
    flags = ds[flag_band]
    require(flags.dtype == np.int8,
            f"Output contract violated: '{flag_band}' dtype is {flags.dtype}, expected int8")
    require("flag_masks" in flags.attrs and "flag_meanings" in flags.attrs,
            f"Output contract violated: '{flag_band}' has no flag coding")
    require(flags.dims == ("y", "x"),
            f"Output contract violated: '{flag_band}' dims are {flags.dims}, expected ('y', 'x')")

    if emit_diagnostics:
        for name in (slope_band, index_band):
            require(name in ds.data_vars,
                    f"Output contract violated: diagnostic band '{name}' not found")
        require(ds[index_band].dtype == np.int8,
                f"Output contract violated: '{index_band}' dtype is {ds[index_band].dtype}, expected int8")
