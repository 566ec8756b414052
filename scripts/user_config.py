"""OLCI anomaly flagging user configuration.

Modify settings here to customize flagging. Expert defaults live in
olci_anomaly.schemas.param.ParamConfig.

Usage:
    python scripts/run_anomaly_flagging.py in.nc out.nc --config scripts/user_config.py
"""

CONFIG = {
    # ========================================================================
    # FLAGGING
    # ========================================================================
    "EMIT_DIAGNOSTICS": False,            # Write max_spectral_slope / max_slope_band_index
    "SPECTRAL_ANOMALY_THRESHOLD": 0.15,   # Max allowed |slope| between adjacent bands (1/nm)
    "ALTITUDE_MAX": 8850,                 # Altitudes at or above are flagged (m)
    "ALTITUDE_MIN": -11050,               # Altitudes at or below are flagged (m)
    "SZA_UNITS": "degrees",               # Unit of the SZA tie-point grid

    # ========================================================================
    # PROCESSING
    # ========================================================================
    "TILE_SIZE": 256,                     # Tile edge length in pixels
    "MAX_WORKERS": 4,                     # Worker threads

    # ========================================================================
    # LOGGING
    # ========================================================================
    "LOG_LEVEL": "INFO",
    "LOG_FILE": None,
}
