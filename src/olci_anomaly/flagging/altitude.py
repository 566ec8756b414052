"""Altitude range anomaly detection."""

import numpy as np

from olci_anomaly.core.flags import ALT_OUT_OF_RANGE, FLAG_DTYPE, set_out_of_range_flag

ALTITUDE_MAX = 8850.0
ALTITUDE_MIN = -11050.0


def altitude_out_of_range(altitude, altitude_max: float = ALTITUDE_MAX,
                          altitude_min: float = ALTITUDE_MIN) -> np.ndarray:
    """True where altitude >= max or altitude <= min. NaN is never flagged."""
    altitude = np.asarray(altitude, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        return (altitude >= altitude_max) | (altitude <= altitude_min)


def flag_altitude_outliers(flags: np.ndarray, altitude, altitude_max: float = ALTITUDE_MAX,
                           altitude_min: float = ALTITUDE_MIN) -> np.ndarray:
    """OR ``ALT_OUT_OF_RANGE`` into ``flags`` in place and return it.

    Bits already set in ``flags`` are preserved.
    """
    mask = altitude_out_of_range(altitude, altitude_max, altitude_min)
    flags[mask] |= FLAG_DTYPE(ALT_OUT_OF_RANGE)
    return flags


def process_altitude_outlier_pixel(flag_value: int, altitude: float,
                                   altitude_max: float = ALTITUDE_MAX,
                                   altitude_min: float = ALTITUDE_MIN) -> int:
    """Single-pixel variant of :func:`flag_altitude_outliers`."""
    if altitude >= altitude_max or altitude <= altitude_min:
        return set_out_of_range_flag(flag_value)
    return flag_value
