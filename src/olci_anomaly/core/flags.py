"""Anomaly flag definitions using bitmasks.

Multiple anomalies on the same pixel are tracked with bitwise OR. Flags are
only ever added to a pixel, never cleared.
"""

import numpy as np

ANOM_FLAG_OK = 0
ANOM_SPECTRAL_MEASURE = 1 << 0  # Abnormal slope between adjacent spectral bands
ALT_OUT_OF_RANGE = 1 << 1       # Altitude outside nominal range

FLAG_DEFINITIONS = (
    ("ANOM_SPECTRAL_MEASURE", ANOM_SPECTRAL_MEASURE,
     "Anomalous spectral sample due to saturation of single microbands"),
    ("ALT_OUT_OF_RANGE", ALT_OUT_OF_RANGE,
     "Altitude values are out of nominal data range"),
)

FLAG_DTYPE = np.int8


def flag_coding_table() -> dict:
    """Bit value to flag name, e.g. ``{1: "ANOM_SPECTRAL_MEASURE", ...}``."""
    return {mask: name for name, mask, _ in FLAG_DEFINITIONS}


def flag_coding_attrs() -> dict:
    """CF-style attributes describing the flag band's bit coding."""
    return {
        "flag_masks": np.array([mask for _, mask, _ in FLAG_DEFINITIONS], dtype=FLAG_DTYPE),
        "flag_meanings": " ".join(name for name, _, _ in FLAG_DEFINITIONS),
        "flag_descriptions": "\n".join(desc for _, _, desc in FLAG_DEFINITIONS),
    }


def set_spectral_flag(flag_value: int) -> int:
    return flag_value | ANOM_SPECTRAL_MEASURE


def set_out_of_range_flag(flag_value: int) -> int:
    return flag_value | ALT_OUT_OF_RANGE


def decode_flags(flag_value: int) -> list:
    """Names of the flags set in ``flag_value``."""
    return [name for name, mask, _ in FLAG_DEFINITIONS if flag_value & mask]
