"""Tests for altitude range flagging."""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from olci_anomaly.core.flags import ALT_OUT_OF_RANGE, ANOM_SPECTRAL_MEASURE
from olci_anomaly.flagging.altitude import (
    altitude_out_of_range,
    flag_altitude_outliers,
    process_altitude_outlier_pixel,
)


def test_out_of_range_altitudes_flagged():
    flags = np.zeros(3, dtype=np.int8)

    flag_altitude_outliers(flags, np.array([9000.0, 0.0, -11051.0]))

    assert flags.tolist() == [2, 0, 2]


def test_range_limits_are_flagged():
    mask = altitude_out_of_range([8850.0, 8849.9, -11050.0, -11049.9])
    assert mask.tolist() == [True, False, True, False]


def test_nan_altitude_not_flagged():
    assert not altitude_out_of_range([np.nan])[0]


def test_existing_bits_preserved():
    flags = np.array([ANOM_SPECTRAL_MEASURE, ANOM_SPECTRAL_MEASURE], dtype=np.int8)

    flag_altitude_outliers(flags, np.array([9000.0, 100.0]))

    assert flags.tolist() == [3, 1]


def test_idempotent():
    flags = np.zeros(2, dtype=np.int8)
    alt = np.array([9000.0, 100.0])

    flag_altitude_outliers(flags, alt)
    once = flags.copy()
    flag_altitude_outliers(flags, alt)

    np.testing.assert_array_equal(flags, once)


def test_custom_limits():
    flags = np.zeros(2, dtype=np.int8)

    flag_altitude_outliers(flags, np.array([600.0, 400.0]), altitude_max=500.0, altitude_min=-500.0)

    assert flags.tolist() == [2, 0]


def test_single_pixel_variant():
    assert process_altitude_outlier_pixel(0, 9000.0) == ALT_OUT_OF_RANGE
    assert process_altitude_outlier_pixel(1, -11051.0) == 3
    assert process_altitude_outlier_pixel(1, 0.0) == 1
