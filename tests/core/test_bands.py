"""Tests for the spectral band table."""

import pytest

pytestmark = pytest.mark.unit

from olci_anomaly.core.bands import BandSet, DEFAULT_BAND_INDICES


def test_default_band_table():
    bs = BandSet()
    assert bs.indices == DEFAULT_BAND_INDICES
    assert len(bs) == 16
    assert 13 not in bs.indices


def test_variable_names_follow_olci_convention():
    bs = BandSet()
    assert bs.radiance_name(1) == "Oa01_radiance"
    assert bs.radiance_name(21) == "Oa21_radiance"
    assert bs.solar_flux_name(7) == "solar_flux_band_7"
    assert bs.lambda0_name(17) == "lambda0_band_17"


def test_auxiliary_names_use_spectral_index_not_position():
    bs = BandSet(indices=(16, 21))
    assert bs.solar_flux_names() == ["solar_flux_band_16", "solar_flux_band_21"]
    assert bs.lambda0_names() == ["lambda0_band_16", "lambda0_band_21"]


def test_required_band_names_order():
    bs = BandSet(indices=(3, 4))
    assert bs.required_band_names() == [
        "Oa03_radiance", "Oa04_radiance",
        "solar_flux_band_3", "solar_flux_band_4",
        "lambda0_band_3", "lambda0_band_4",
        "altitude",
    ]


def test_rejects_empty_indices():
    with pytest.raises(ValueError, match="at least one"):
        BandSet(indices=())


def test_rejects_duplicate_indices():
    with pytest.raises(ValueError, match="Duplicate"):
        BandSet(indices=(1, 2, 1))


def test_from_config(make_config):
    config = make_config(BAND_INDICES=[2, 5, 9])
    bs = BandSet.from_config(config.bands)
    assert bs.indices == (2, 5, 9)
    assert bs.sza_grid == "SZA"


@pytest.mark.parametrize("indices", [(0, 1), (100, 200), (-1, 2)])
def test_rejects_indices_outside_int8_range(indices):
    with pytest.raises(ValueError, match="1..127"):
        BandSet(indices=indices)
