import numpy as np
import xarray as xr

from olci_anomaly.core.bands import BandSet

# Nominal OLCI centre wavelengths (nm)
OLCI_WAVELENGTHS = {
    1: 400.0, 2: 412.5, 3: 442.5, 4: 490.0, 5: 510.0, 6: 560.0, 7: 620.0,
    8: 665.0, 9: 673.75, 10: 681.25, 11: 708.75, 12: 753.75, 13: 761.25,
    14: 764.375, 15: 767.5, 16: 778.75, 17: 865.0, 18: 885.0, 19: 900.0,
    20: 940.0, 21: 1020.0,
}


def radiance_for(reflectance, solar_flux, sza_deg):
    """Radiance that converts back to ``reflectance``."""
    return reflectance * solar_flux * np.cos(np.deg2rad(sza_deg)) / np.pi


def make_fake_product(
    shape=(4, 6),
    reflectance=0.1,
    solar_flux=1500.0,
    sza_deg=30.0,
    altitude=100.0,
    band_set=None,
    wavelengths=None,
    tie_point_step=2,
    drop=(),
):
    """
    Create a minimal OLCI L1b-like product with a flat reflectance spectrum.

    Radiance, solar flux and lambda0 are constant per band and the SZA
    tie-point grid is constant, so interpolation is exact everywhere.
    """
    band_set = band_set or BandSet()
    wavelengths = wavelengths or OLCI_WAVELENGTHS
    h, w = shape

    data_vars = {}
    rad = radiance_for(reflectance, solar_flux, sza_deg)
    for idx in band_set.indices:
        data_vars[band_set.radiance_name(idx)] = (
            ("y", "x"), np.full(shape, rad, dtype=np.float64))
        data_vars[band_set.solar_flux_name(idx)] = (
            ("y", "x"), np.full(shape, solar_flux, dtype=np.float32))
        data_vars[band_set.lambda0_name(idx)] = (
            ("y", "x"), np.full(shape, wavelengths[idx], dtype=np.float32))

    alt = np.broadcast_to(np.asarray(altitude, dtype=np.float32), shape).copy()
    data_vars[band_set.altitude_band] = (("y", "x"), alt)

    tp_shape = ((h - 1) // tie_point_step + 2, (w - 1) // tie_point_step + 2)
    data_vars[band_set.sza_grid] = xr.Variable(
        ("tp_y", "tp_x"),
        np.full(tp_shape, sza_deg, dtype=np.float64),
        attrs={
            "subsampling_x": tie_point_step,
            "subsampling_y": tie_point_step,
            "offset_x": 0.5,
            "offset_y": 0.5,
            "units": "degrees",
        },
    )

    lat = np.linspace(45.0, 46.0, h)[:, None] * np.ones((1, w))
    lon = np.linspace(7.0, 8.0, w)[None, :] * np.ones((h, 1))

    ds = xr.Dataset(
        data_vars=data_vars,
        coords={
            "latitude": (("y", "x"), lat),
            "longitude": (("y", "x"), lon),
        },
        attrs={
            "product_name": "S3A_OL_1_EFR_TEST",
            "product_type": "OL_1_EFR",
            "start_time": "2021-04-08T10:00:00Z",
            "end_time": "2021-04-08T10:03:00Z",
        },
    )
    if drop:
        ds = ds.drop_vars(list(drop))
    return ds


def set_pixel_reflectance(ds, band_set, index, value, y, x,
                          solar_flux=1500.0, sza_deg=30.0):
    """Overwrite one band's radiance at one pixel so it converts to ``value``."""
    ds[band_set.radiance_name(index)].values[y, x] = radiance_for(value, solar_flux, sza_deg)
