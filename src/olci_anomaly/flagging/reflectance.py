"""Radiance to top-of-atmosphere reflectance conversion.

    reflectance = radiance * pi / (solar_flux * cos(sza))

The solar zenith angle is converted to radians before the cosine is taken.
Samples with zero solar flux or a grazing sun give non-finite reflectance;
downstream slope code treats those as unusable rather than raising.
"""

import numpy as np

__all__ = ['to_reflectance', 'inverse_cos_sza', 'reflectance_from_inverse']

SZA_UNITS = ("degrees", "radians")


def inverse_cos_sza(sza, sza_units: str = "degrees") -> np.ndarray:
    """1 / cos(sza) with ``sza`` given in ``sza_units``."""
    if sza_units not in SZA_UNITS:
        raise ValueError(f"Unknown solar zenith angle units: {sza_units}")
    sza = np.asarray(sza, dtype=np.float64)
    sza_rad = np.deg2rad(sza) if sza_units == "degrees" else sza
    with np.errstate(divide="ignore", invalid="ignore"):
        return 1.0 / np.cos(sza_rad)


def reflectance_from_inverse(radiance, inv_solar_flux, inv_cos_sza):
    """Reflectance from precomputed reciprocals of flux and cos(sza)."""
    return radiance * np.pi * inv_solar_flux * inv_cos_sza


def to_reflectance(radiance, solar_flux, sza, sza_units: str = "degrees") -> np.ndarray:
    """Convert radiance to reflectance, broadcasting over bands and pixels.

    Parameters
    ----------
    radiance : array_like
        Radiance samples, e.g. shaped (bands, width).
    solar_flux : array_like
        Solar flux samples, same shape as ``radiance``.
    sza : array_like
        Solar zenith angle, broadcastable to ``radiance`` (one value per pixel).
    sza_units : {"degrees", "radians"}
        Unit of ``sza``.

    Examples
    --------
    >>> round(float(to_reflectance(10.0, 100.0, 0.0, "radians")), 4)  # 0.1 * pi
    0.3142
    """
    radiance = np.asarray(radiance, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        inv_flux = 1.0 / np.asarray(solar_flux, dtype=np.float64)
        return reflectance_from_inverse(radiance, inv_flux, inverse_cos_sza(sza, sza_units))
