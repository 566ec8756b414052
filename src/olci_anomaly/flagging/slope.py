"""Spectral slope anomaly detection.

For each pixel the participating bands are ordered by their centre
wavelength and the slope between every pair of spectrally adjacent bands is

    slope = (r[j] - r[i]) / (lambda[j] - lambda[i])

The largest absolute slope, and the spectral index of the shorter-wavelength
band of that pair, are reported. A pair is skipped when either reflectance or
wavelength is not finite, or when both bands share the same wavelength.
"""

import numpy as np

__all__ = ['max_spectral_slope', 'spectral_anomaly_mask', 'NO_SLOPE_INDEX']

NO_SLOPE_INDEX = -1


def max_spectral_slope(reflectance, wavelength, band_indices):
    """Maximal absolute slope between adjacent bands, per pixel.

    Parameters
    ----------
    reflectance : array_like
        Shape (bands, pixels).
    wavelength : array_like
        Centre wavelength in nm, shape (bands, pixels).
    band_indices : sequence of int
        Spectral index of each band along axis 0.

    Returns
    -------
    max_slope : np.ndarray
        float64, shape (pixels,), NaN where no pair could be evaluated.
    band_index : np.ndarray
        int8, shape (pixels,), -1 where no pair could be evaluated.
    """
    refl = np.asarray(reflectance, dtype=np.float64)
    lam = np.asarray(wavelength, dtype=np.float64)
    ids = np.asarray(band_indices, dtype=np.int8)
    if refl.shape != lam.shape:
        raise ValueError(f"reflectance shape {refl.shape} does not match wavelength shape {lam.shape}")
    if refl.ndim == 1:
        refl, lam = refl[:, None], lam[:, None]

    n_bands, n_pix = refl.shape
    if ids.shape != (n_bands,):
        raise ValueError(f"Expected {n_bands} band indices, got {ids.shape[0]}")
    if n_bands < 2:
        return np.full(n_pix, np.nan), np.full(n_pix, NO_SLOPE_INDEX, dtype=np.int8)

    # NaN wavelengths sort last, so they only ever meet other unusable bands
    order = np.argsort(lam, axis=0, kind="stable")
    lam_s = np.take_along_axis(lam, order, axis=0)
    refl_s = np.take_along_axis(refl, order, axis=0)
    ids_s = ids[order]

    d_lam = np.diff(lam_s, axis=0)
    with np.errstate(divide="ignore", invalid="ignore"):
        slope = np.abs(np.diff(refl_s, axis=0) / d_lam)
    valid = np.isfinite(slope) & (d_lam != 0)
    slope = np.where(valid, slope, -np.inf)

    pos = np.argmax(slope, axis=0)
    cols = np.arange(n_pix)
    best = slope[pos, cols]
    found = np.isfinite(best)

    max_slope = np.where(found, best, np.nan)
    band_index = np.where(found, ids_s[pos, cols], NO_SLOPE_INDEX).astype(np.int8)
    return max_slope, band_index


def spectral_anomaly_mask(max_slope, threshold: float) -> np.ndarray:
    """True where the maximal slope strictly exceeds ``threshold``."""
    max_slope = np.asarray(max_slope, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        return np.isfinite(max_slope) & (max_slope > threshold)
