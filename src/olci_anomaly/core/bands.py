"""Spectral band table for OLCI anomaly flagging.

The band table is an explicit, immutable value handed to the validator and
the engine. It fixes which spectral indices take part in the slope test, in
which canonical order, and how the per-index variables are named.
"""

from dataclasses import dataclass
from typing import Tuple

__all__ = ['BandSet', 'DEFAULT_BAND_INDICES', 'BAND_DIMS', 'TIE_POINT_DIMS']

BAND_DIMS = ("y", "x")
TIE_POINT_DIMS = ("tp_y", "tp_x")

# OLCI bands 13-15, 19 and 20 sit in absorption features and are left out.
DEFAULT_BAND_INDICES = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 16, 17, 18, 21)


@dataclass(frozen=True)
class BandSet:
    """Ordered set of spectral indices and the variable names derived from them.

    Auxiliary bands (solar flux, centre wavelength) are always addressed by
    spectral index, never by position in ``indices``.
    """

    indices: Tuple[int, ...] = DEFAULT_BAND_INDICES
    radiance_pattern: str = "Oa{index:02d}_radiance"
    solar_flux_pattern: str = "solar_flux_band_{index}"
    lambda0_pattern: str = "lambda0_band_{index}"
    altitude_band: str = "altitude"
    sza_grid: str = "SZA"

    def __post_init__(self):
        indices = tuple(int(i) for i in self.indices)
        if not indices:
            raise ValueError("BandSet needs at least one spectral index")
        if len(set(indices)) != len(indices):
            raise ValueError(f"Duplicate spectral indices in {indices}")
        if any(i < 1 or i > 127 for i in indices):
            raise ValueError(f"Spectral indices must be in 1..127: {indices}")
        object.__setattr__(self, "indices", indices)

    def __len__(self) -> int:
        return len(self.indices)

    def radiance_name(self, index: int) -> str:
        return self.radiance_pattern.format(index=index)

    def solar_flux_name(self, index: int) -> str:
        return self.solar_flux_pattern.format(index=index)

    def lambda0_name(self, index: int) -> str:
        return self.lambda0_pattern.format(index=index)

    def radiance_names(self) -> list:
        return [self.radiance_name(i) for i in self.indices]

    def solar_flux_names(self) -> list:
        return [self.solar_flux_name(i) for i in self.indices]

    def lambda0_names(self) -> list:
        return [self.lambda0_name(i) for i in self.indices]

    def required_band_names(self) -> list:
        """All full-resolution bands the engine reads, in validation order."""
        return (
            self.radiance_names()
            + self.solar_flux_names()
            + self.lambda0_names()
            + [self.altitude_band]
        )

    @classmethod
    def from_config(cls, bands_cfg) -> "BandSet":
        """Build from the ``bands`` section of InternalConfig."""
        return cls(
            indices=tuple(bands_cfg.indices),
            radiance_pattern=bands_cfg.radiance_pattern,
            solar_flux_pattern=bands_cfg.solar_flux_pattern,
            lambda0_pattern=bands_cfg.lambda0_pattern,
            altitude_band=bands_cfg.altitude_band,
            sza_grid=bands_cfg.sza_grid,
        )
