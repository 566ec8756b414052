"""ParamConfig: Expert defaults for anomaly flagging.

Single source of truth for default values. Runtime code never reads from
ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from olci_anomaly.schemas.base import FlagBaseModel


class FlaggingConfig(FlagBaseModel):
    """Anomaly detection parameters."""
    emit_diagnostics: bool = Field(
        False, description="Add max_spectral_slope and max_slope_band_index bands"
    )
    spectral_anomaly_threshold: float = Field(
        0.15, gt=0, description="Saturation threshold on the maximal spectral slope in 1/nm"
    )
    altitude_max: float = Field(8850.0, description="Altitudes at or above are flagged (m)")
    altitude_min: float = Field(-11050.0, description="Altitudes at or below are flagged (m)")
    sza_units: Literal["degrees", "radians"] = "degrees"

    @field_validator("spectral_anomaly_threshold", "altitude_max", "altitude_min", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float."""
        return float(v)


class BandsConfig(FlagBaseModel):
    """Spectral band table and variable naming."""
    indices: list[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 16, 17, 18, 21],
        min_length=2,
    )
    radiance_pattern: str = "Oa{index:02d}_radiance"
    solar_flux_pattern: str = "solar_flux_band_{index}"
    lambda0_pattern: str = "lambda0_band_{index}"
    altitude_band: str = "altitude"
    sza_grid: str = "SZA"


class ProcessingConfig(FlagBaseModel):
    """Tile scheduling configuration."""
    tile_size: int = Field(256, ge=1, description="Tile edge length in pixels")
    max_workers: int = Field(4, ge=1, description="Worker threads computing tiles")
    cache_capacity: int = Field(64, ge=1, description="Max rectangles held in the tile result cache")


class LoggingConfig(FlagBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v


class ParamConfig(FlagBaseModel):
    """Complete expert configuration with scientifically-validated defaults."""
    flagging: FlaggingConfig = Field(default_factory=FlaggingConfig)
    bands: BandsConfig = Field(default_factory=BandsConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
