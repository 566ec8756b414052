"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and immutable.
"""

from typing import Literal, Optional
from pydantic import ConfigDict, Field, model_validator
from olci_anomaly.schemas.base import FlagBaseModel


class _FrozenModel(FlagBaseModel):
    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class InternalFlaggingConfig(_FrozenModel):
    """Runtime anomaly detection parameters."""
    emit_diagnostics: bool
    spectral_anomaly_threshold: float = Field(gt=0)
    altitude_max: float
    altitude_min: float
    sza_units: Literal["degrees", "radians"]

    @model_validator(mode="after")
    def check_altitude_range(self):
        if self.altitude_min >= self.altitude_max:
            raise ValueError(
                f"altitude_min ({self.altitude_min}) must be below altitude_max ({self.altitude_max})"
            )
        return self


class InternalBandsConfig(_FrozenModel):
    """Runtime band table."""
    indices: tuple[int, ...] = Field(min_length=2)
    radiance_pattern: str
    solar_flux_pattern: str
    lambda0_pattern: str
    altitude_band: str
    sza_grid: str

    @model_validator(mode="after")
    def check_unique_indices(self):
        if len(set(self.indices)) != len(self.indices):
            raise ValueError(f"Duplicate spectral band indices: {self.indices}")
        if any(i < 1 or i > 127 for i in self.indices):
            raise ValueError(f"Spectral band indices must be in 1..127: {self.indices}")
        return self


class InternalProcessingConfig(_FrozenModel):
    """Runtime tile scheduling configuration."""
    tile_size: int = Field(ge=1)
    max_workers: int = Field(ge=1)
    cache_capacity: int = Field(ge=1)


class InternalLoggingConfig(_FrozenModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str] = None


class InternalConfig(_FrozenModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.threshold = config.flagging.spectral_anomaly_threshold  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """
    flagging: InternalFlaggingConfig
    bands: InternalBandsConfig
    processing: InternalProcessingConfig
    logging: InternalLoggingConfig
