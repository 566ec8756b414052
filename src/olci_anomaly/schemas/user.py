"""UserConfig: Forgiving, minimal user-facing configuration.

Accepts flat keys with uppercase aliases (EMIT_DIAGNOSTICS → emit_diagnostics,
SPECTRAL_ANOMALY_THRESHOLD → spectral_anomaly_threshold, ...) and nested
section overrides for advanced users. Users only specify what they want to
override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from olci_anomaly.schemas.base import FlagBaseModel


class UserFlaggingConfig(FlagBaseModel):
    """User-facing flagging config."""
    emit_diagnostics: Optional[bool] = None
    spectral_anomaly_threshold: Optional[float] = None
    altitude_max: Optional[float] = None
    altitude_min: Optional[float] = None
    sza_units: Optional[Literal["degrees", "radians"]] = None


class UserBandsConfig(FlagBaseModel):
    """User-facing band table overrides."""
    indices: Optional[list[int]] = None
    radiance_pattern: Optional[str] = None
    solar_flux_pattern: Optional[str] = None
    lambda0_pattern: Optional[str] = None
    altitude_band: Optional[str] = None
    sza_grid: Optional[str] = None


class UserProcessingConfig(FlagBaseModel):
    """User-facing tile scheduling config."""
    tile_size: Optional[int] = None
    max_workers: Optional[int] = None
    cache_capacity: Optional[int] = None


class UserConfig(FlagBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            EMIT_DIAGNOSTICS=True,
            SPECTRAL_ANOMALY_THRESHOLD=0.12,
            TILE_SIZE=512,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Flagging settings (flat aliases)
    emit_diagnostics: Optional[bool] = Field(None, alias="EMIT_DIAGNOSTICS")
    spectral_anomaly_threshold: Optional[float] = Field(None, alias="SPECTRAL_ANOMALY_THRESHOLD")
    altitude_max: Optional[float] = Field(None, alias="ALTITUDE_MAX")
    altitude_min: Optional[float] = Field(None, alias="ALTITUDE_MIN")
    sza_units: Optional[Literal["degrees", "radians"]] = Field(None, alias="SZA_UNITS")

    # Band table
    band_indices: Optional[list[int]] = Field(None, alias="BAND_INDICES")

    # Processing settings
    tile_size: Optional[int] = Field(None, alias="TILE_SIZE")
    max_workers: Optional[int] = Field(None, alias="MAX_WORKERS")

    # Logging
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")

    # Nested overrides (advanced users)
    flagging: Optional[UserFlaggingConfig] = None
    bands: Optional[UserBandsConfig] = None
    processing: Optional[UserProcessingConfig] = None

    model_config = FlagBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("spectral_anomaly_threshold", "altitude_max", "altitude_min", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("sza_units", mode="before")
    @classmethod
    def normalize_units(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        flagging = {}
        for key in ("emit_diagnostics", "spectral_anomaly_threshold",
                    "altitude_max", "altitude_min", "sza_units"):
            value = getattr(self, key)
            if value is not None:
                flagging[key] = value
        if self.flagging is not None:
            flagging.update(self.flagging.model_dump(exclude_none=True))
        if flagging:
            overrides["flagging"] = flagging

        bands = {}
        if self.band_indices is not None:
            bands["indices"] = list(self.band_indices)
        if self.bands is not None:
            bands.update(self.bands.model_dump(exclude_none=True))
        if bands:
            overrides["bands"] = bands

        processing = {}
        if self.tile_size is not None:
            processing["tile_size"] = self.tile_size
        if self.max_workers is not None:
            processing["max_workers"] = self.max_workers
        if self.processing is not None:
            processing.update(self.processing.model_dump(exclude_none=True))
        if processing:
            overrides["processing"] = processing

        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
