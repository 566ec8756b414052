"""CLIConfig: Command-line operational overrides.

Operational parameters that commonly change between runs. Highest priority
in config resolution.
"""

from typing import Literal, Optional
from olci_anomaly.schemas.base import FlagBaseModel


class CLIConfig(FlagBaseModel):
    """Command-line configuration overrides.

    Usage
    -----
        cli_cfg = CLIConfig(emit_diagnostics=True, max_workers=8)
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    emit_diagnostics: Optional[bool] = None
    spectral_anomaly_threshold: Optional[float] = None
    tile_size: Optional[int] = None
    max_workers: Optional[int] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_file: Optional[str] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        flagging = {}
        if self.emit_diagnostics is not None:
            flagging["emit_diagnostics"] = self.emit_diagnostics
        if self.spectral_anomaly_threshold is not None:
            flagging["spectral_anomaly_threshold"] = self.spectral_anomaly_threshold
        if flagging:
            overrides["flagging"] = flagging

        processing = {}
        if self.tile_size is not None:
            processing["tile_size"] = self.tile_size
        if self.max_workers is not None:
            processing["max_workers"] = self.max_workers
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
