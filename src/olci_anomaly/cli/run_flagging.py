"""Core anomaly flagging execution logic.

This module contains the actual runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import importlib.util
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import xarray as xr

from olci_anomaly.pipeline.runner import AnomalyFlaggingRunner
from olci_anomaly.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure root logger with console and optional file handlers."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_file)


def run_anomaly_flagging(
    input_path: str,
    output_path: str,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
) -> xr.Dataset:
    """Flag an OLCI product stored as netCDF and write the flagged product.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Opens the input product with xarray
    3. Validates, allocates and fills the output in tiles
    4. Writes the output product to ``output_path``

    Parameters
    ----------
    input_path : str
        netCDF file readable by ``xarray.open_dataset``.

    output_path : str
        Destination netCDF file.

    user_config_path : str, optional
        Python file with a CONFIG dict.

    cli_args : dict, optional
        CLI overrides. Keys: emit_diagnostics, spectral_anomaly_threshold,
        tile_size, max_workers, log_level, log_file. All optional.

    verbose : bool, optional
        Enable DEBUG logging and print the resolved configuration.

    Returns
    -------
    xr.Dataset
        The flagged output product.
    """
    param_cfg = ParamConfig()

    user_cfg = None
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    setup_logging(config.logging.level, config.logging.log_file)

    print(f"\n{'='*60}")
    print("OLCI Anomaly Flagging")
    print('='*60)
    print(f"Input:       {input_path}")
    print(f"Output:      {output_path}")
    print(f"Threshold:   {config.flagging.spectral_anomaly_threshold} 1/nm")
    print(f"Diagnostics: {config.flagging.emit_diagnostics}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    with xr.open_dataset(input_path) as ds:
        ds = ds.load()

    runner = AnomalyFlaggingRunner(config)
    out = runner.run(ds)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    out.to_netcdf(output_path)
    logger.info("Wrote %s", output_path)
    return out


def main(argv=None):
    parser = argparse.ArgumentParser(description="Flag spectral and altitude anomalies in OLCI L1b products")
    parser.add_argument("input", help="Input product (netCDF)")
    parser.add_argument("output", help="Output product (netCDF)")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--diagnostics", action="store_true", default=None,
                        help="Write max_spectral_slope and max_slope_band_index")
    parser.add_argument("--threshold", type=float, help="Spectral slope threshold (1/nm)")
    parser.add_argument("--tile-size", type=int, help="Tile edge length in pixels")
    parser.add_argument("--workers", type=int, help="Worker threads")
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    run_anomaly_flagging(
        args.input,
        args.output,
        user_config_path=args.config,
        cli_args={
            "emit_diagnostics": args.diagnostics,
            "spectral_anomaly_threshold": args.threshold,
            "tile_size": args.tile_size,
            "max_workers": args.workers,
            "log_file": args.log_file,
        },
        verbose=args.verbose,
    )


if __name__ == "__main__":
    main()
