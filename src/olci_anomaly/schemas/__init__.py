"""Pydantic configuration schemas for anomaly flagging.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from olci_anomaly.schemas.resolve import resolve_config
from olci_anomaly.schemas.internal import InternalConfig
from olci_anomaly.schemas.param import ParamConfig
from olci_anomaly.schemas.user import UserConfig
from olci_anomaly.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
