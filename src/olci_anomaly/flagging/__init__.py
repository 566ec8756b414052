"""Anomaly detection algorithms and the tile engine."""

from olci_anomaly.flagging.reflectance import to_reflectance
from olci_anomaly.flagging.slope import max_spectral_slope, spectral_anomaly_mask
from olci_anomaly.flagging.altitude import flag_altitude_outliers, altitude_out_of_range
from olci_anomaly.flagging.cache import TileResult, TileResultCache
from olci_anomaly.flagging.engine import AnomalyFlaggingEngine

__all__ = [
    'to_reflectance',
    'max_spectral_slope',
    'spectral_anomaly_mask',
    'flag_altitude_outliers',
    'altitude_out_of_range',
    'TileResult',
    'TileResultCache',
    'AnomalyFlaggingEngine',
]
