"""Scene-level flagging pipeline."""

from olci_anomaly.pipeline.runner import AnomalyFlaggingRunner

__all__ = ['AnomalyFlaggingRunner']
