"""Command-line interface modules for anomaly flagging.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from olci_anomaly.cli.run_flagging import run_anomaly_flagging, main

__all__ = ['run_anomaly_flagging', 'main']
