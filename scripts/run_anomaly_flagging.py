#!/usr/bin/env python3
"""OLCI anomaly flagging runner.

Usage:
    python scripts/run_anomaly_flagging.py input.nc output.nc
    python scripts/run_anomaly_flagging.py input.nc output.nc --config scripts/user_config.py
    python scripts/run_anomaly_flagging.py input.nc output.nc --diagnostics --workers 8
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from olci_anomaly.cli.run_flagging import main


if __name__ == "__main__":
    main()
