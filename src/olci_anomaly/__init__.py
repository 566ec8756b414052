"""`olci_anomaly` - anomaly flagging for OLCI L1b optical imagery.

Subpackages:
- contracts: Fail-fast input and output checks
- core: Product access, band table, output schema
- flagging: Reflectance, spectral slope, altitude range, tile engine
- pipeline: Whole-scene tile scheduling
- schemas: Pydantic configuration
"""

__version__ = "0.1.0"
