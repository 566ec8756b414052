"""Product model for OLCI anomaly flagging.

Band table, raster tile access, flag coding, and output schema.
"""

from olci_anomaly.core.bands import BandSet
from olci_anomaly.core.product import RasterProduct, Rectangle, CancellationToken, iter_rectangles
from olci_anomaly.core.output import build_output_schema, target_band_names

__all__ = [
    'BandSet',
    'RasterProduct',
    'Rectangle',
    'CancellationToken',
    'iter_rectangles',
    'build_output_schema',
    'target_band_names',
]
