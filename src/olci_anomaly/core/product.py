"""Raster access layer over an xarray.Dataset product.

A product is an ``xarray.Dataset`` in which:

- full-resolution bands are 2-D variables with dims ``("y", "x")``
- tie-point grids are 2-D variables with dims ``("tp_y", "tp_x")`` carrying
  ``subsampling_x``/``subsampling_y`` and optional ``offset_x``/``offset_y``
  attributes (pixel-centre convention, offsets default to 0.5)
- product name, type, and time range live in ``attrs``

Tiles are plain numpy windows. The dataset is treated as read-only, so any
number of threads may pull tiles concurrently.
"""

import logging
import threading
from typing import NamedTuple, List

import numpy as np
import xarray as xr

from olci_anomaly.contracts.failure import TileComputationError, TileCancelled
from olci_anomaly.core.bands import BAND_DIMS, TIE_POINT_DIMS

__all__ = [
    'Rectangle',
    'RasterProduct',
    'CancellationToken',
    'iter_rectangles',
    'interpolate_tie_point_grid',
    'BAND_DIMS',
    'TIE_POINT_DIMS',
]

logger = logging.getLogger(__name__)


class Rectangle(NamedTuple):
    """Tile window in scene pixel coordinates. Hashable, used as cache key."""
    x: int
    y: int
    width: int
    height: int

    @property
    def rows(self) -> slice:
        return slice(self.y, self.y + self.height)

    @property
    def cols(self) -> slice:
        return slice(self.x, self.x + self.width)

    @property
    def shape(self) -> tuple:
        return (self.height, self.width)


def iter_rectangles(width: int, height: int, tile_size) -> List[Rectangle]:
    """Split a scene into non-overlapping tiles, clipping the last row/column.

    Parameters
    ----------
    width, height : int
        Scene size in pixels.
    tile_size : int or tuple of int
        Tile edge length, or (tile_height, tile_width).
    """
    if isinstance(tile_size, (tuple, list)):
        th, tw = int(tile_size[0]), int(tile_size[1])
    else:
        th = tw = int(tile_size)
    th, tw = max(1, th), max(1, tw)

    rects = []
    for y in range(0, height, th):
        for x in range(0, width, tw):
            rects.append(Rectangle(x, y, min(tw, width - x), min(th, height - y)))
    return rects


def _axis_weights(coords: np.ndarray, n: int):
    """Lower/upper tie-point index and linear weight along one axis.

    Weights outside [0, 1] extrapolate linearly past the outermost tie points.
    """
    if n == 1:
        i0 = np.zeros(coords.shape, dtype=np.intp)
        return i0, i0, np.zeros(coords.shape, dtype=np.float64)
    i0 = np.clip(np.floor(coords).astype(np.intp), 0, n - 2)
    return i0, i0 + 1, coords - i0


def interpolate_tie_point_grid(grid: np.ndarray, rectangle: Rectangle,
                               subsampling_x: float, subsampling_y: float,
                               offset_x: float = 0.5, offset_y: float = 0.5) -> np.ndarray:
    """Bilinearly interpolate a coarse grid onto the pixels of ``rectangle``.

    Pixel centre ``x + 0.5`` maps to grid coordinate
    ``(x + 0.5 - offset_x) / subsampling_x``.
    """
    grid = np.asarray(grid, dtype=np.float64)
    ny, nx = grid.shape

    xs = (np.arange(rectangle.x, rectangle.x + rectangle.width) + 0.5 - offset_x) / subsampling_x
    ys = (np.arange(rectangle.y, rectangle.y + rectangle.height) + 0.5 - offset_y) / subsampling_y

    x0, x1, wx = _axis_weights(xs, nx)
    y0, y1, wy = _axis_weights(ys, ny)
    wy = wy[:, None]

    top = grid[np.ix_(y0, x0)] * (1.0 - wx) + grid[np.ix_(y0, x1)] * wx
    bottom = grid[np.ix_(y1, x0)] * (1.0 - wx) + grid[np.ix_(y1, x1)] * wx
    return top * (1.0 - wy) + bottom * wy


class CancellationToken:
    """Cooperative cancellation flag shared between scheduler and engine."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, rectangle=None):
        if self._event.is_set():
            raise TileCancelled(rectangle)


class RasterProduct:
    """Read-only tile access to an OLCI-like product held in an xarray.Dataset.

    Example usage::

        product = RasterProduct(ds)
        rect = Rectangle(0, 0, 256, 256)
        rad = product.get_tile("Oa01_radiance", rect)
        sza = product.get_tie_point_tile("SZA", rect)
    """

    def __init__(self, ds: xr.Dataset):
        self.ds = ds
        self.width = int(ds.sizes.get("x", 0))
        self.height = int(ds.sizes.get("y", 0))

    @property
    def name(self) -> str:
        return str(self.ds.attrs.get("product_name", "product"))

    @property
    def product_type(self) -> str:
        return str(self.ds.attrs.get("product_type", "UNKNOWN"))

    @property
    def scene_shape(self) -> tuple:
        return (self.height, self.width)

    def band_names(self) -> list:
        return [str(n) for n, v in self.ds.data_vars.items() if v.dims == BAND_DIMS]

    def tie_point_grid_names(self) -> list:
        return [str(n) for n, v in self.ds.data_vars.items() if v.dims == TIE_POINT_DIMS]

    def contains_band(self, name: str) -> bool:
        return name in self.ds.data_vars and self.ds[name].dims == BAND_DIMS

    def contains_tie_point_grid(self, name: str) -> bool:
        return name in self.ds.data_vars and self.ds[name].dims == TIE_POINT_DIMS

    def get_tile(self, name: str, rectangle: Rectangle) -> np.ndarray:
        """Return the ``(height, width)`` float64 window of a band."""
        if not self.contains_band(name):
            raise TileComputationError(
                f"Source band '{name}' not available for tile {rectangle}", rectangle
            )
        window = self.ds[name].isel(y=rectangle.rows, x=rectangle.cols)
        return np.asarray(window.values, dtype=np.float64)

    def get_tie_point_tile(self, name: str, rectangle: Rectangle) -> np.ndarray:
        """Return a tie-point grid interpolated to the pixels of ``rectangle``."""
        if not self.contains_tie_point_grid(name):
            raise TileComputationError(
                f"Tie point grid '{name}' not available for tile {rectangle}", rectangle
            )
        grid = self.ds[name]
        attrs = grid.attrs
        return interpolate_tie_point_grid(
            grid.values,
            rectangle,
            subsampling_x=float(attrs.get("subsampling_x", 1.0)),
            subsampling_y=float(attrs.get("subsampling_y", 1.0)),
            offset_x=float(attrs.get("offset_x", 0.5)),
            offset_y=float(attrs.get("offset_y", 0.5)),
        )
