"""Tests for tiling and tile access on xarray-backed products."""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from olci_anomaly.contracts import TileCancelled, TileComputationError
from olci_anomaly.core.product import (
    CancellationToken,
    RasterProduct,
    Rectangle,
    interpolate_tie_point_grid,
    iter_rectangles,
)


class TestRectangle:

    def test_slices_and_shape(self):
        rect = Rectangle(x=2, y=1, width=3, height=2)
        assert rect.rows == slice(1, 3)
        assert rect.cols == slice(2, 5)
        assert rect.shape == (2, 3)

    def test_hashable_and_comparable(self):
        assert Rectangle(0, 0, 4, 4) == Rectangle(0, 0, 4, 4)
        assert len({Rectangle(0, 0, 4, 4), Rectangle(0, 0, 4, 4)}) == 1


class TestIterRectangles:

    def test_covers_scene_exactly_once(self):
        width, height = 10, 7
        cover = np.zeros((height, width), dtype=int)

        for rect in iter_rectangles(width, height, 4):
            cover[rect.rows, rect.cols] += 1

        assert np.all(cover == 1)

    def test_edge_tiles_are_clipped(self):
        rects = iter_rectangles(5, 3, 4)
        assert Rectangle(4, 0, 1, 3) in rects
        assert len(rects) == 2

    def test_tile_larger_than_scene(self):
        assert iter_rectangles(3, 2, 256) == [Rectangle(0, 0, 3, 2)]

    def test_rectangular_tiles(self):
        rects = iter_rectangles(4, 4, (1, 4))
        assert rects == [Rectangle(0, y, 4, 1) for y in range(4)]


class TestTiePointInterpolation:

    def test_constant_grid(self):
        grid = np.full((3, 3), 42.0)
        out = interpolate_tie_point_grid(grid, Rectangle(0, 0, 4, 4), 2, 2)
        np.testing.assert_allclose(out, 42.0)

    def test_reproduces_linear_field(self):
        # Tie point (j, i) sits on pixel centre (j*4 + 0.5, i*4 + 0.5)
        ty, tx = np.mgrid[0:3, 0:4].astype(float)
        grid = 10.0 + 2.0 * (tx * 4) + 3.0 * (ty * 4)

        out = interpolate_tie_point_grid(grid, Rectangle(0, 0, 12, 8), 4, 4)

        py, px = np.mgrid[0:8, 0:12].astype(float)
        np.testing.assert_allclose(out, 10.0 + 2.0 * px + 3.0 * py)

    def test_extrapolates_past_last_tie_point(self):
        grid = np.array([[0.0, 4.0]])
        out = interpolate_tie_point_grid(grid, Rectangle(0, 0, 8, 1), 4, 1)
        np.testing.assert_allclose(out[0], np.arange(8.0))

    def test_window_matches_full_scene(self):
        grid = np.arange(12.0).reshape(3, 4) ** 2
        full = interpolate_tie_point_grid(grid, Rectangle(0, 0, 10, 7), 3, 3)
        part = interpolate_tie_point_grid(grid, Rectangle(4, 2, 3, 5), 3, 3)
        np.testing.assert_allclose(part, full[2:7, 4:7])


class TestRasterProduct:

    def test_metadata(self, fake_product):
        product = RasterProduct(fake_product)
        assert product.name == "S3A_OL_1_EFR_TEST"
        assert product.product_type == "OL_1_EFR"
        assert product.scene_shape == (4, 6)

    def test_band_and_grid_listing(self, fake_product):
        product = RasterProduct(fake_product)
        assert "Oa01_radiance" in product.band_names()
        assert "latitude" not in product.band_names()
        assert product.tie_point_grid_names() == ["SZA"]
        assert product.contains_tie_point_grid("SZA")
        assert not product.contains_band("SZA")

    def test_get_tile_returns_window(self, fake_product):
        fake_product["altitude"].values[:] = np.arange(24).reshape(4, 6)
        product = RasterProduct(fake_product)

        tile = product.get_tile("altitude", Rectangle(1, 2, 3, 2))

        assert tile.dtype == np.float64
        np.testing.assert_array_equal(tile, [[13, 14, 15], [19, 20, 21]])

    def test_get_tie_point_tile(self, fake_product):
        tile = RasterProduct(fake_product).get_tie_point_tile("SZA", Rectangle(0, 0, 6, 4))
        np.testing.assert_allclose(tile, 30.0)

    def test_missing_band_raises_tile_computation_error(self, fake_product):
        product = RasterProduct(fake_product.drop_vars("Oa02_radiance"))
        rect = Rectangle(0, 0, 2, 2)

        with pytest.raises(TileComputationError) as excinfo:
            product.get_tile("Oa02_radiance", rect)

        assert excinfo.value.rectangle == rect

    def test_missing_grid_raises_tile_computation_error(self, fake_product):
        product = RasterProduct(fake_product.drop_vars("SZA"))

        with pytest.raises(TileComputationError, match="Tie point grid 'SZA'"):
            product.get_tie_point_tile("SZA", Rectangle(0, 0, 2, 2))


class TestCancellationToken:

    def test_initially_not_cancelled(self):
        token = CancellationToken()
        assert not token.is_cancelled()
        token.raise_if_cancelled()

    def test_cancel_raises(self):
        token = CancellationToken()
        token.cancel()
        rect = Rectangle(0, 0, 1, 1)

        with pytest.raises(TileCancelled) as excinfo:
            token.raise_if_cancelled(rect)

        assert excinfo.value.rectangle == rect
