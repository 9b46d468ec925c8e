"""Tests for per-point normal estimation."""

import numpy as np
import pytest

from pointprep.errors import PreconditionError
from pointprep.geometry.spatial import SpatialIndex
from pointprep.processing.normals import estimate_normals


class TestEstimateNormals:
    def test_grid_normals_vertical(self, grid_points):
        est = estimate_normals(grid_points, k=8)
        np.testing.assert_allclose(np.abs(est.normals[:, 2]), 1.0, atol=1e-7)
        np.testing.assert_allclose(est.normals[:, :2], 0.0, atol=1e-7)
        assert est.num_degenerate == 0
        assert not est.oriented.any()

    def test_large_coordinates(self, utm_tilted_grid):
        est = estimate_normals(utm_tilted_grid, k=8)
        expected = np.array([0.5, 0.0, -1.0]) / np.sqrt(1.25)
        np.testing.assert_allclose(np.abs(est.normals @ expected), 1.0, atol=1e-9)
        assert est.num_degenerate == 0

    def test_unit_length(self, sphere_points):
        est = estimate_normals(sphere_points, k=10)
        np.testing.assert_allclose(np.linalg.norm(est.normals, axis=1), 1.0, atol=1e-3)

    def test_sphere_normals_radial(self, sphere_points):
        est = estimate_normals(sphere_points, k=10)
        alignment = np.abs(np.einsum("ij,ij->i", est.normals, sphere_points))
        assert alignment.min() > 0.95

    def test_input_untouched(self, sphere_points):
        before = sphere_points.copy()
        estimate_normals(sphere_points, k=6)
        np.testing.assert_array_equal(sphere_points, before)

    def test_single_point_degenerate(self):
        est = estimate_normals(np.array([[1.0, 2.0, 3.0]]), k=5)
        assert est.degenerate.tolist() == [True]
        assert est.num_degenerate == 1
        assert np.linalg.norm(est.normals[0]) == pytest.approx(1.0)

    def test_two_points(self):
        est = estimate_normals(np.array([[0.0, 0, 0], [1.0, 1, 0]]), k=2)
        assert est.degenerate.all()
        assert np.all(np.isfinite(est.normals))

    def test_shared_index(self, grid_points):
        index = SpatialIndex(grid_points)
        a = estimate_normals(grid_points, k=8, index=index)
        b = estimate_normals(grid_points, k=8)
        np.testing.assert_array_equal(a.normals, b.normals)

    def test_exact_precision(self, grid_points):
        est = estimate_normals(grid_points, k=8, precision="exact")
        np.testing.assert_allclose(np.abs(est.normals[:, 2]), 1.0, atol=1e-9)

    def test_k_too_small(self, grid_points):
        with pytest.raises(PreconditionError, match="k must be"):
            estimate_normals(grid_points, k=1)

    def test_empty(self):
        with pytest.raises(PreconditionError, match="empty"):
            estimate_normals(np.empty((0, 3)), k=4)

    def test_logs_degenerate(self, caplog):
        pts = np.array([[float(i), 0.0, 0.0] for i in range(6)])
        with caplog.at_level("WARNING"):
            est = estimate_normals(pts, k=3)
        assert est.num_degenerate == 6
        assert "degenerate" in caplog.text
