"""Tests for dask-chunked estimation and smoothing."""

import numpy as np
import pytest

pytest.importorskip("dask")

from pointprep.parallel import parallel_estimate_normals, parallel_smooth_points
from pointprep.processing.normals import estimate_normals
from pointprep.processing.smoothing import smooth_points


class TestParallel:
    def test_estimate_matches_serial(self, sphere_points):
        serial = estimate_normals(sphere_points, k=8)
        chunked = parallel_estimate_normals(sphere_points, k=8, n_chunks=3)
        dots = np.abs(np.einsum("ij,ij->i", serial.normals, chunked.normals))
        np.testing.assert_allclose(dots, 1.0, atol=1e-9)
        np.testing.assert_array_equal(serial.degenerate, chunked.degenerate)

    def test_smooth_matches_serial(self, sample_pc):
        pts = sample_pc.positions()
        serial = smooth_points(pts, k=6)
        chunked = parallel_smooth_points(pts, k=6, n_chunks=4)
        np.testing.assert_allclose(chunked.points, serial.points, atol=1e-12)

    def test_more_chunks_than_points(self):
        pts = np.array([[0.0, 0, 0], [1, 0, 0], [0, 1, 0]])
        result = parallel_smooth_points(pts, k=2, n_chunks=10)
        assert result.points.shape == (3, 3)
