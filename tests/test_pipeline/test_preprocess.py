"""Tests for the one-call preprocessing run."""

import numpy as np
import pytest

from pointprep.errors import PreconditionError
from pointprep.pipeline.preprocess import preprocess


class TestPreprocess:
    def test_grid(self, grid_points):
        out = preprocess(grid_points, k=8)
        np.testing.assert_allclose(out.points[:, 2], 0.0, atol=1e-6)
        np.testing.assert_allclose(np.abs(out.normals[:, 2]), 1.0, atol=1e-6)
        assert out.oriented.all()
        assert out.report.num_points == 100
        assert out.report.components == 1
        assert out.report.unoriented == 0

    def test_two_clusters(self, two_clusters):
        out = preprocess(two_clusters, k=8)
        assert out.report.components == 2
        assert out.report.outside_largest_component == 40
        assert out.oriented.all()

    def test_single_point(self):
        out = preprocess(np.array([[0.0, 0.0, 0.0]]), k=5)
        assert out.report.normal_degenerate == 1
        assert out.report.smoothing_degenerate == 1
        assert out.oriented.tolist() == [True]

    def test_without_smoothing(self, sample_pc):
        pts = sample_pc.positions()
        out = preprocess(pts, k=8, smooth=False)
        np.testing.assert_array_equal(out.points, pts)
        assert out.report.smoothing_degenerate == 0

    def test_without_orientation(self, grid_points):
        out = preprocess(grid_points, k=8, orient=False)
        assert not out.oriented.any()
        assert out.report.unoriented == 100
        assert out.report.components == 0

    def test_input_untouched(self, sample_pc):
        pts = sample_pc.positions()
        before = pts.copy()
        preprocess(pts, k=8)
        np.testing.assert_array_equal(pts, before)

    def test_summary(self, two_clusters):
        lines = preprocess(two_clusters, k=8).report.summary()
        assert "Connected components: 2" in lines
        assert "Points outside largest component: 40" in lines

    def test_bad_k(self, grid_points):
        with pytest.raises(PreconditionError):
            preprocess(grid_points, k=1)

    @pytest.mark.parametrize("iterations", [0, -2])
    def test_bad_iterations(self, grid_points, iterations):
        with pytest.raises(ValueError, match="iterations must be >= 1"):
            preprocess(grid_points, k=8, iterations=iterations)

    def test_iterations_ignored_without_smoothing(self, grid_points):
        out = preprocess(grid_points, k=8, smooth=False, iterations=0)
        assert out.report.smoothing_degenerate == 0
