"""Tests for least-squares plane fitting."""

import numpy as np
import pytest

from pointprep.geometry.plane import Plane, fit_plane, fit_planes


class TestFitPlane:
    def test_horizontal_plane(self):
        pts = np.array([[0.0, 0, 2], [1, 0, 2], [0, 1, 2], [1, 1, 2]])
        fit = fit_plane(pts)
        assert not fit.degenerate
        np.testing.assert_allclose(fit.plane.centroid, [0.5, 0.5, 2.0])
        np.testing.assert_allclose(np.abs(fit.plane.normal), [0, 0, 1], atol=1e-12)

    def test_tilted_plane(self):
        rng = np.random.default_rng(1)
        xy = rng.uniform(-1, 1, (30, 2))
        pts = np.column_stack([xy, 0.5 * xy[:, 0] - 0.25 * xy[:, 1] + 3])
        normal = fit_plane(pts).plane.normal
        expected = np.array([0.5, -0.25, -1.0])
        expected /= np.linalg.norm(expected)
        assert abs(normal @ expected) == pytest.approx(1.0, abs=1e-10)

    def test_unit_normal(self, sphere_points):
        fit = fit_plane(sphere_points[:12])
        assert np.linalg.norm(fit.plane.normal) == pytest.approx(1.0, abs=1e-12)

    def test_single_point(self):
        fit = fit_plane(np.array([[1.0, 2.0, 3.0]]))
        assert fit.degenerate
        np.testing.assert_allclose(fit.plane.centroid, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(fit.plane.normal, [0.0, 0.0, 1.0])

    def test_two_points(self):
        pts = np.array([[0.0, 0.0, 0.0], [2.0, 1.0, 0.5]])
        fit = fit_plane(pts)
        assert fit.degenerate
        assert np.all(np.isfinite(fit.plane.normal))
        assert np.linalg.norm(fit.plane.normal) == pytest.approx(1.0)
        assert fit.plane.normal @ (pts[1] - pts[0]) == pytest.approx(0.0, abs=1e-9)

    def test_two_points_deterministic(self):
        pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        a = fit_plane(pts).plane.normal
        b = fit_plane(pts).plane.normal
        np.testing.assert_array_equal(a, b)

    def test_collinear(self):
        pts = np.array([[float(i), 0.0, 0.0] for i in range(5)])
        fit = fit_plane(pts)
        assert fit.degenerate
        assert fit.plane.normal[0] == pytest.approx(0.0, abs=1e-12)

    def test_coincident(self):
        fit = fit_plane(np.tile([0.1, 0.2, 0.3], (4, 1)))
        assert fit.degenerate
        np.testing.assert_allclose(fit.plane.normal, [0.0, 0.0, 1.0])

    def test_large_coordinates(self):
        x, y = np.meshgrid(np.arange(4.0), np.arange(3.0))
        hood = np.column_stack([x.ravel(), y.ravel(), 0.5 * x.ravel()])
        expected = np.array([0.5, 0.0, -1.0]) / np.sqrt(1.25)
        for offset in ([0.0, 0.0, 0.0], [5e5, 5e6, 100.0]):
            for precision in ("double", "exact"):
                fit = fit_plane(hood + offset, precision=precision)
                assert not fit.degenerate
                assert abs(fit.plane.normal @ expected) == pytest.approx(1.0, abs=1e-9)

    def test_coincident_large_coordinates(self):
        fit = fit_plane(np.tile([512345.67, 5012345.89, 123.45], (6, 1)))
        assert fit.degenerate
        np.testing.assert_allclose(fit.plane.normal, [0.0, 0.0, 1.0])

    def test_collinear_large_coordinates(self):
        pts = np.array([[5e5 + 0.1 * i, 5e6 + 0.2 * i, 100.0] for i in range(6)])
        fit = fit_plane(pts)
        assert fit.degenerate
        assert fit.plane.normal @ np.array([1.0, 2.0, 0.0]) == pytest.approx(0.0, abs=1e-6)

    def test_exact_matches_double(self):
        rng = np.random.default_rng(5)
        hood = np.column_stack([rng.uniform(0, 1, (15, 2)), rng.normal(0, 0.01, 15)]) + 1000.0
        double = fit_plane(hood, precision="double").plane
        exact = fit_plane(hood, precision="exact").plane
        np.testing.assert_allclose(exact.centroid, double.centroid)
        assert abs(exact.normal @ double.normal) == pytest.approx(1.0, abs=1e-8)

    def test_unknown_precision(self):
        with pytest.raises(ValueError, match="precision"):
            fit_plane(np.zeros((3, 3)), precision="quad")

    def test_no_points(self):
        with pytest.raises(ValueError, match="zero points"):
            fit_plane(np.empty((0, 3)))


class TestFitPlanes:
    def test_matches_fit_plane(self):
        rng = np.random.default_rng(9)
        hoods = np.concatenate(
            [rng.uniform(0, 1, (5, 8, 2)), rng.normal(0, 0.01, (5, 8, 1))], axis=2
        )
        centroids, normals, degenerate = fit_planes(hoods)
        for c, n, d, hood in zip(centroids, normals, degenerate, hoods):
            fit = fit_plane(hood)
            np.testing.assert_allclose(c, fit.plane.centroid)
            assert abs(n @ fit.plane.normal) == pytest.approx(1.0)
            assert d == fit.degenerate

    def test_mixed_degenerate(self):
        hoods = np.array([
            [[0.0, 0, 0], [1, 0, 0], [0, 1, 0]],
            [[0.0, 0, 0], [1, 0, 0], [2, 0, 0]],
        ])
        _, normals, degenerate = fit_planes(hoods)
        assert degenerate.tolist() == [False, True]
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)

    def test_bad_shape(self):
        with pytest.raises(ValueError, match="shape"):
            fit_planes(np.zeros((4, 3)))


class TestPlane:
    def test_projection(self):
        plane = Plane(np.zeros(3), np.array([0.0, 0.0, 1.0]))
        np.testing.assert_allclose(plane.projection([1.0, 1.0, 5.0]), [1.0, 1.0, 0.0])
        assert plane.signed_distance([1.0, 1.0, -2.0]) == pytest.approx(-2.0)

    def test_projection_many(self):
        plane = Plane(np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, 1.0]))
        pts = np.array([[0.0, 0, 0], [3, 4, 7]])
        np.testing.assert_allclose(plane.projection(pts), [[0, 0, 1], [3, 4, 1]])
