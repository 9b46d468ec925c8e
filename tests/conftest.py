"""Shared test fixtures."""

import numpy as np
import pytest

from pointprep.core.pointcloud import PointCloud


@pytest.fixture
def grid_points() -> np.ndarray:
    """100 points on the plane z=0 in a 10x10 grid."""
    x, y = np.meshgrid(np.arange(10, dtype=np.float64), np.arange(10, dtype=np.float64))
    return np.column_stack([x.ravel(), y.ravel(), np.zeros(100)])


@pytest.fixture
def sphere_points() -> np.ndarray:
    """300 points spread evenly over the unit sphere (Fibonacci lattice)."""
    n = 300
    i = np.arange(n) + 0.5
    phi = np.arccos(1 - 2 * i / n)
    theta = np.pi * (1 + 5**0.5) * i
    return np.column_stack([
        np.cos(theta) * np.sin(phi),
        np.sin(theta) * np.sin(phi),
        np.cos(phi),
    ])


@pytest.fixture
def two_clusters() -> np.ndarray:
    """Two noisy planar patches 100 units apart, 40 points each."""
    rng = np.random.default_rng(7)
    a = np.column_stack([rng.uniform(0, 5, 40), rng.uniform(0, 5, 40), rng.normal(0, 0.01, 40)])
    b = a + np.array([100.0, 0.0, 0.0])
    return np.vstack([a, b])


@pytest.fixture
def sample_pc(grid_points) -> PointCloud:
    """The 10x10 grid as a PointCloud with slight z noise."""
    rng = np.random.default_rng(42)
    pts = grid_points.copy()
    pts[:, 2] = rng.normal(0, 0.02, len(pts))
    return PointCloud.from_positions(pts)


@pytest.fixture
def utm_tilted_grid() -> np.ndarray:
    """10x10 grid on the plane z = 0.5x + 100, at UTM-sized easting/northing."""
    x, y = np.meshgrid(np.arange(10, dtype=np.float64), np.arange(10, dtype=np.float64))
    x, y = x.ravel(), y.ravel()
    return np.column_stack([x + 5e5, y + 5e6, 0.5 * x + 100.0])
