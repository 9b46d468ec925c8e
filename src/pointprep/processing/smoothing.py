"""Point smoothing by projection onto locally fitted planes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from pointprep.errors import require_k, require_points
from pointprep.geometry.plane import check_precision
from pointprep.geometry.spatial import SpatialIndex
from pointprep.processing.normals import fit_local_planes

logger = logging.getLogger(__name__)


@dataclass
class SmoothingResult:
    points: np.ndarray
    degenerate: np.ndarray

    @property
    def num_degenerate(self) -> int:
        return int(np.count_nonzero(self.degenerate))


def project_onto_planes(
    points: np.ndarray, centroids: np.ndarray, normals: np.ndarray
) -> np.ndarray:
    """Project each point onto the plane given by its centroid and normal."""
    d = np.einsum("ij,ij->i", points - centroids, normals)
    return points - d[:, None] * normals


def smooth_points(
    points: np.ndarray,
    k: int = 10,
    precision: str = "double",
) -> SmoothingResult:
    """Move every point onto the plane fitted to its k nearest neighbors.

    All neighbor queries and fits use the positions as they were before the
    pass; the returned array is new and the input is left untouched.

    Args:
        points: (N, 3) positions, N >= 1.
        k: Number of neighbors, at least 2.
        precision: "double" or "exact", see ``fit_plane``.
    """
    check_precision(precision)
    require_k(k)
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    require_points(len(pts))

    logger.info("Smoothing %d points (k=%d)", len(pts), k)
    index = SpatialIndex(pts)
    centroids, normals, degenerate = fit_local_planes(index, index.points, k, precision)
    smoothed = project_onto_planes(index.points, centroids, normals)

    result = SmoothingResult(points=smoothed, degenerate=degenerate)
    if result.num_degenerate:
        logger.warning(
            "%d of %d points were projected onto a fallback plane",
            result.num_degenerate, len(pts),
        )
    return result


def smooth_point_set(points: np.ndarray, k: int = 10, precision: str = "double") -> SmoothingResult:
    """Smooth a float64 (N, 3) array in place once the whole pass is done."""
    if not isinstance(points, np.ndarray) or points.dtype != np.float64:
        raise TypeError("smooth_point_set needs a float64 numpy array to write into")
    result = smooth_points(points, k, precision)
    points[:] = result.points
    return result
