"""Per-point normal estimation from local PCA plane fits."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from pointprep.errors import PreconditionError, require_k, require_points
from pointprep.geometry.plane import check_precision, fit_plane, fit_planes
from pointprep.geometry.spatial import SpatialIndex

logger = logging.getLogger(__name__)


@dataclass
class NormalEstimate:
    """Unoriented normals, one per input point.

    Attributes:
        normals: (N, 3) unit vectors. Their sign is arbitrary until
            ``orient_normals`` has run.
        oriented: (N,) bool, all False.
        degenerate: (N,) bool, True where the neighborhood did not span a
            plane and the fallback normal was used.
    """

    normals: np.ndarray
    oriented: np.ndarray
    degenerate: np.ndarray

    @property
    def num_degenerate(self) -> int:
        return int(np.count_nonzero(self.degenerate))


def fit_local_planes(
    index: SpatialIndex,
    queries: np.ndarray,
    k: int,
    precision: str = "double",
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Fit a plane to the k+1 nearest indexed points of each query.

    Returns:
        Tuple of (centroids, normals, degenerate) for the queries.
    """
    _, neighbors = index.query(queries, k + 1)
    if neighbors.shape[1] == 0:
        raise PreconditionError("Neighbor query returned no points")
    neighborhoods = index.points[neighbors]

    if precision == "double":
        return fit_planes(neighborhoods)

    fits = [fit_plane(hood, precision=precision) for hood in neighborhoods]
    return (
        np.array([f.plane.centroid for f in fits]).reshape(-1, 3),
        np.array([f.plane.normal for f in fits]).reshape(-1, 3),
        np.array([f.degenerate for f in fits], dtype=bool),
    )


def estimate_normals(
    points: np.ndarray,
    k: int = 10,
    precision: str = "double",
    index: SpatialIndex | None = None,
) -> NormalEstimate:
    """Estimate a normal for every point from its k nearest neighbors.

    Each point's neighborhood is the point itself plus its k nearest
    neighbors. The input array is not modified.

    Args:
        points: (N, 3) positions.
        k: Number of neighbors, at least 2.
        precision: "double" or "exact", see ``fit_plane``.
        index: Prebuilt index over ``points``; built here if omitted.

    Returns:
        NormalEstimate with all ``oriented`` flags False.
    """
    check_precision(precision)
    require_k(k)
    if index is None:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        require_points(len(pts))
        index = SpatialIndex(pts)

    n = len(index)
    logger.info("Estimating normals (k=%d) for %d points", k, n)
    _, normals, degenerate = fit_local_planes(index, index.points, k, precision)

    result = NormalEstimate(
        normals=normals,
        oriented=np.zeros(n, dtype=bool),
        degenerate=degenerate,
    )
    if result.num_degenerate:
        logger.warning(
            "%d of %d points had a degenerate plane fit (fewer than 3 points "
            "or collinear neighbors)", result.num_degenerate, n,
        )
    return result
