"""Optional Dask integration for chunked per-point processing.

Normal estimation and smoothing fit one plane per point from a frozen
snapshot, so the points can be split into chunks and fitted concurrently
against one shared, read-only SpatialIndex.
"""

from __future__ import annotations

import numpy as np

from pointprep.errors import require_k, require_points
from pointprep.geometry.plane import check_precision
from pointprep.geometry.spatial import SpatialIndex
from pointprep.processing.normals import NormalEstimate, fit_local_planes
from pointprep.processing.smoothing import SmoothingResult, project_onto_planes


def _check_dask() -> None:
    """Check that dask is installed."""
    try:
        import dask  # noqa: F401
    except ImportError:
        raise ImportError(
            "dask required for parallel processing. "
            "Install with: pip install pointprep[dask]"
        )


def _chunked_fits(
    index: SpatialIndex, k: int, precision: str, n_chunks: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    import dask

    n = len(index)
    bounds = np.linspace(0, n, max(1, min(n_chunks, n)) + 1).astype(int)
    tasks = [
        dask.delayed(fit_local_planes)(index, index.points[start:end], k, precision)
        for start, end in zip(bounds[:-1], bounds[1:])
    ]
    # Threads share the index without copying it
    parts = dask.compute(*tasks, scheduler="threads")

    centroids = np.concatenate([p[0] for p in parts])
    normals = np.concatenate([p[1] for p in parts])
    degenerate = np.concatenate([p[2] for p in parts])
    return centroids, normals, degenerate


def parallel_estimate_normals(
    points: np.ndarray,
    k: int = 10,
    precision: str = "double",
    n_chunks: int = 4,
) -> NormalEstimate:
    """``estimate_normals`` with the per-point fits spread over dask threads."""
    _check_dask()
    check_precision(precision)
    require_k(k)
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    require_points(len(pts))

    index = SpatialIndex(pts)
    _, normals, degenerate = _chunked_fits(index, k, precision, n_chunks)
    return NormalEstimate(normals, np.zeros(len(pts), dtype=bool), degenerate)


def parallel_smooth_points(
    points: np.ndarray,
    k: int = 10,
    precision: str = "double",
    n_chunks: int = 4,
) -> SmoothingResult:
    """``smooth_points`` with the per-point fits spread over dask threads.

    Each chunk writes only its own slice of the output; every fit reads the
    snapshot taken before the pass.
    """
    _check_dask()
    check_precision(precision)
    require_k(k)
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    require_points(len(pts))

    index = SpatialIndex(pts)
    centroids, normals, degenerate = _chunked_fits(index, k, precision, n_chunks)
    return SmoothingResult(project_onto_planes(index.points, centroids, normals), degenerate)
