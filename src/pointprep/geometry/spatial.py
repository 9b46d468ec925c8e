"""Static k-nearest-neighbor index over a frozen point snapshot."""

from __future__ import annotations

import numpy as np
from scipy.spatial import cKDTree

from pointprep.errors import PreconditionError, require_points


class SpatialIndex:
    """KDTree index answering k-nearest queries with deterministic order.

    The index copies the points it is built from and marks the copy
    read-only, so later edits to the caller's array cannot change the
    answers, and one index can be shared by concurrent readers.

    Results are ordered by non-decreasing Euclidean distance to the query.
    Points at exactly the same distance come back in input order, including
    at the k-th position: if several points tie for the last slot, the ones
    with the lowest indices win.

    Examples:
        >>> index = SpatialIndex(np.array([[0.0, 0, 0], [1, 0, 0], [2, 0, 0]]))
        >>> index.k_nearest([0.9, 0, 0], 2).tolist()
        [1, 0]
    """

    def __init__(self, points: np.ndarray) -> None:
        pts = np.array(points, dtype=np.float64, copy=True)
        if pts.ndim == 1 and pts.size == 0:
            pts = pts.reshape(0, 3)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"points must have shape (N, 3), got {pts.shape}")
        require_points(len(pts))
        pts.setflags(write=False)
        self._points = pts
        self._tree = cKDTree(pts)

    @property
    def points(self) -> np.ndarray:
        """The indexed snapshot (read-only)."""
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"SpatialIndex({len(self):,} points)"

    def query(self, queries: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
        """Find the k nearest indexed points for each query.

        Args:
            queries: (M, 3) array of query positions.
            k: Number of neighbors wanted. When the index holds fewer than k
                points, every point is returned.

        Returns:
            Tuple of (distances, indices), both shaped (M, min(k, N)).
        """
        if k < 1:
            raise PreconditionError(f"k must be >= 1, got {k}")
        queries = np.asarray(queries, dtype=np.float64).reshape(-1, 3)
        n = len(self._points)
        m = min(k, n)
        # One extra neighbor tells us whether the m-th slot is tied
        kk = m + 1 if m < n else m

        _, idx = self._tree.query(queries, k=kk)
        idx = np.asarray(idx, dtype=np.int64).reshape(len(queries), kk)
        dist = self._distances(queries, idx)

        order = np.lexsort((idx, dist))
        idx = np.take_along_axis(idx, order, axis=1)
        dist = np.take_along_axis(dist, order, axis=1)

        if kk > m:
            tied = np.flatnonzero(dist[:, m - 1] == dist[:, m])
            for row in tied:
                idx[row], dist[row] = self._resolve_tie(queries[row], dist[row, m - 1], kk)

        return dist[:, :m], idx[:, :m]

    def k_nearest(self, query: np.ndarray, k: int) -> np.ndarray:
        """Indices of the k nearest points to a single query position."""
        _, idx = self.query(np.asarray(query, dtype=np.float64).reshape(1, 3), k)
        return idx[0]

    def k_nearest_all(self, k: int) -> np.ndarray:
        """Indices of the k nearest points for every indexed point.

        Each point is its own nearest neighbor unless it has duplicates with
        lower indices, so asking for ``k + 1`` gives the point plus k others.
        """
        _, idx = self.query(self._points, k)
        return idx

    def _distances(self, queries: np.ndarray, idx: np.ndarray) -> np.ndarray:
        diff = self._points[idx] - queries[:, None, :]
        return np.sqrt(np.einsum("mkd,mkd->mk", diff, diff))

    def _resolve_tie(
        self, query: np.ndarray, boundary: float, width: int
    ) -> tuple[np.ndarray, np.ndarray]:
        """Re-rank every point within the boundary distance by (distance, index)."""
        radius = boundary * (1.0 + 1e-9) + 1e-12
        candidates = np.asarray(
            self._tree.query_ball_point(query, r=radius), dtype=np.int64
        )
        dist = self._distances(query.reshape(1, 3), candidates.reshape(1, -1))[0]
        order = np.lexsort((candidates, dist))[:width]
        return candidates[order], dist[order]
