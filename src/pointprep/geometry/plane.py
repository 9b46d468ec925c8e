"""Least-squares plane fitting by principal component analysis.

The plane through a set of points that minimizes the sum of squared
orthogonal distances passes through their centroid, and its normal is the
eigenvector of the 3x3 covariance matrix with the smallest eigenvalue.
Eigen-decomposition uses ``numpy.linalg.eigh`` (LAPACK's symmetric solver),
so eigenvalues are real, eigenvectors orthonormal, and there is no
iteration that can fail to converge on well-formed input.

Neighborhoods that do not span a plane get a deterministic fallback normal
and are flagged ``degenerate``:

    - fewer than 3 points;
    - all points coincident: normal is +Z;
    - collinear points: normal is perpendicular to the line, chosen by
      crossing the line direction with the coordinate axis it is least
      aligned with.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

import numpy as np

PRECISIONS = ("double", "exact")

# Relative eigenvalue threshold below which a direction counts as flat
RANK_TOLERANCE = 1e-12

# Rounding error of one coordinate, in units of its magnitude
_ROUNDOFF = 8 * np.finfo(np.float64).eps

_UP = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class Plane:
    """A plane through ``centroid`` with unit ``normal``."""

    centroid: np.ndarray
    normal: np.ndarray

    def signed_distance(self, points: np.ndarray) -> np.ndarray:
        """Signed orthogonal distance of one or more points to the plane."""
        return (np.asarray(points, dtype=np.float64) - self.centroid) @ self.normal

    def projection(self, points: np.ndarray) -> np.ndarray:
        """Orthogonal projection of one or more points onto the plane."""
        points = np.asarray(points, dtype=np.float64)
        d = self.signed_distance(points)
        return points - np.multiply.outer(d, self.normal)


@dataclass(frozen=True)
class PlaneFit:
    plane: Plane
    degenerate: bool


def check_precision(precision: str) -> str:
    if precision not in PRECISIONS:
        raise ValueError(f"Unknown precision '{precision}'. Use: {', '.join(PRECISIONS)}")
    return precision


def fit_plane(points: np.ndarray, precision: str = "double") -> PlaneFit:
    """Fit a plane to one neighborhood.

    Args:
        points: (M, 3) array with M >= 1.
        precision: "double" accumulates centroid and covariance in float64;
            "exact" accumulates them exactly with rationals and rounds once
            before the eigen-solve.

    Returns:
        PlaneFit with the plane and whether the fallback was used.
    """
    check_precision(precision)
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        raise ValueError("Cannot fit a plane to zero points")

    if precision == "exact":
        centroid, cov = _exact_moments(points)
    else:
        centroid = points.mean(axis=0)
        centered = points - centroid
        cov = centered.T @ centered

    normals, degenerate = _normals_from_covariance(
        cov[None], len(points), _rounding_noise(points[None])
    )
    return PlaneFit(Plane(centroid, normals[0]), bool(degenerate[0]))


def fit_planes(neighborhoods: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Fit one plane per neighborhood in a stack, in float64.

    Args:
        neighborhoods: (N, M, 3) array, N neighborhoods of M points each.

    Returns:
        Tuple of (centroids (N, 3), normals (N, 3), degenerate (N,) bool).
    """
    neighborhoods = np.asarray(neighborhoods, dtype=np.float64)
    if neighborhoods.ndim != 3 or neighborhoods.shape[2] != 3:
        raise ValueError(f"neighborhoods must have shape (N, M, 3), got {neighborhoods.shape}")
    if neighborhoods.shape[1] == 0:
        raise ValueError("Cannot fit a plane to zero points")
    centroids = neighborhoods.mean(axis=1)
    centered = neighborhoods - centroids[:, None, :]
    cov = np.einsum("nmi,nmj->nij", centered, centered)
    normals, degenerate = _normals_from_covariance(
        cov, neighborhoods.shape[1], _rounding_noise(neighborhoods)
    )
    return centroids, normals, degenerate


def _rounding_noise(neighborhoods: np.ndarray) -> np.ndarray:
    """Per-neighborhood covariance eigenvalue that centering rounding alone can produce.

    Centering a coordinate of size c loses about eps * c, so with large
    offsets (projected CRS coordinates) a spread below that is noise.
    """
    scale = _ROUNDOFF * np.max(np.abs(neighborhoods), axis=(1, 2))
    return neighborhoods.shape[1] * scale**2


def _normals_from_covariance(
    cov: np.ndarray, count: int, noise: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    # eigh returns eigenvalues ascending, eigenvectors as columns
    eigenvalues, eigenvectors = np.linalg.eigh(cov)
    normals = eigenvectors[:, :, 0].copy()

    largest = eigenvalues[:, 2]
    coincident = largest <= noise
    flat = np.maximum(RANK_TOLERANCE * largest, noise)
    collinear = ~coincident & (eigenvalues[:, 1] <= flat)

    normals[coincident] = _UP
    if np.any(collinear):
        normals[collinear] = _perpendicular(eigenvectors[collinear, :, 2])

    normals /= np.linalg.norm(normals, axis=1, keepdims=True)
    degenerate = coincident | collinear | (count < 3)
    return normals, degenerate


def _perpendicular(directions: np.ndarray) -> np.ndarray:
    """Unit vectors perpendicular to each direction, chosen deterministically."""
    axes = np.eye(3)[np.argmin(np.abs(directions), axis=1)]
    perp = np.cross(directions, axes)
    return perp / np.linalg.norm(perp, axis=1, keepdims=True)


def _exact_moments(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    rows = [[Fraction(float(v)) for v in p] for p in points]
    n = len(rows)
    mean = [sum(r[c] for r in rows) / n for c in range(3)]
    cov = np.empty((3, 3), dtype=np.float64)
    for a in range(3):
        for b in range(a, 3):
            value = sum((r[a] - mean[a]) * (r[b] - mean[b]) for r in rows)
            cov[a, b] = cov[b, a] = float(value)
    return np.array([float(m) for m in mean]), cov
