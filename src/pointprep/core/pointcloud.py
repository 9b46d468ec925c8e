"""Core PointCloud class: columnar storage backed by NumPy arrays."""

from __future__ import annotations

import numpy as np

from pointprep.core.dimensions import (
    NORMAL_DIMENSIONS,
    ORIENTED_DIMENSION,
    POSITION_DIMENSIONS,
    get_dtype,
)
from pointprep.core.metadata import Metadata


class PointCloud:
    """Point cloud container using dict-of-arrays (columnar) storage.

    Positions live in the X, Y, Z dimensions; normals, once estimated, in
    NormalX, NormalY, NormalZ plus a boolean NormalOriented flag. Point
    order is insertion order and defines the indices used by the neighbor
    graph during orientation.

    Examples:
        >>> pc = PointCloud.from_positions(np.zeros((3, 3)))
        >>> len(pc)
        3
        >>> pc.dimensions
        ['X', 'Y', 'Z']
        >>> pc.has_normals
        False
    """

    def __init__(self) -> None:
        self._arrays: dict[str, np.ndarray] = {}
        self._metadata: Metadata = Metadata()

    # ── Properties ──────────────────────────────────────────────────

    @property
    def num_points(self) -> int:
        """Number of points in the cloud."""
        if not self._arrays:
            return 0
        return len(next(iter(self._arrays.values())))

    @property
    def dimensions(self) -> list[str]:
        """List of dimension names present in this cloud."""
        return list(self._arrays.keys())

    @property
    def has_normals(self) -> bool:
        return all(name in self._arrays for name in NORMAL_DIMENSIONS)

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @metadata.setter
    def metadata(self, value: Metadata) -> None:
        self._metadata = value

    # ── Array Access ────────────────────────────────────────────────

    def __getitem__(self, key: str) -> np.ndarray:
        """Get a dimension array by name: pc['X']."""
        if key not in self._arrays:
            raise KeyError(f"Dimension '{key}' not found. Available: {self.dimensions}")
        return self._arrays[key]

    def __setitem__(self, key: str, value: np.ndarray) -> None:
        """Set a dimension array: pc['X'] = array."""
        value = np.asarray(value)
        if self._arrays:
            expected = self.num_points
            if len(value) != expected:
                raise ValueError(
                    f"Array length {len(value)} doesn't match "
                    f"existing point count {expected}"
                )
        self._arrays[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._arrays

    def __len__(self) -> int:
        return self.num_points

    def __repr__(self) -> str:
        dims = ", ".join(self.dimensions[:7])
        if len(self.dimensions) > 7:
            dims += f", ... (+{len(self.dimensions) - 7} more)"
        return f"PointCloud({self.num_points:,} points, dims=[{dims}])"

    # ── Positions & Normals ─────────────────────────────────────────

    def positions(self) -> np.ndarray:
        """Return an (N, 3) float64 array of X, Y, Z (a new array)."""
        missing = [d for d in POSITION_DIMENSIONS if d not in self._arrays]
        if missing:
            raise KeyError(f"PointCloud is missing position dimensions {missing}")
        return np.column_stack(
            [self._arrays[d].astype(np.float64) for d in POSITION_DIMENSIONS]
        )

    def set_positions(self, points: np.ndarray) -> None:
        """Overwrite X, Y, Z from an (N, 3) array."""
        points = _as_xyz(points, "points")
        for col, name in enumerate(POSITION_DIMENSIONS):
            self[name] = points[:, col].astype(get_dtype(name))

    def normals(self) -> np.ndarray:
        """Return an (N, 3) float64 array of normals (a new array)."""
        if not self.has_normals:
            raise KeyError("PointCloud has no normals. Run filters.normal first")
        return np.column_stack([self._arrays[d] for d in NORMAL_DIMENSIONS]).astype(
            np.float64
        )

    def oriented(self) -> np.ndarray:
        """Per-point orientation flags (all False when never oriented)."""
        if ORIENTED_DIMENSION not in self._arrays:
            return np.zeros(self.num_points, dtype=bool)
        return self._arrays[ORIENTED_DIMENSION].astype(bool)

    def set_normals(self, normals: np.ndarray, oriented: np.ndarray | None = None) -> None:
        """Store normals and their orientation flags.

        Args:
            normals: (N, 3) array of unit vectors.
            oriented: Boolean array of length N. Defaults to all False.
        """
        normals = _as_xyz(normals, "normals")
        if oriented is None:
            oriented = np.zeros(len(normals), dtype=bool)
        for col, name in enumerate(NORMAL_DIMENSIONS):
            self[name] = normals[:, col].astype(get_dtype(name))
        self[ORIENTED_DIMENSION] = np.array(oriented, dtype=get_dtype(ORIENTED_DIMENSION))

    # ── Conversion ──────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, np.ndarray]) -> PointCloud:
        """Create from a dict of arrays (all same length)."""
        pc = cls()
        lengths = {name: len(arr) for name, arr in data.items()}
        if len(set(lengths.values())) > 1:
            raise ValueError(f"All arrays must have same length, got: {lengths}")
        for name, arr in data.items():
            pc._arrays[name] = np.asarray(arr)
        return pc

    @classmethod
    def from_positions(
        cls, points: np.ndarray, normals: np.ndarray | None = None
    ) -> PointCloud:
        """Create from an (N, 3) position array and optional normals."""
        points = _as_xyz(points, "points")
        pc = cls.from_dict({name: points[:, col].copy()
                            for col, name in enumerate(POSITION_DIMENSIONS)})
        if normals is not None:
            pc.set_normals(normals)
        return pc

    def copy(self) -> PointCloud:
        """Deep copy of this point cloud."""
        result = PointCloud()
        for name, arr in self._arrays.items():
            result._arrays[name] = arr.copy()
        result._metadata = self._metadata.copy()
        return result


def _as_xyz(arr: np.ndarray, what: str) -> np.ndarray:
    arr = np.asarray(arr, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"{what} must have shape (N, 3), got {arr.shape}")
    return arr
