"""Standard point cloud dimension definitions."""

from __future__ import annotations

import numpy as np

POSITION_DIMENSIONS: tuple[str, str, str] = ("X", "Y", "Z")
NORMAL_DIMENSIONS: tuple[str, str, str] = ("NormalX", "NormalY", "NormalZ")
ORIENTED_DIMENSION = "NormalOriented"

# Default NumPy dtypes for known dimensions
STANDARD_DIMENSIONS: dict[str, np.dtype] = {
    "X": np.dtype(np.float64),
    "Y": np.dtype(np.float64),
    "Z": np.dtype(np.float64),
    "NormalX": np.dtype(np.float64),
    "NormalY": np.dtype(np.float64),
    "NormalZ": np.dtype(np.float64),
    "NormalOriented": np.dtype(np.bool_),
}


def get_dtype(name: str) -> np.dtype:
    """Get the default dtype for a dimension name, defaulting to float64."""
    return STANDARD_DIMENSIONS.get(name, np.dtype(np.float64))
