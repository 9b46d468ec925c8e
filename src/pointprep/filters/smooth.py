"""PCA smoothing filter."""

from __future__ import annotations

from typing import Any

import numpy as np

from pointprep.core.pointcloud import PointCloud
from pointprep.filters.base import Filter
from pointprep.filters.registry import filter_registry
from pointprep.processing.smoothing import smooth_points


class SmoothFilter(Filter):
    """Project each point onto the plane fitted to its k nearest neighbors.

    Every pass reads a frozen snapshot of the positions, so the result does
    not depend on point order. Normals, if present, are left as they are;
    re-estimate them after smoothing.

    Options:
        k: int — Number of neighbors. Default: 10.
        precision: str — "double" (default) or "exact".
        iterations: int — Number of smoothing passes. Default: 1.
    """

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)

    def filter(self, pc: PointCloud) -> PointCloud:
        iterations = int(self.options.get("iterations", 1))
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")

        points = pc.positions()
        degenerate = np.zeros(len(points), dtype=bool)
        for _ in range(iterations):
            smoothed = smooth_points(
                points,
                k=self._k(),
                precision=self.options.get("precision", "double"),
            )
            points = smoothed.points
            degenerate |= smoothed.degenerate

        result = pc.copy()
        result.set_positions(points)
        result.metadata.record(
            self.type_name(), degenerate_fits=int(np.count_nonzero(degenerate))
        )
        return result

    @classmethod
    def type_name(cls) -> str:
        return "filters.smooth"


filter_registry.register(SmoothFilter)
