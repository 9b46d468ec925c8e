"""One-call preprocessing: smooth, estimate normals, orient them."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from pointprep.errors import require_k, require_points
from pointprep.geometry.spatial import SpatialIndex
from pointprep.processing.normals import estimate_normals
from pointprep.processing.orientation import orient_normals
from pointprep.processing.smoothing import smooth_points

logger = logging.getLogger(__name__)


@dataclass
class PreprocessReport:
    """Counters from one preprocessing run.

    Attributes:
        num_points: Points processed.
        smoothing_degenerate: Points smoothed onto a fallback plane (summed
            over passes).
        normal_degenerate: Points whose normal came from a fallback plane.
        components: Connected components of the neighbor graph (0 when
            orientation was skipped).
        outside_largest_component: Points not in the largest component.
        unoriented: Points left without an orientation.
    """

    num_points: int
    smoothing_degenerate: int = 0
    normal_degenerate: int = 0
    components: int = 0
    outside_largest_component: int = 0
    unoriented: int = 0

    def summary(self) -> list[str]:
        lines = [f"Points: {self.num_points:,}"]
        lines.append(f"Degenerate fits (smoothing): {self.smoothing_degenerate:,}")
        lines.append(f"Degenerate fits (normals): {self.normal_degenerate:,}")
        if self.components:
            lines.append(f"Connected components: {self.components:,}")
            if self.components > 1:
                lines.append(
                    f"Points outside largest component: {self.outside_largest_component:,}"
                )
        lines.append(f"Unoriented normals: {self.unoriented:,}")
        return lines


@dataclass
class PreprocessResult:
    points: np.ndarray
    normals: np.ndarray
    oriented: np.ndarray
    report: PreprocessReport


def preprocess(
    points: np.ndarray,
    k: int = 10,
    smooth: bool = True,
    iterations: int = 1,
    orient: bool = True,
    precision: str = "double",
    weight: str = "unsigned",
    root: str = "max_z",
) -> PreprocessResult:
    """Run smoothing, normal estimation and orientation on one point set.

    Smoothing (when enabled) runs first so normals describe the smoothed
    surface. Estimation and orientation share one index over the smoothed
    positions.

    Args:
        points: (N, 3) positions; not modified.
        k: Neighbor count for every stage.
        smooth: Run PCA smoothing first.
        iterations: Smoothing passes.
        orient: Orient the estimated normals.
        precision: Plane fit precision, "double" or "exact".
        weight: Orientation edge weight policy.
        root: Orientation root policy.
    """
    require_k(k)
    if smooth and iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")
    pts = np.array(points, dtype=np.float64).reshape(-1, 3)
    require_points(len(pts))
    report = PreprocessReport(num_points=len(pts))

    if smooth:
        for _ in range(iterations):
            smoothed = smooth_points(pts, k=k, precision=precision)
            pts = smoothed.points
            report.smoothing_degenerate += smoothed.num_degenerate

    index = SpatialIndex(pts)
    estimate = estimate_normals(pts, k=k, precision=precision, index=index)
    report.normal_degenerate = estimate.num_degenerate
    normals, oriented = estimate.normals, estimate.oriented

    if orient:
        orientation = orient_normals(
            pts, normals, k=k, index=index, weight=weight, root=root
        )
        normals, oriented = orientation.normals, orientation.oriented
        report.components = orientation.num_components
        report.outside_largest_component = orientation.num_outside_largest

    report.unoriented = int(np.count_nonzero(~oriented))
    logger.info("Preprocessed %d points", report.num_points)
    return PreprocessResult(pts, normals, oriented, report)
