"""Point cloud preprocessing: normal estimation, orientation, smoothing."""

from pointprep.processing.normals import NormalEstimate, estimate_normals
from pointprep.processing.orientation import (
    EDGE_WEIGHTS,
    NeighborGraph,
    OrientationResult,
    SpanningTree,
    build_riemannian_graph,
    minimum_spanning_tree,
    orient_normals,
)
from pointprep.processing.smoothing import SmoothingResult, smooth_point_set, smooth_points

__all__ = [
    "EDGE_WEIGHTS",
    "NeighborGraph",
    "NormalEstimate",
    "OrientationResult",
    "SmoothingResult",
    "SpanningTree",
    "build_riemannian_graph",
    "estimate_normals",
    "minimum_spanning_tree",
    "orient_normals",
    "smooth_point_set",
    "smooth_points",
]
