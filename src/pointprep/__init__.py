"""pointprep — point cloud preprocessing for surface reconstruction."""

from pointprep._version import __version__
from pointprep.core.pointcloud import PointCloud
from pointprep.errors import PreconditionError
from pointprep.geometry import Plane, SpatialIndex, fit_plane
from pointprep.io.registry import read, write
from pointprep.pipeline.pipeline import Pipeline
from pointprep.pipeline.preprocess import preprocess
from pointprep.processing import estimate_normals, orient_normals, smooth_points

__all__ = [
    "__version__",
    "Pipeline",
    "Plane",
    "PointCloud",
    "PreconditionError",
    "SpatialIndex",
    "estimate_normals",
    "fit_plane",
    "orient_normals",
    "preprocess",
    "read",
    "smooth_points",
    "write",
]
