"""Core data model for pointprep."""

from pointprep.core.pointcloud import PointCloud
from pointprep.core.metadata import Metadata
from pointprep.core.dimensions import STANDARD_DIMENSIONS

__all__ = ["PointCloud", "Metadata", "STANDARD_DIMENSIONS"]
