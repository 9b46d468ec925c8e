"""Geometric primitives: nearest-neighbor index and plane fitting."""

from pointprep.geometry.plane import Plane, PlaneFit, fit_plane, fit_planes
from pointprep.geometry.spatial import SpatialIndex

__all__ = ["Plane", "PlaneFit", "SpatialIndex", "fit_plane", "fit_planes"]
