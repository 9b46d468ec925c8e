"""Normal orientation filter (minimum spanning tree propagation)."""

from __future__ import annotations

from typing import Any

from pointprep.core.pointcloud import PointCloud
from pointprep.filters.base import Filter
from pointprep.filters.registry import filter_registry
from pointprep.processing.orientation import orient_normals


class OrientFilter(Filter):
    """Make normal signs consistent across the cloud.

    Requires NormalX/NormalY/NormalZ (see filters.normal). Sets
    NormalOriented to True for every point reached from a root.

    Options:
        k: int — Neighbors per point in the Riemannian graph. Default: 10.
        weight: str — "unsigned" (default), "signed" or "euclidean".
        root: str — "max_z" (default) or "first".
    """

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)

    def filter(self, pc: PointCloud) -> PointCloud:
        orientation = orient_normals(
            pc.positions(),
            pc.normals(),
            k=self._k(),
            weight=self.options.get("weight", "unsigned"),
            root=self.options.get("root", "max_z"),
        )
        result = pc.copy()
        result.set_normals(orientation.normals, orientation.oriented)
        result.metadata.record(
            self.type_name(),
            components=orientation.num_components,
            outside_largest_component=orientation.num_outside_largest,
            unoriented=orientation.num_unoriented,
        )
        return result

    @classmethod
    def type_name(cls) -> str:
        return "filters.orient"


filter_registry.register(OrientFilter)
