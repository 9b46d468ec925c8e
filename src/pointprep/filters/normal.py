"""Surface normal estimation filter (KDTree + PCA)."""

from __future__ import annotations

from typing import Any

from pointprep.core.pointcloud import PointCloud
from pointprep.filters.base import Filter
from pointprep.filters.registry import filter_registry
from pointprep.processing.normals import estimate_normals


class NormalFilter(Filter):
    """Estimate an unoriented normal for each point with PCA.

    Adds NormalX, NormalY, NormalZ and NormalOriented (all False). Run
    filters.orient afterwards to make the signs consistent.

    Options:
        k: int — Number of neighbors for PCA. Default: 10.
        precision: str — "double" (default) or "exact".
    """

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)

    def filter(self, pc: PointCloud) -> PointCloud:
        estimate = estimate_normals(
            pc.positions(),
            k=self._k(),
            precision=self.options.get("precision", "double"),
        )
        result = pc.copy()
        result.set_normals(estimate.normals, estimate.oriented)
        result.metadata.record(
            self.type_name(), degenerate_fits=estimate.num_degenerate
        )
        return result

    @classmethod
    def type_name(cls) -> str:
        return "filters.normal"


filter_registry.register(NormalFilter)
