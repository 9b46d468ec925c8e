"""Combined smoothing + normal estimation + orientation filter."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from pointprep.core.pointcloud import PointCloud
from pointprep.filters.base import Filter
from pointprep.filters.registry import filter_registry
from pointprep.pipeline.preprocess import preprocess


class PreprocessFilter(Filter):
    """Smooth positions, then estimate and orient normals in one stage.

    Options:
        k: int — Neighbor count for every step. Default: 10.
        smooth: bool — Smooth before estimating normals. Default: True.
        iterations: int — Smoothing passes. Default: 1.
        precision: str — "double" (default) or "exact".
        weight: str — Orientation edge weight. Default: "unsigned".
        root: str — Orientation root policy. Default: "max_z".
    """

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)

    def filter(self, pc: PointCloud) -> PointCloud:
        out = preprocess(
            pc.positions(),
            k=self._k(),
            smooth=bool(self.options.get("smooth", True)),
            iterations=int(self.options.get("iterations", 1)),
            precision=self.options.get("precision", "double"),
            weight=self.options.get("weight", "unsigned"),
            root=self.options.get("root", "max_z"),
        )
        result = pc.copy()
        result.set_positions(out.points)
        result.set_normals(out.normals, out.oriented)
        result.metadata.record(self.type_name(), **asdict(out.report))
        return result

    @classmethod
    def type_name(cls) -> str:
        return "filters.preprocess"


filter_registry.register(PreprocessFilter)
