"""Base class for all processing filters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pointprep.core.pointcloud import PointCloud


class Filter(ABC):
    """Base class for all point cloud processing filters.

    Subclasses implement ``filter()``, which takes a PointCloud and returns
    a new one. Options are plain keyword arguments so a filter can be built
    from a JSON pipeline stage.
    """

    def __init__(self, **options: Any) -> None:
        self.options = options

    @abstractmethod
    def filter(self, pc: PointCloud) -> PointCloud:
        """Apply the filter to a point cloud.

        Args:
            pc: Input point cloud (not modified).

        Returns:
            Processed copy of the point cloud.
        """

    @classmethod
    @abstractmethod
    def type_name(cls) -> str:
        """Pipeline type identifier (e.g., 'filters.normal')."""

    def _k(self, default: int = 10) -> int:
        return int(self.options.get("k", default))

    def __repr__(self) -> str:
        opts = ", ".join(f"{k}={v!r}" for k, v in self.options.items())
        return f"{self.type_name()}({opts})"
