"""Base classes for readers and writers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pointprep.core.pointcloud import PointCloud


class Reader(ABC):
    """Base class for all point cloud readers."""

    @abstractmethod
    def read(self, path: str, **options: Any) -> PointCloud:
        """Read a point cloud file.

        Args:
            path: File path to read.
            **options: Format-specific options.

        Returns:
            PointCloud with positions and, if the file has them, normals.
        """

    @classmethod
    @abstractmethod
    def extensions(cls) -> list[str]:
        """File extensions this reader handles (e.g., ['.xyz'])."""

    @classmethod
    @abstractmethod
    def type_name(cls) -> str:
        """Pipeline type identifier (e.g., 'readers.xyz')."""


class Writer(ABC):
    """Base class for all point cloud writers."""

    @abstractmethod
    def write(self, pc: PointCloud, path: str, **options: Any) -> int:
        """Write a point cloud to file.

        Returns:
            Number of points written.
        """

    @classmethod
    @abstractmethod
    def extensions(cls) -> list[str]:
        """File extensions this writer handles."""

    @classmethod
    @abstractmethod
    def type_name(cls) -> str:
        """Pipeline type identifier (e.g., 'writers.xyz')."""
