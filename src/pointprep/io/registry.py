"""I/O registry — format auto-detection and convenience functions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pointprep.core.pointcloud import PointCloud
from pointprep.io.base import Reader, Writer


class IORegistry:
    """Registry for readers and writers, with format auto-detection."""

    def __init__(self) -> None:
        self._readers: dict[str, type[Reader]] = {}  # extension -> Reader class
        self._writers: dict[str, type[Writer]] = {}
        self._reader_types: dict[str, type[Reader]] = {}  # type_name -> Reader class
        self._writer_types: dict[str, type[Writer]] = {}

    def register_reader(self, cls: type[Reader]) -> None:
        for ext in cls.extensions():
            self._readers[ext.lower()] = cls
        self._reader_types[cls.type_name()] = cls

    def register_writer(self, cls: type[Writer]) -> None:
        for ext in cls.extensions():
            self._writers[ext.lower()] = cls
        self._writer_types[cls.type_name()] = cls

    def get_reader(self, path: str) -> Reader:
        """Get a reader instance for the given file path."""
        ext = Path(path).suffix.lower()
        if ext not in self._readers:
            raise ValueError(
                f"No reader for extension '{ext}'. "
                f"Supported: {list(self._readers.keys())}"
            )
        return self._readers[ext]()

    def get_writer(self, path: str) -> Writer:
        """Get a writer instance for the given file path."""
        ext = Path(path).suffix.lower()
        if ext not in self._writers:
            raise ValueError(
                f"No writer for extension '{ext}'. "
                f"Supported: {list(self._writers.keys())}"
            )
        return self._writers[ext]()

    def get_reader_by_type(self, type_name: str) -> Reader:
        if type_name not in self._reader_types:
            raise ValueError(
                f"Unknown reader type '{type_name}'. "
                f"Available: {list(self._reader_types.keys())}"
            )
        return self._reader_types[type_name]()

    def get_writer_by_type(self, type_name: str) -> Writer:
        if type_name not in self._writer_types:
            raise ValueError(
                f"Unknown writer type '{type_name}'. "
                f"Available: {list(self._writer_types.keys())}"
            )
        return self._writer_types[type_name]()


# Global registry instance
io_registry = IORegistry()


def _ensure_registered() -> None:
    """Register built-in readers/writers (lazy, on first use)."""
    if io_registry._readers:
        return

    from pointprep.io.xyz import XyzReader, XyzWriter

    io_registry.register_reader(XyzReader)
    io_registry.register_writer(XyzWriter)


def read(path: str, **options: Any) -> PointCloud:
    """Read a point cloud file (format from extension)."""
    _ensure_registered()
    reader = io_registry.get_reader(path)
    return reader.read(path, **options)


def write(pc: PointCloud, path: str, **options: Any) -> int:
    """Write a point cloud to file (format from extension).

    Returns:
        Number of points written.
    """
    _ensure_registered()
    writer = io_registry.get_writer(path)
    return writer.write(pc, path, **options)
