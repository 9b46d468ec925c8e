"""I/O readers and writers for point cloud formats."""

from pointprep.io.registry import read, write, io_registry

__all__ = ["read", "write", "io_registry"]
