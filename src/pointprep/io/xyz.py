"""XYZ/PWN reader and writer — whitespace-delimited points with optional normals.

Each non-comment line holds ``x y z`` or ``x y z nx ny nz``. ``.pwn``
("points with normals") files always carry the normal columns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from pointprep.core.metadata import Metadata
from pointprep.core.pointcloud import PointCloud
from pointprep.io.base import Reader, Writer


class XyzReader(Reader):
    """Read XYZ/PWN point files.

    Options:
        skip_normals: bool — Ignore normal columns if present (default: False).
    """

    def read(self, path: str, **options: Any) -> PointCloud:
        skip_normals = bool(options.get("skip_normals", False))

        data = np.loadtxt(path, dtype=np.float64, comments="#", ndmin=2)
        if data.size == 0:
            data = np.empty((0, 3), dtype=np.float64)
        if data.shape[1] not in (3, 6):
            raise ValueError(
                f"{path}: expected 3 (x y z) or 6 (x y z nx ny nz) columns, "
                f"got {data.shape[1]}"
            )

        pc = PointCloud.from_positions(data[:, :3])
        if data.shape[1] == 6 and not skip_normals:
            pc.set_normals(data[:, 3:])
        pc.metadata = Metadata(
            source_file=str(path),
            source_format=Path(path).suffix.lower().lstrip(".") or "xyz",
        )
        return pc

    @classmethod
    def extensions(cls) -> list[str]:
        return [".xyz", ".pwn", ".txt"]

    @classmethod
    def type_name(cls) -> str:
        return "readers.xyz"


class XyzWriter(Writer):
    """Write XYZ/PWN point files.

    Options:
        normals: bool — Write normal columns (default: True when the cloud
            has normals; required for .pwn).
        precision: int — Decimal places (default: 6).
    """

    def write(self, pc: PointCloud, path: str, **options: Any) -> int:
        if pc.num_points == 0:
            raise ValueError("Cannot write empty point cloud")

        precision = int(options.get("precision", 6))
        is_pwn = Path(path).suffix.lower() == ".pwn"
        with_normals = bool(options.get("normals", pc.has_normals or is_pwn))
        if with_normals and not pc.has_normals:
            raise ValueError(f"Cannot write normals to {path}: point cloud has none")

        columns = [pc.positions()]
        if with_normals:
            columns.append(pc.normals())
        np.savetxt(path, np.hstack(columns), fmt=f"%.{precision}f", delimiter=" ")
        return pc.num_points

    @classmethod
    def extensions(cls) -> list[str]:
        return [".xyz", ".pwn", ".txt"]

    @classmethod
    def type_name(cls) -> str:
        return "writers.xyz"
