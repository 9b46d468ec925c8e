"""Point cloud metadata and processing history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Metadata:
    """Metadata associated with a point cloud.

    Attributes:
        source_file: Original file path this point cloud was read from.
        source_format: File format identifier (e.g. "xyz", "pwn").
        software: Software that created/processed this data.
        stats: Counters reported by processing stages, keyed by stage
            type name (e.g. ``{"filters.normal": {"degenerate_fits": 3}}``).
    """

    source_file: str | None = None
    source_format: str | None = None
    software: str = "pointprep"
    stats: dict[str, dict[str, Any]] = field(default_factory=dict)

    def record(self, stage: str, **values: Any) -> None:
        """Merge counters for a stage into ``stats``."""
        self.stats.setdefault(stage, {}).update(values)

    def copy(self) -> Metadata:
        """Return a copy with independent stats dicts."""
        return Metadata(
            source_file=self.source_file,
            source_format=self.source_format,
            software=self.software,
            stats={k: dict(v) for k, v in self.stats.items()},
        )
