"""Pipeline — parse and execute JSON processing pipelines."""

from __future__ import annotations

import json
import logging
from typing import Any

from pointprep.core.pointcloud import PointCloud
from pointprep.filters.base import Filter
from pointprep.filters.registry import get_filter
from pointprep.io.base import Reader, Writer
from pointprep.io.registry import _ensure_registered as _ensure_io, io_registry

logger = logging.getLogger(__name__)


class Pipeline:
    """JSON-based processing pipeline.

    A pipeline is a list of stages executed as
    reader → filter chain → writer(s). Bare strings are file names: the
    first is the reader, later ones are writers.

    Examples:
        >>> import json
        >>> p = Pipeline(json.dumps({
        ...     "pipeline": [
        ...         "scan.xyz",
        ...         {"type": "filters.smooth", "k": 10},
        ...         {"type": "filters.normal", "k": 10},
        ...         {"type": "filters.orient", "k": 10},
        ...         "scan_oriented.pwn"
        ...     ]
        ... }))
        >>> count = p.execute()
    """

    def __init__(
        self,
        json_str: str | None = None,
        stages: list | None = None,
    ) -> None:
        self._reader: tuple[Reader, str, dict[str, Any]] | None = None
        self._filters: list[Filter] = []
        self._writers: list[tuple[Writer, str, dict[str, Any]]] = []
        self._result: PointCloud | None = None

        if json_str is not None:
            self._parse_json(json_str)
        elif stages is not None:
            self._parse_stages(stages)

    def _parse_json(self, json_str: str) -> None:
        data = json.loads(json_str)

        if isinstance(data, dict):
            stages = data.get("pipeline", [])
        elif isinstance(data, list):
            stages = data
        else:
            raise ValueError("Pipeline JSON must be a dict with 'pipeline' key or a list")

        self._parse_stages(stages)

    def _parse_stages(self, stages: list) -> None:
        _ensure_io()

        for stage in stages:
            if isinstance(stage, str):
                self._parse_filename_stage(stage, {})
            elif isinstance(stage, dict):
                self._parse_dict_stage(stage)
            else:
                raise ValueError(f"Invalid pipeline stage: {stage!r}")

    def _parse_filename_stage(self, filename: str, options: dict[str, Any]) -> None:
        if self._reader is None:
            self._set_reader(io_registry.get_reader(filename), filename, options)
        else:
            self._writers.append((io_registry.get_writer(filename), filename, options))

    def _set_reader(self, reader: Reader, filename: str, options: dict[str, Any]) -> None:
        if self._reader is not None:
            raise ValueError(f"Pipeline already has a reader; cannot add {filename}")
        self._reader = (reader, filename, options)

    def _parse_dict_stage(self, stage: dict[str, Any]) -> None:
        stage_type = stage.get("type", "")
        filename = stage.get("filename", "")
        options = {k: v for k, v in stage.items() if k not in ("type", "filename")}

        if stage_type.startswith("readers."):
            if not filename:
                raise ValueError(f"Reader stage missing 'filename': {stage}")
            self._set_reader(io_registry.get_reader_by_type(stage_type), filename, options)

        elif stage_type.startswith("writers."):
            if not filename:
                raise ValueError(f"Writer stage missing 'filename': {stage}")
            writer = io_registry.get_writer_by_type(stage_type)
            self._writers.append((writer, filename, options))

        elif stage_type.startswith("filters."):
            self._filters.append(get_filter(stage_type, **options))

        elif filename:
            self._parse_filename_stage(filename, options)

        else:
            raise ValueError(f"Cannot determine stage type: {stage}")

    def validate(self) -> list[str]:
        """Validate the pipeline configuration.

        Returns:
            List of error messages (empty = valid).
        """
        errors = []
        if self._reader is None:
            errors.append("Pipeline has no reader")
        if not self._writers:
            errors.append("Pipeline has no writers")
        return errors

    def execute(self) -> int:
        """Execute the pipeline: read → filter → write.

        Returns:
            Number of points processed.
        """
        if self._reader is None:
            raise RuntimeError("Pipeline has no reader")

        reader, path, options = self._reader
        logger.info("Reading %s", path)
        result = reader.read(path, **options)
        logger.info("  Read %d points", result.num_points)

        for filt in self._filters:
            logger.info("Applying %s", filt)
            result = filt.filter(result)

        for writer, path, options in self._writers:
            logger.info("Writing %s", path)
            writer.write(result, path, **options)

        self._result = result
        return result.num_points

    @property
    def result(self) -> PointCloud | None:
        """PointCloud result from the last execution."""
        return self._result

    @property
    def stats(self) -> dict[str, dict[str, Any]]:
        """Per-stage counters from the last execution."""
        if self._result is None:
            return {}
        return self._result.metadata.stats

    def to_json(self) -> str:
        """Serialize the pipeline back to JSON."""
        stages: list[Any] = []

        if self._reader is not None:
            reader, path, options = self._reader
            if options:
                stages.append({"type": reader.type_name(), "filename": path, **options})
            else:
                stages.append(path)

        for filt in self._filters:
            stages.append({"type": filt.type_name(), **filt.options})

        for writer, path, options in self._writers:
            if options:
                stages.append({"type": writer.type_name(), "filename": path, **options})
            else:
                stages.append(path)

        return json.dumps({"pipeline": stages}, indent=2)

    def __repr__(self) -> str:
        parts = (
            f"{0 if self._reader is None else 1} reader(s), "
            f"{len(self._filters)} filter(s), "
            f"{len(self._writers)} writer(s)"
        )
        return f"Pipeline({parts})"
