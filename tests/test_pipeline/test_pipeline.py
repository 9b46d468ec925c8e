"""Tests for JSON pipelines."""

import json

import numpy as np
import pytest

from pointprep.io.registry import read, write
from pointprep.pipeline.pipeline import Pipeline


@pytest.fixture
def xyz_file(sample_pc, tmp_path) -> str:
    path = str(tmp_path / "input.xyz")
    write(sample_pc, path)
    return path


class TestPipeline:
    def test_smooth_normal_orient(self, xyz_file, tmp_path):
        output = str(tmp_path / "output.pwn")
        p = Pipeline(json.dumps({
            "pipeline": [
                xyz_file,
                {"type": "filters.smooth", "k": 8},
                {"type": "filters.normal", "k": 8},
                {"type": "filters.orient", "k": 8},
                output,
            ]
        }))
        assert p.execute() == 100
        assert p.result.oriented().all()
        assert set(p.stats) == {"filters.smooth", "filters.normal", "filters.orient"}

        written = read(output)
        assert written.has_normals
        np.testing.assert_allclose(
            np.linalg.norm(written.normals(), axis=1), 1.0, atol=1e-3
        )

    def test_stage_list(self, xyz_file, tmp_path):
        output = str(tmp_path / "output.xyz")
        p = Pipeline(stages=[
            {"type": "readers.xyz", "filename": xyz_file},
            {"type": "filters.preprocess", "k": 8},
            {"type": "writers.xyz", "filename": output, "precision": 4},
        ])
        assert p.execute() == 100
        assert p.stats["filters.preprocess"]["unoriented"] == 0

    def test_validate(self):
        errors = Pipeline(stages=[]).validate()
        assert "Pipeline has no reader" in errors
        assert "Pipeline has no writers" in errors

    def test_execute_without_reader(self):
        with pytest.raises(RuntimeError, match="no reader"):
            Pipeline(stages=[]).execute()

    def test_unknown_filter(self, xyz_file):
        with pytest.raises(ValueError, match="Unknown filter"):
            Pipeline(stages=[xyz_file, {"type": "filters.mesh"}])

    def test_invalid_stage(self):
        with pytest.raises(ValueError, match="Invalid pipeline stage"):
            Pipeline(stages=[42])

    def test_invalid_json_root(self):
        with pytest.raises(ValueError, match="pipeline"):
            Pipeline(json.dumps(5))

    def test_to_json_roundtrip(self, xyz_file, tmp_path):
        spec = {
            "pipeline": [
                xyz_file,
                {"type": "filters.normal", "k": 6},
                str(tmp_path / "out.pwn"),
            ]
        }
        p = Pipeline(json.dumps(spec))
        assert json.loads(p.to_json()) == spec
        assert repr(p) == "Pipeline(1 reader(s), 1 filter(s), 1 writer(s))"
