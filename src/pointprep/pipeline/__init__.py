"""Processing pipelines."""

from pointprep.pipeline.pipeline import Pipeline
from pointprep.pipeline.preprocess import PreprocessReport, PreprocessResult, preprocess

__all__ = ["Pipeline", "PreprocessReport", "PreprocessResult", "preprocess"]
