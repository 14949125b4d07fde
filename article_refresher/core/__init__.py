"""
Core domain models and failures.

This package contains data types and the error taxonomy that are
independent of any specific pipeline stage.
"""

from .errors import (
    ArticleApiError,
    ExtractionShortfall,
    InsufficientReferences,
    PipelineError,
    PublishFailure,
    SourceUnavailable,
    SynthesisError,
    SynthesisFailure,
)
from .types import ArticleRecord, ReferenceExcerpt, RunResult, Stage, StageOutcome

__all__ = [
    "ArticleRecord",
    "ReferenceExcerpt",
    "RunResult",
    "Stage",
    "StageOutcome",
    "ArticleApiError",
    "PipelineError",
    "SourceUnavailable",
    "InsufficientReferences",
    "ExtractionShortfall",
    "SynthesisFailure",
    "SynthesisError",
    "PublishFailure",
]
