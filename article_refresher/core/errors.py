"""Typed failures raised by the refresh pipeline."""

from __future__ import annotations

from .types import Stage


class ArticleApiError(Exception):
    """Transport or protocol error talking to the article API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PipelineError(Exception):
    """Base class for failures that abort a run."""

    stage: Stage

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class SourceUnavailable(PipelineError):
    """The article list could not be fetched or holds no original."""

    stage = Stage.SELECT_ORIGINAL


class InsufficientReferences(PipelineError):
    """Discovery yielded fewer usable reference URLs than required."""

    stage = Stage.DISCOVER_REFERENCES


class ExtractionShortfall(PipelineError):
    """Too few reference pages produced enough text."""

    stage = Stage.EXTRACT


class SynthesisFailure(PipelineError):
    """The model call failed or returned no usable text."""

    stage = Stage.SYNTHESIZE


SynthesisError = SynthesisFailure


class PublishFailure(PipelineError):
    """The article API rejected the rewritten article."""

    stage = Stage.PUBLISH
