"""
Core data types for the Article Refresher.

This module defines the fundamental data structures used throughout the pipeline:
- ArticleRecord: An article as stored by the article API
- ReferenceExcerpt: Extracted text of one reference page
- StageOutcome: Result of one pipeline stage
- RunResult: In-memory record of one pipeline run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import json
from typing import Any


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    SELECT_ORIGINAL = "select_original"
    DISCOVER_REFERENCES = "discover_references"
    EXTRACT = "extract"
    SYNTHESIZE = "synthesize"
    PUBLISH = "publish"


@dataclass
class ArticleRecord:
    """Represents an article record exposed by the article API.

    Attributes:
        id: Record identifier assigned by the API
        title: The article headline
        body: Article content as HTML
        source_url: URL the original was ingested from, if any
        excerpt: Short teaser text, if any
        image_url: Lead image URL, if any
        is_rewrite: True for refreshed articles produced by the pipeline
        original_article_id: Id of the original a rewrite derives from
        reference_urls: Reference pages a rewrite was conditioned on
        created_at: Creation timestamp as returned by the API
    """
    id: int | str
    title: str
    body: str = ""
    source_url: str | None = None
    excerpt: str | None = None
    image_url: str | None = None
    is_rewrite: bool = False
    original_article_id: int | str | None = None
    reference_urls: list[str] = field(default_factory=list)
    created_at: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ArticleRecord":
        """Build a record from the API's JSON representation."""
        return cls(
            id=data["id"],
            title=str(data.get("title") or ""),
            body=str(data.get("content") or ""),
            source_url=data.get("url") or None,
            excerpt=data.get("excerpt") or None,
            image_url=data.get("image_url") or None,
            is_rewrite=bool(data.get("is_updated")),
            original_article_id=data.get("original_article_id"),
            reference_urls=_parse_references(data.get("references")),
            created_at=data.get("created_at"),
        )


def _parse_references(value: Any) -> list[str]:
    # The API casts references to an array, but older rows hold the raw JSON string.
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()]


@dataclass
class ReferenceExcerpt:
    """Plain-text excerpt of a reference page.

    Attributes:
        source_url: The page the text was extracted from
        text: Whitespace-normalized text, capped by the extractor
    """
    source_url: str
    text: str


@dataclass
class StageOutcome:
    """Outcome of one pipeline stage.

    Attributes:
        stage: The stage this outcome belongs to
        status: "success", "partial" or "failed"
        detail: Human-readable detail for the progress trace
    """
    stage: Stage
    status: str
    detail: str = ""


@dataclass
class RunResult:
    """Record of one pipeline run.

    Attributes:
        status: "done" when an article was published, "aborted" otherwise
        original: The selected original article, if one was found
        published: The record created by the publisher on success
        reference_urls: Reference URLs discovered for the original
        outcomes: Stage outcomes in execution order
        error: The failure that aborted the run
    """
    status: str = "aborted"
    original: ArticleRecord | None = None
    published: ArticleRecord | None = None
    reference_urls: list[str] = field(default_factory=list)
    outcomes: list[StageOutcome] = field(default_factory=list)
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "done"

    def record(self, stage: Stage, status: str, detail: str = "") -> StageOutcome:
        outcome = StageOutcome(stage=stage, status=status, detail=detail)
        self.outcomes.append(outcome)
        return outcome
