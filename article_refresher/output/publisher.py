"""
Publishing of rewritten articles.

The rewritten body gets a References block appended (rendered with a
Jinja2 template) and is stored through the article API as an updated
version of the original.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.errors import ArticleApiError, PublishFailure
from ..core.types import ArticleRecord
from ..registry.client import ArticleApiClient
from ..utils.logging import log_event

_TEMPLATE_DIR = Path(__file__).parent / "templates"


def render_references(reference_urls: list[str]) -> str:
    """Render the numbered, 1-indexed References block for reference_urls."""
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("references.html")
    return template.render(references=list(reference_urls))


class Publisher:
    """Persist a rewritten article with provenance back to its sources."""

    def __init__(
        self,
        client: ArticleApiClient,
        title_suffix: str = "(Updated Version)",
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.title_suffix = title_suffix
        self.logger = logger

    def publish(
        self,
        original_id: int | str,
        title: str,
        body_html: str,
        reference_urls: list[str],
    ) -> ArticleRecord:
        """Create the rewritten article record.

        Raises:
            PublishFailure: If the article API rejects the write
        """
        payload = {
            "title": f"{title} {self.title_suffix}",
            "content": body_html + "\n" + render_references(reference_urls),
            "is_updated": True,
            "original_article_id": original_id,
            "references": json.dumps(list(reference_urls)),
        }
        try:
            record = self.client.create_article(payload)
        except ArticleApiError as exc:
            raise PublishFailure(f"Failed to publish article: {exc}") from exc

        if not record.is_rewrite or str(record.original_article_id) != str(original_id):
            raise PublishFailure(
                f"Published article {record.id} is not linked to original {original_id}"
            )

        log_event(
            self.logger,
            f"Published with ID: {record.id}",
            event="publish_done",
            article_id=record.id,
            original_article_id=original_id,
            references=list(reference_urls),
        )
        return record
