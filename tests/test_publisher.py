"""Tests for publishing rewritten articles."""

from __future__ import annotations

import json

import pytest

from article_refresher.core.errors import ArticleApiError, PublishFailure
from article_refresher.core.types import ArticleRecord
from article_refresher.output.publisher import Publisher, render_references


class DummyClient:
    def __init__(self, echo: dict | None = None, error: Exception | None = None):
        self.echo = echo if echo is not None else {"id": 99}
        self.error = error
        self.payloads: list[dict] = []

    def create_article(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return ArticleRecord.from_api({**payload, **self.echo})


URLS = ["https://a.example.com/post", "https://b.example.com/story"]


def test_render_references_numbers_urls_in_order():
    block = render_references(URLS)

    assert "References" in block
    assert block.index("[1]") < block.index(URLS[0]) < block.index("[2]") < block.index(URLS[1])
    assert f'href="{URLS[0]}"' in block
    assert "[3]" not in block


def test_render_references_escapes_markup():
    block = render_references(['https://a.example.com/?q="><script>'])

    assert "<script>" not in block
    assert "&lt;script&gt;" in block


def test_publish_builds_linked_payload():
    client = DummyClient()
    publisher = Publisher(client)

    record = publisher.publish(5, "X", "<h2>Y</h2><p>Z</p>", URLS)

    payload = client.payloads[0]
    assert payload["title"] == "X (Updated Version)"
    assert payload["content"].startswith("<h2>Y</h2><p>Z</p>\n")
    assert payload["content"].endswith(render_references(URLS))
    assert payload["is_updated"] is True
    assert payload["original_article_id"] == 5
    assert json.loads(payload["references"]) == URLS
    assert record.id == 99
    assert record.is_rewrite
    assert record.original_article_id == 5


def test_publish_uses_configured_title_suffix():
    client = DummyClient()

    Publisher(client, title_suffix="[refreshed]").publish(5, "X", "<p>Z</p>", URLS)

    assert client.payloads[0]["title"] == "X [refreshed]"


def test_publish_wraps_api_errors():
    client = DummyClient(error=ArticleApiError("POST /articles returned 422", status_code=422))

    with pytest.raises(PublishFailure, match="422"):
        Publisher(client).publish(5, "X", "<p>Z</p>", URLS)


def test_publish_rejects_record_not_linked_to_original():
    client = DummyClient(echo={"id": 99, "is_updated": False})

    with pytest.raises(PublishFailure, match="not linked"):
        Publisher(client).publish(5, "X", "<p>Z</p>", URLS)

    client = DummyClient(echo={"id": 99, "original_article_id": 6})

    with pytest.raises(PublishFailure, match="not linked"):
        Publisher(client).publish(5, "X", "<p>Z</p>", URLS)
