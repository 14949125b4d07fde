"""
HTTP client for the article API.

The API wraps every response in a ``{"success": bool, "data": ...}``
envelope. Transport errors, non-2xx statuses, undecodable bodies and
``success: false`` envelopes all raise ArticleApiError.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import ApiConfig, get_api_url
from ..core.errors import ArticleApiError
from ..core.types import ArticleRecord
from ..utils.logging import log_event


class ArticleApiClient:
    """Read and create article records through the article API."""

    def __init__(
        self,
        cfg: ApiConfig,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.cfg = cfg
        self.base_url = get_api_url(cfg)
        self.logger = logger
        self.transport = transport

    def list_articles(self) -> list[ArticleRecord]:
        data = self._request("GET", "/articles")
        if not isinstance(data, list):
            raise ArticleApiError("Malformed article list: 'data' is not an array")
        records = []
        for item in data:
            if not isinstance(item, dict) or "id" not in item:
                raise ArticleApiError("Malformed article list: item without an id")
            records.append(ArticleRecord.from_api(item))
        return records

    def get_article(self, article_id: int | str) -> ArticleRecord:
        data = self._request("GET", f"/articles/{article_id}")
        if not isinstance(data, dict) or "id" not in data:
            raise ArticleApiError("Malformed article: missing article id")
        return ArticleRecord.from_api(data)

    def create_article(self, payload: dict[str, Any]) -> ArticleRecord:
        """Create an article; fields missing from the API's echo come from payload."""
        data = self._request("POST", "/articles", payload=payload)
        if not isinstance(data, dict) or "id" not in data:
            raise ArticleApiError("Malformed create response: missing article id")
        return ArticleRecord.from_api({**payload, **data})

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                headers={"Accept": "application/json"},
                transport=self.transport,
            ) as client:
                resp = client.request(method, url, json=payload)
        except httpx.HTTPError as exc:
            raise ArticleApiError(f"{method} {url} failed: {type(exc).__name__}: {exc}") from exc

        try:
            body = resp.json()
        except json.JSONDecodeError:
            body = None

        if not resp.is_success:
            raise ArticleApiError(
                f"{method} {url} returned {resp.status_code}{_describe_errors(body)}",
                status_code=resp.status_code,
            )
        if not isinstance(body, dict):
            raise ArticleApiError(f"{method} {url} returned a non-JSON body", status_code=resp.status_code)
        if not body.get("success"):
            raise ArticleApiError(
                f"{method} {url} reported failure{_describe_errors(body)}",
                status_code=resp.status_code,
            )

        log_event(
            self.logger,
            "Article API call",
            level=logging.DEBUG,
            event="api_call",
            method=method,
            path=path,
            status_code=resp.status_code,
        )
        return body.get("data")


def select_original(articles: list[ArticleRecord]) -> ArticleRecord | None:
    """Return the first article that is not a rewrite.

    The API lists articles newest first, so this is the most recent original.
    """
    for article in articles:
        if not article.is_rewrite:
            return article
    return None


def _describe_errors(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    detail = body.get("errors") or body.get("message")
    if not detail:
        return ""
    return f": {json.dumps(detail, ensure_ascii=True) if not isinstance(detail, str) else detail}"
