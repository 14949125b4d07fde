"""
Reference page text extraction.

Pages are cleaned of non-content elements, then an ordered list of
article-like container selectors is tried and the first one that matches
with non-empty text wins. When no selector matches, or the region is too
short to be an article, the whole page body is used instead.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from ..config import ExtractConfig, FetchConfig
from ..utils.logging import log_event
from .fetcher import categorize_error, fetch_url

_WHITESPACE_RE = re.compile(r"\s+")


def extract_text(html: str, cfg: ExtractConfig) -> str:
    """Extract a bounded plain-text excerpt from HTML.

    Args:
        html: The HTML content to extract text from
        cfg: Extraction settings (selectors, thresholds, cap)

    Returns:
        Whitespace-normalized text of at most cfg.max_chars characters,
        or an empty string when the page holds no text

    Examples:
        >>> extract_text("<article><p>Hello</p></article>", ExtractConfig())
        'Hello'
    """
    soup = BeautifulSoup(html, "html.parser")
    _strip_elements(soup, cfg.strip_selectors)

    content = ""
    for selector in cfg.content_selectors:
        text = _region_text(soup, selector)
        if text:
            content = text
            break

    if len(content) < cfg.min_region_chars:
        root = soup.body or soup
        content = normalize_whitespace(root.get_text(separator=" "))

    return content[: cfg.max_chars]


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _strip_elements(soup: BeautifulSoup, selectors: list[str]) -> None:
    for selector in selectors:
        for element in soup.select(selector):
            # Nested matches are already gone with their ancestor.
            if element.decomposed:
                continue
            element.decompose()


def _region_text(soup: BeautifulSoup, selector: str) -> str:
    matches = soup.select(selector)
    if not matches:
        return ""
    # Skip matches nested inside another match so text is not counted twice.
    matched_ids = {id(el) for el in matches}
    outer = [el for el in matches if not _has_matched_ancestor(el, matched_ids)]
    return normalize_whitespace(" ".join(el.get_text(separator=" ") for el in outer))


def _has_matched_ancestor(element: Tag, matched_ids: set[int]) -> bool:
    return any(id(parent) in matched_ids for parent in element.parents)


class ContentExtractor:
    """Fetch reference pages and reduce them to plain-text excerpts."""

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        extract_cfg: ExtractConfig,
        logger: logging.Logger | None = None,
        transport=None,
    ) -> None:
        self.fetch_cfg = fetch_cfg
        self.extract_cfg = extract_cfg
        self.logger = logger
        self.transport = transport

    def extract(self, url: str) -> str:
        """Return the excerpt for url, or an empty string on any failure."""
        log_event(self.logger, "Fetch start", level=logging.DEBUG, event="fetch_start", url=url)
        result = fetch_url(
            url,
            timeout=self.fetch_cfg.timeout_seconds,
            retries=self.fetch_cfg.retries,
            user_agent=self.fetch_cfg.user_agent,
            trust_env=self.fetch_cfg.trust_env,
            transport=self.transport,
        )
        if not result.ok:
            log_event(
                self.logger,
                f"Fetch failed for {url}: {result.error}",
                level=logging.WARNING,
                event="fetch_failed",
                url=url,
                error=result.error,
                status_code=result.status_code,
                error_category=categorize_error(result.error, result.status_code),
            )
            return ""

        try:
            text = extract_text(result.text or "", self.extract_cfg)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                f"Extract failed for {url}: {exc}",
                level=logging.WARNING,
                event="extract_failed",
                url=url,
                error=f"{type(exc).__name__}: {exc}",
            )
            return ""

        log_event(
            self.logger,
            f"Extracted {len(text)} characters from {url}",
            event="extract_done",
            url=url,
            chars=len(text),
        )
        return text
