"""
Reference discovery through a web search results page.

The query is sent to a configurable HTML search endpoint, anchors in the
organic-result region are collected, search-engine redirect wrappers are
unwrapped, and the candidates are filtered by scheme and domain denylist,
deduplicated in first-seen order and truncated.
"""

from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import parse_qs, urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from ..config import FetchConfig, SearchConfig
from ..core.errors import InsufficientReferences
from ..fetch.fetcher import fetch_url
from ..utils.logging import log_event

_ALLOWED_SCHEMES = {"http", "https"}

# Redirect wrappers used by search result pages: path -> query parameter holding the target.
_REDIRECT_PARAMS = {
    "/l/": "uddg",
    "/l": "uddg",
    "/url": "q",
}


class ReferenceDiscoverer:
    """Find candidate reference pages for an article title."""

    def __init__(
        self,
        search_cfg: SearchConfig,
        fetch_cfg: FetchConfig,
        logger: logging.Logger | None = None,
        transport=None,
    ) -> None:
        self.search_cfg = search_cfg
        self.fetch_cfg = fetch_cfg
        self.logger = logger
        self.transport = transport

    def discover(self, query: str) -> list[str]:
        """Return at most search_cfg.max_results reference URLs for query.

        Raises:
            InsufficientReferences: If the search page cannot be fetched
        """
        cfg = self.search_cfg
        result = fetch_url(
            cfg.endpoint,
            timeout=cfg.timeout_seconds,
            retries=self.fetch_cfg.retries,
            user_agent=self.fetch_cfg.user_agent,
            trust_env=self.fetch_cfg.trust_env,
            params={cfg.query_param: query},
            transport=self.transport,
        )
        if not result.ok:
            log_event(
                self.logger,
                f"Search request failed: {result.error}",
                level=logging.ERROR,
                event="search_failed",
                query=query,
                error=result.error,
                status_code=result.status_code,
            )
            raise InsufficientReferences(f"Search request failed: {result.error}")

        candidates = parse_result_links(result.text or "", cfg.endpoint, cfg.result_selector)
        denylist = list(cfg.denylist) + [_registered_domain(cfg.endpoint)]
        urls = filter_reference_urls(candidates, denylist, cfg.max_results)
        log_event(
            self.logger,
            f"Found {len(urls)} relevant articles",
            event="search_done",
            query=query,
            candidates=len(candidates),
            selected=urls,
        )
        return urls


def parse_result_links(html: str, base_url: str, selector: str) -> list[str]:
    """Collect absolute anchor targets from the organic-result region."""
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    for anchor in soup.select(selector):
        href = anchor.get("href")
        if not href or not isinstance(href, str):
            continue
        href = href.strip()
        if href.startswith(("#", "javascript:", "mailto:")):
            continue
        links.append(unwrap_redirect(urljoin(base_url, href)))
    return links


def unwrap_redirect(url: str) -> str:
    """Return the target of a search-engine redirect link, or url unchanged."""
    parsed = urlparse(url)
    param = _REDIRECT_PARAMS.get(parsed.path)
    if param is None:
        return url
    values = parse_qs(parsed.query).get(param)
    if not values:
        return url
    return values[0]


def filter_reference_urls(
    candidates: Iterable[str],
    denylist: Iterable[str],
    limit: int,
) -> list[str]:
    """Keep unique absolute HTTP(S) URLs whose host is not denied.

    Order of first appearance is preserved and the result is truncated
    to limit entries.
    """
    denied = [d.lower().strip(".") for d in denylist if d]
    seen: set[str] = set()
    selected: list[str] = []
    for candidate in candidates:
        url, _fragment = urldefrag(candidate.strip())
        parsed = urlparse(url)
        if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.hostname:
            continue
        if is_denied_host(parsed.hostname, denied):
            continue
        if url in seen:
            continue
        seen.add(url)
        selected.append(url)
        if len(selected) >= limit:
            break
    return selected


def is_denied_host(host: str, denylist: Iterable[str]) -> bool:
    host = host.lower().rstrip(".")
    return any(host == domain or host.endswith("." + domain) for domain in denylist)


def _registered_domain(url: str) -> str:
    # Good enough for the search engines we target; no public-suffix handling.
    host = (urlparse(url).hostname or "").lower()
    parts = host.split(".")
    return ".".join(parts[-2:]) if len(parts) >= 2 else host
