"""
HTTP page fetching with retry support.

Used by both the reference discoverer (search result pages) and the
content extractor (reference pages). Requests follow redirects, send a
browser-like User-Agent and respect system proxy settings when trust_env
is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any

import httpx


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def fetch_url(
    url: str,
    timeout: float,
    retries: int,
    user_agent: str,
    trust_env: bool = True,
    params: dict[str, Any] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> FetchResult:
    """Fetch a URL using httpx with retry logic.

    Non-2xx responses count as failures. 4xx responses are not retried
    since repeating the request will not change the answer.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds
        retries: Number of retry attempts after initial failure
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment
        params: Optional query string parameters
        transport: Optional httpx transport (tests inject a MockTransport)

    Returns:
        FetchResult with text on success or error message on failure
    """
    headers = {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }
    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            with httpx.Client(
                timeout=timeout,
                headers=headers,
                follow_redirects=True,
                trust_env=trust_env,
                transport=transport,
            ) as client:
                resp = client.get(url, params=params)
            last_status = resp.status_code
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_error = f"HTTPStatusError: {resp.status_code} {resp.reason_phrase}"
            if 400 <= resp.status_code < 500:
                break
        except httpx.HTTPError as exc:
            last_status = None
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            time.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=last_status, text=None, error=last_error)


def categorize_error(error: str | None, status_code: int | None) -> str:
    """Categorize fetch errors for logging.

    Returns:
        Error category: "timeout", "blocked", "network_failed", "http_error", "unknown"
    """
    if not error:
        return "unknown"
    error_lower = error.lower()
    if "timeout" in error_lower or "timed out" in error_lower:
        return "timeout"
    if status_code in (401, 403, 429) or "blocked" in error_lower:
        return "blocked"
    if "connect" in error_lower or "connection" in error_lower:
        return "network_failed"
    if status_code is not None:
        return "http_error"
    return "unknown"
