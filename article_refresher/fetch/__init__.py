"""
Page fetching and extraction.

This package handles HTTP fetching and plain-text extraction of
reference pages.
"""

from .extractor import ContentExtractor, extract_text
from .fetcher import FetchResult, fetch_url

__all__ = [
    "ContentExtractor",
    "FetchResult",
    "extract_text",
    "fetch_url",
]
