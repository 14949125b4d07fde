"""Article API boundary (source registry and persistence)."""

from .client import ArticleApiClient, select_original

__all__ = ["ArticleApiClient", "select_original"]
