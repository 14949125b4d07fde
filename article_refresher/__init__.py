"""
Article Refresher - AI-assisted refresh of stored articles.

This package picks the most recent original article from an article API,
finds reference pages through a web search, scrapes them, rewrites the
article with a generative model and publishes the result as an updated
version linked to its sources.

Main entry point is the CLI via the `article-refresher` command.

Example:
    $ article-refresher --config config.yaml
"""

__all__ = ["__version__", "RefreshPipeline", "RunResult", "load_config"]
__version__ = "0.1.0"

from .config import load_config
from .core.types import RunResult
from .runner import RefreshPipeline
