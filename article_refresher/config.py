"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ApiConfig: Article API (source registry / publisher) settings
- SearchConfig: Reference discovery settings
- FetchConfig: HTTP page fetching settings
- ExtractConfig: Content-region extraction settings
- RewriteConfig: Prompt truncation and rewrite thresholds
- PipelineConfig: Run sequencing settings
- ProviderConfig: LLM provider settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class ApiConfig:
    """Configuration for the article API.

    Attributes:
        base_url: Base URL of the article API (falls back to ARTICLE_API_URL)
        timeout_seconds: Request timeout for list/read/create calls
        trust_env: Whether to respect system proxy settings
    """

    base_url: str | None = None
    timeout_seconds: float = 15.0
    trust_env: bool = True


@dataclass
class SearchConfig:
    """Configuration for reference discovery through a web search page.

    Attributes:
        endpoint: Search page URL the query is sent to
        query_param: Name of the query string parameter
        result_selector: CSS selector for anchors in the organic-result region
        denylist: Domains never returned as references (subdomains included)
        max_results: Maximum number of reference URLs to return
        timeout_seconds: Search request timeout
    """

    endpoint: str = "https://html.duckduckgo.com/html/"
    query_param: str = "q"
    result_selector: str = "#links .result a.result__a"
    denylist: list[str] = field(
        default_factory=lambda: [
            "google.com",
            "youtube.com",
            "facebook.com",
            "instagram.com",
            "twitter.com",
            "x.com",
            "tiktok.com",
            "linkedin.com",
            "pinterest.com",
        ]
    )
    max_results: int = 2
    timeout_seconds: float = 30.0


@dataclass
class FetchConfig:
    """Configuration for HTTP page fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        retries: Number of retry attempts for failed requests
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 15.0
    retries: int = 1
    trust_env: bool = True
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class ExtractConfig:
    """Configuration for content-region extraction.

    Attributes:
        strip_selectors: Elements removed before any text is read
        content_selectors: Article-like containers, in priority order
        min_region_chars: Region text shorter than this falls back to the page body
        max_chars: Cap on the extracted excerpt
    """

    strip_selectors: list[str] = field(
        default_factory=lambda: [
            "script",
            "style",
            "nav",
            "header",
            "footer",
            "iframe",
            ".ad",
            ".advertisement",
            ".cookie-notice",
        ]
    )
    content_selectors: list[str] = field(
        default_factory=lambda: [
            "article",
            ".article-content",
            ".post-content",
            ".entry-content",
            ".content-area",
            "main article",
            '[role="main"]',
            ".blog-post-content",
        ]
    )
    min_region_chars: int = 100
    max_chars: int = 5000


@dataclass
class RewriteConfig:
    """Configuration for the rewrite request.

    Attributes:
        original_max_chars: Maximum characters of the original body in the prompt
        reference_max_chars: Maximum characters of each reference in the prompt
        min_reference_chars: Excerpts must be longer than this to count
        min_references: Number of usable references a run requires
        title_suffix: Marker appended to the published title
        temperature: Sampling temperature for the model call
        max_output_tokens: Output token budget for the model call
        timeout_seconds: Model request timeout
    """

    original_max_chars: int = 3000
    reference_max_chars: int = 2000
    min_reference_chars: int = 200
    min_references: int = 2
    title_suffix: str = "(Updated Version)"
    temperature: float = 0.7
    max_output_tokens: int = 4096
    timeout_seconds: float = 60.0


@dataclass
class PipelineConfig:
    """Configuration for run sequencing.

    Attributes:
        request_delay_seconds: Pause between successive reference fetches
    """

    request_delay_seconds: float = 2.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        directory: Directory for log files
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    directory: str = "logs"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = False
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "none"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "none"
    max_text_chars: int = 20000


@dataclass
class ProviderConfig:
    """Configuration for pluggable LLM providers."""

    name: str = "gemini"
    model: str = "gemini-2.0-flash"
    api_key_env: str | None = None
    base_url: str = "https://generativelanguage.googleapis.com"
    api_key: str | None = None
    trust_env: bool = True


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    api: ApiConfig = field(default_factory=ApiConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


DEFAULT_CONFIG = AppConfig()
DEFAULT_API_URL = "http://localhost:8000/api"


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    Raises:
        ValueError: If a value is outside the range the pipeline supports
    """
    if not path or not os.path.exists(path):
        return _fromdict(_asdict(DEFAULT_CONFIG))

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    cfg = _merge_config(DEFAULT_CONFIG, raw)
    validate_config(cfg)
    return cfg


def validate_config(cfg: AppConfig) -> None:
    """Reject settings the refresh pipeline cannot honor."""
    if cfg.rewrite.min_references < 2:
        raise ValueError("rewrite.min_references must be at least 2")
    if cfg.search.max_results > 2:
        raise ValueError("search.max_results must be at most 2")
    if cfg.search.max_results < cfg.rewrite.min_references:
        raise ValueError("search.max_results must not be below rewrite.min_references")
    if cfg.pipeline.request_delay_seconds <= 0:
        raise ValueError("pipeline.request_delay_seconds must be greater than zero")


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "api": {
            "base_url": cfg.api.base_url,
            "timeout_seconds": cfg.api.timeout_seconds,
            "trust_env": cfg.api.trust_env,
        },
        "search": {
            "endpoint": cfg.search.endpoint,
            "query_param": cfg.search.query_param,
            "result_selector": cfg.search.result_selector,
            "denylist": list(cfg.search.denylist),
            "max_results": cfg.search.max_results,
            "timeout_seconds": cfg.search.timeout_seconds,
        },
        "fetch": {
            "timeout_seconds": cfg.fetch.timeout_seconds,
            "retries": cfg.fetch.retries,
            "trust_env": cfg.fetch.trust_env,
            "user_agent": cfg.fetch.user_agent,
        },
        "extract": {
            "strip_selectors": list(cfg.extract.strip_selectors),
            "content_selectors": list(cfg.extract.content_selectors),
            "min_region_chars": cfg.extract.min_region_chars,
            "max_chars": cfg.extract.max_chars,
        },
        "rewrite": {
            "original_max_chars": cfg.rewrite.original_max_chars,
            "reference_max_chars": cfg.rewrite.reference_max_chars,
            "min_reference_chars": cfg.rewrite.min_reference_chars,
            "min_references": cfg.rewrite.min_references,
            "title_suffix": cfg.rewrite.title_suffix,
            "temperature": cfg.rewrite.temperature,
            "max_output_tokens": cfg.rewrite.max_output_tokens,
            "timeout_seconds": cfg.rewrite.timeout_seconds,
        },
        "pipeline": {
            "request_delay_seconds": cfg.pipeline.request_delay_seconds,
        },
        "provider": {
            "name": cfg.provider.name,
            "model": cfg.provider.model,
            "api_key_env": cfg.provider.api_key_env,
            "base_url": cfg.provider.base_url,
            "api_key": cfg.provider.api_key,
            "trust_env": cfg.provider.trust_env,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "directory": cfg.logging.directory,
            "filename": cfg.logging.filename,
            "llm_log_enabled": cfg.logging.llm_log_enabled,
            "llm_log_detail": cfg.logging.llm_log_detail,
            "llm_log_redaction": cfg.logging.llm_log_redaction,
            "llm_log_file": cfg.logging.llm_log_file,
        },
        "langfuse": {
            "enabled": cfg.langfuse.enabled,
            "public_key": cfg.langfuse.public_key,
            "secret_key": cfg.langfuse.secret_key,
            "host": cfg.langfuse.host,
            "environment": cfg.langfuse.environment,
            "release": cfg.langfuse.release,
            "redaction": cfg.langfuse.redaction,
            "max_text_chars": cfg.langfuse.max_text_chars,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        api=ApiConfig(**data["api"]),
        search=SearchConfig(**data["search"]),
        fetch=FetchConfig(**data["fetch"]),
        extract=ExtractConfig(**data["extract"]),
        rewrite=RewriteConfig(**data["rewrite"]),
        pipeline=PipelineConfig(**data["pipeline"]),
        provider=ProviderConfig(**data["provider"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env)
    defaults = {
        "gemini": "GEMINI_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openai_compatible": "OPENAI_API_KEY",
        "openai-compatible": "OPENAI_API_KEY",
    }
    env_name = defaults.get(cfg.name.lower(), "OPENAI_API_KEY")
    return os.getenv(env_name)


def get_api_url(cfg: ApiConfig) -> str:
    """Get article API base URL from inline config or environment variable."""
    url = (
        cfg.base_url
        or os.getenv("ARTICLE_API_URL")
        or os.getenv("LARAVEL_API_URL")
        or DEFAULT_API_URL
    )
    return url.rstrip("/")
