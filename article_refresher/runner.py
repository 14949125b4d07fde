"""
Main pipeline orchestration for the Article Refresher.

This module coordinates one refresh run:
1. Select the most recent original article from the article API
2. Discover reference pages via a web search on its title
3. Extract text from each reference page, one at a time
4. Rewrite the original with a generative model, conditioned on the references
5. Publish the rewrite with links back to the original and the references

Every stage declares a minimum viable output. When it is not met the run
aborts with a typed PipelineError and nothing is published. Only per-URL
extraction failures are tolerated, as long as enough references remain.
"""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Callable

from rich.console import Console
from rich.markup import escape

from .analyzers.rewriter import RewriteSynthesizer
from .config import AppConfig
from .core.errors import (
    ArticleApiError,
    ExtractionShortfall,
    InsufficientReferences,
    PipelineError,
    SourceUnavailable,
)
from .core.types import ArticleRecord, ReferenceExcerpt, RunResult, Stage
from .discover.search import ReferenceDiscoverer
from .fetch.extractor import ContentExtractor
from .llm.providers import create_provider
from .llm.tracing import record_span_error, set_span_output, setup_langfuse, start_span
from .output.publisher import Publisher
from .registry.client import ArticleApiClient, select_original
from .utils.logging import log_event, setup_llm_logger, setup_logging

_RULE = "=" * 60


class RefreshPipeline:
    """Sequential, fail-fast refresh of a single original article."""

    def __init__(
        self,
        cfg: AppConfig,
        registry: ArticleApiClient,
        discoverer: ReferenceDiscoverer,
        extractor: ContentExtractor,
        synthesizer: RewriteSynthesizer,
        publisher: Publisher,
        logger: logging.Logger | None = None,
        console: Console | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if cfg.pipeline.request_delay_seconds <= 0:
            raise ValueError("pipeline.request_delay_seconds must be greater than zero")
        self.cfg = cfg
        self.registry = registry
        self.discoverer = discoverer
        self.extractor = extractor
        self.synthesizer = synthesizer
        self.publisher = publisher
        self.logger = logger or logging.getLogger("article_refresher")
        self.console = console or Console()
        self.sleep = sleep

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        logger: logging.Logger | None = None,
        console: Console | None = None,
        llm_logger: logging.Logger | None = None,
    ) -> "RefreshPipeline":
        """Wire the pipeline components from configuration.

        Raises:
            ValueError: If the provider is unknown or its API key is missing
        """
        registry = ArticleApiClient(cfg.api, logger)
        provider = create_provider(cfg.provider, cfg.logging, llm_logger)
        return cls(
            cfg,
            registry=registry,
            discoverer=ReferenceDiscoverer(cfg.search, cfg.fetch, logger),
            extractor=ContentExtractor(cfg.fetch, cfg.extract, logger),
            synthesizer=RewriteSynthesizer(cfg.rewrite, provider, logger),
            publisher=Publisher(registry, cfg.rewrite.title_suffix, logger),
            logger=logger,
            console=console,
        )

    def run_once(self) -> RunResult:
        """Execute the five stages in order and report the outcome.

        Never raises PipelineError: an aborted run is returned with
        status "aborted" and the failure in RunResult.error.
        """
        result = RunResult()
        with start_span("article_refresher.run", kind="chain") as run_span:
            log_event(self.logger, "Pipeline start", event="pipeline_start")
            try:
                original = self._select_original(result)
                urls = self._discover_references(result, original)
                references = self._extract_references(result, urls)
                body = self._synthesize(result, original, references)
                self._publish(result, original, body, references)
            except PipelineError as exc:
                result.status = "aborted"
                result.error = exc
                result.record(exc.stage, "failed", exc.message)
                record_span_error(run_span, exc)
                log_event(
                    self.logger,
                    f"Run aborted at {exc.stage.value}: {exc.message}",
                    level=logging.ERROR,
                    event="pipeline_aborted",
                    stage=exc.stage.value,
                    error_kind=exc.kind,
                    error=exc.message,
                )
                return result

            result.status = "done"
            set_span_output(
                run_span,
                {"original_id": result.original.id, "published_id": result.published.id},
            )
            log_event(
                self.logger,
                "Pipeline complete",
                event="pipeline_complete",
                original_id=result.original.id,
                published_id=result.published.id,
            )
        return result

    def _select_original(self, result: RunResult) -> ArticleRecord:
        self._step(1, "Fetching latest article from API...")
        with start_span("article_refresher.select_original", kind="chain"):
            try:
                articles = self.registry.list_articles()
            except ArticleApiError as exc:
                raise SourceUnavailable(f"Failed to fetch articles: {exc}") from exc
            original = select_original(articles)
        if original is None:
            raise SourceUnavailable("No original articles found")

        result.original = original
        result.record(Stage.SELECT_ORIGINAL, "success", f"article {original.id}")
        self.console.print(f"[green]✓[/green] Found article: \"{escape(original.title)}\"")
        self.console.print(f"  ID: {escape(str(original.id))}")
        return original

    def _discover_references(self, result: RunResult, original: ArticleRecord) -> list[str]:
        self._step(2, "Searching the web for similar articles...")
        with start_span(
            "article_refresher.discover_references",
            kind="chain",
            input_value=original.title,
        ) as span:
            urls = self.discoverer.discover(original.title)
            set_span_output(span, urls)

        result.reference_urls = list(urls)
        required = self.cfg.rewrite.min_references
        if len(urls) < required:
            raise InsufficientReferences(
                f"Not enough search results found ({len(urls)} of {required})"
            )

        result.record(Stage.DISCOVER_REFERENCES, "success", f"{len(urls)} urls")
        self.console.print(f"[green]✓[/green] Found {len(urls)} relevant articles")
        for idx, url in enumerate(urls, start=1):
            self.console.print(f"  {idx}. {escape(url)}")
        return urls

    def _extract_references(self, result: RunResult, urls: list[str]) -> list[ReferenceExcerpt]:
        self._step(3, "Scraping reference articles...")
        min_chars = self.cfg.rewrite.min_reference_chars
        references: list[ReferenceExcerpt] = []

        with start_span("article_refresher.extract", kind="chain", input_value=urls) as span:
            for idx, url in enumerate(urls):
                if idx > 0:
                    self.sleep(self.cfg.pipeline.request_delay_seconds)
                self.console.print(f"  Scraping: {escape(url)}")
                try:
                    text = self.extractor.extract(url)
                except Exception as exc:  # noqa: BLE001
                    log_event(
                        self.logger,
                        f"Extractor raised for {url}: {exc}",
                        level=logging.WARNING,
                        event="extract_error",
                        url=url,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                    text = ""
                if len(text) > min_chars:
                    references.append(ReferenceExcerpt(source_url=url, text=text))
                    self.console.print("  [green]✓[/green] Successfully scraped article")
                else:
                    self.console.print("  [red]✗[/red] Failed to scrape sufficient content")
            set_span_output(span, [ref.source_url for ref in references])

        required = self.cfg.rewrite.min_references
        if len(references) < required:
            raise ExtractionShortfall(
                f"Not enough reference articles scraped successfully ({len(references)} of {required})"
            )

        status = "success" if len(references) == len(urls) else "partial"
        result.record(Stage.EXTRACT, status, f"{len(references)} of {len(urls)} pages")
        return references

    def _synthesize(
        self,
        result: RunResult,
        original: ArticleRecord,
        references: list[ReferenceExcerpt],
    ) -> str:
        self._step(4, "Rewriting article with the language model...")
        with start_span("article_refresher.synthesize", kind="chain"):
            body = self.synthesizer.rewrite(original.title, original.body, references)
        result.record(Stage.SYNTHESIZE, "success", f"{len(body)} characters")
        self.console.print(f"[green]✓[/green] Article rewritten ({len(body)} characters)")
        return body

    def _publish(
        self,
        result: RunResult,
        original: ArticleRecord,
        body: str,
        references: list[ReferenceExcerpt],
    ) -> ArticleRecord:
        self._step(5, "Publishing updated article to API...")
        with start_span("article_refresher.publish", kind="chain"):
            published = self.publisher.publish(
                original.id,
                original.title,
                body,
                [ref.source_url for ref in references],
            )
        result.published = published
        result.record(Stage.PUBLISH, "success", f"article {published.id}")
        self.console.print(f"[green]✓[/green] Published with ID: {escape(str(published.id))}")
        return published

    def _step(self, number: int, message: str) -> None:
        self.console.print(f"\n[bold]Step {number}/5[/bold] {message}")


def render_run_summary(result: RunResult, console: Console) -> None:
    """Print the success summary or the single terminal error line."""
    console.print("\n" + _RULE)
    if result.succeeded and result.original and result.published:
        console.print("[bold green]SUCCESS![/bold green] Article update completed successfully")
        console.print(_RULE)
        console.print(f"\nOriginal Article ID: {escape(str(result.original.id))}")
        console.print(f"Updated Article ID: {escape(str(result.published.id))}")
        console.print(f"Title: {escape(result.published.title)}")
        return
    error = result.error
    kind = type(error).__name__ if error else "Error"
    console.print(f"[bold red]ERROR[/bold red] {kind}: {escape(str(error))}")
    console.print(_RULE)


def run_pipeline(
    cfg: AppConfig,
    console: Console | None = None,
    log_dir: Path | None = None,
    show_progress: bool = True,
) -> RunResult:
    """Set up logging and tracing, run one refresh and print the outcome.

    With show_progress off only the final summary or error line is printed.

    Returns:
        The RunResult of the run

    Raises:
        PipelineError: If the run aborted
    """
    console = console or Console()
    logger = setup_logging(cfg.logging, log_dir)
    llm_logger = setup_llm_logger(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)

    trace_console = console if show_progress else Console(quiet=True)
    trace_console.print(_RULE)
    trace_console.print("Article Update Script Started")
    trace_console.print(_RULE)

    pipeline = RefreshPipeline.from_config(cfg, logger=logger, console=trace_console, llm_logger=llm_logger)
    result = pipeline.run_once()
    render_run_summary(result, console)
    if result.error is not None:
        raise result.error
    return result
