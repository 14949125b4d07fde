"""
Command-line interface for the Article Refresher.

Uses Typer to provide a single command that runs one refresh. No flag is
required; the optional ones override configuration values. Supports
loading .env files for API key configuration.
"""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .config import load_config
from .core.errors import PipelineError
from .llm.tracing import flush
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="YAML config file (optional)."),
    api_url: str | None = typer.Option(
        None,
        "--api-url",
        envvar=["ARTICLE_API_URL", "LARAVEL_API_URL"],
        help="Article API base URL (or set ARTICLE_API_URL / LARAVEL_API_URL / .env).",
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        help="Override provider API key (or set GEMINI_API_KEY / .env).",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Write log files to this directory."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show the staged progress trace."),
):
    """Refresh the most recent original article.

    Selects the newest original article, finds two reference pages with a
    web search, scrapes them, rewrites the article with the configured
    model and publishes the result as an updated version.

    Args:
        config: Optional path to YAML config file
        api_url: Override article API base URL
        api_key: Override LLM provider API key
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (enables file logging)
        progress: Whether to print the staged progress trace
    """
    # Load environment variables from .env if available
    load_dotenv()

    try:
        cfg = load_config(str(config) if config else None)

        # Override with CLI options
        if api_url:
            cfg.api.base_url = api_url
        if api_key:
            cfg.provider.api_key = api_key
        if log_level:
            cfg.logging.level = log_level
        if log_dir is not None:
            cfg.logging.file = True
        elif cfg.logging.file:
            log_dir = Path(cfg.logging.directory)

        run_pipeline(cfg, console=console, log_dir=log_dir, show_progress=progress)
    except PipelineError:
        raise typer.Exit(code=1)
    except ValueError as exc:
        console.print(f"[bold red]ERROR[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    finally:
        # Flush Langfuse traces before exit
        flush()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
