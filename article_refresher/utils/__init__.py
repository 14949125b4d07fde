"""Shared utilities."""

from .logging import (
    log_event,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)

__all__ = [
    "log_event",
    "redact_text",
    "setup_llm_logger",
    "setup_logging",
    "truncate_text",
]
