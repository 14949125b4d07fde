"""Prompt loading and rendering helpers for LLM providers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..config import RewriteConfig
from ..core.types import ReferenceExcerpt


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def build_rewrite_prompt(
    title: str,
    original_body: str,
    references: list[ReferenceExcerpt],
    cfg: RewriteConfig,
) -> str:
    """Render the rewrite instruction from the first two references.

    The original body is cut to cfg.original_max_chars and each reference
    to cfg.reference_max_chars, whatever the input sizes.
    """
    if len(references) < 2:
        raise ValueError("The rewrite prompt needs at least two references")

    return _render_template(
        "rewrite",
        title=title,
        original_content=original_body[: cfg.original_max_chars],
        reference_1=references[0].text[: cfg.reference_max_chars],
        reference_2=references[1].text[: cfg.reference_max_chars],
    )
