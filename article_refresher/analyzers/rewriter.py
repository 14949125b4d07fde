"""Rewrite synthesizer: turns an original article plus references into new HTML."""

from __future__ import annotations

import logging
import re

import httpx

from ..config import RewriteConfig
from ..core.errors import SynthesisFailure
from ..core.types import ReferenceExcerpt
from ..llm.prompts import build_rewrite_prompt
from ..llm.providers.base import RewriteProvider
from ..utils.logging import log_event

_FENCE_RE = re.compile(r"```(?:html)?[ \t]*\n?", re.IGNORECASE)


class RewriteSynthesizer:
    """Produce a rewritten article body with a generative text model."""

    def __init__(
        self,
        cfg: RewriteConfig,
        provider: RewriteProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.logger = logger

    def rewrite(self, title: str, original_body: str, references: list[ReferenceExcerpt]) -> str:
        """Return the rewritten article as a bare HTML fragment.

        Raises:
            SynthesisFailure: If fewer than two references are given, the
                model call fails, or the model returns no usable text
        """
        if len(references) < 2:
            raise SynthesisFailure(
                f"Rewrite needs at least 2 reference excerpts, got {len(references)}"
            )

        prompt = build_rewrite_prompt(title, original_body, references, self.cfg)
        try:
            raw = self.provider.generate(
                prompt,
                temperature=self.cfg.temperature,
                max_output_tokens=self.cfg.max_output_tokens,
                timeout=self.cfg.timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as exc:
            # ValueError covers a 2xx body that is not JSON.
            raise SynthesisFailure(f"Model call failed: {type(exc).__name__}: {exc}") from exc

        content = strip_code_fences(raw or "")
        if not content:
            raise SynthesisFailure("Model returned no usable text")

        log_event(
            self.logger,
            f"Article rewritten ({len(content)} characters)",
            event="rewrite_done",
            chars=len(content),
            prompt_chars=len(prompt),
        )
        return content


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model may wrap its HTML in."""
    return _FENCE_RE.sub("", text).strip()
