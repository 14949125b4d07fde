"""Abstract interface for text-generation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging


class RewriteProvider(ABC):
    """Provider interface for single-prompt text generation."""

    name: str = "base"

    @abstractmethod
    def generate(
        self,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
        timeout: float,
        logger: logging.Logger | None = None,
    ) -> str:
        """Return the model's text completion for prompt.

        Raises:
            httpx.HTTPError: If the request fails or the endpoint rejects it
            ValueError: If the endpoint answers with a body that is not JSON
        """
        raise NotImplementedError
