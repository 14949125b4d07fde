"""LLM providers, prompts and observability."""

from .prompts import build_rewrite_prompt
from .providers.base import RewriteProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "RewriteProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "build_rewrite_prompt",
    "create_provider",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
