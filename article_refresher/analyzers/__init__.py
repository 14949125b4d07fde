"""Content synthesis steps."""

from .rewriter import RewriteSynthesizer, strip_code_fences

__all__ = ["RewriteSynthesizer", "strip_code_fences"]
