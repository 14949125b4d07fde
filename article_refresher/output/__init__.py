"""Publishing of rewritten articles."""

from .publisher import Publisher, render_references

__all__ = ["Publisher", "render_references"]
