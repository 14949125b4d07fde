"""Reference discovery via web search."""

from .search import ReferenceDiscoverer, filter_reference_urls, parse_result_links

__all__ = ["ReferenceDiscoverer", "filter_reference_urls", "parse_result_links"]
