"""Tests for reference discovery through the search results page."""

from __future__ import annotations

import httpx
import pytest

from article_refresher.config import FetchConfig, SearchConfig
from article_refresher.core.errors import InsufficientReferences
from article_refresher.discover.search import (
    ReferenceDiscoverer,
    filter_reference_urls,
    is_denied_host,
    parse_result_links,
    unwrap_redirect,
)


RESULTS_PAGE = """
<html><body>
  <div id="links">
    <div class="result">
      <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fblog.example.com%2Fpost-1&amp;rut=abc">One</a>
    </div>
    <div class="result">
      <a class="result__a" href="https://duckduckgo.com/y.js?ad_provider=x">Sponsored</a>
    </div>
    <div class="result">
      <a class="result__a" href="https://www.youtube.com/watch?v=123">Video</a>
    </div>
    <div class="result">
      <a class="result__a" href="https://blog.example.com/post-1#comments">Same page</a>
    </div>
    <div class="result">
      <a class="result__a" href="https://news.example.org/story">Two</a>
    </div>
    <div class="result">
      <a class="result__a" href="https://third.example.net/article">Three</a>
    </div>
  </div>
  <a href="https://outside.example.com/not-a-result">Footer link</a>
</body></html>
"""


def _discoverer(handler) -> ReferenceDiscoverer:
    return ReferenceDiscoverer(
        SearchConfig(),
        FetchConfig(retries=0),
        transport=httpx.MockTransport(handler),
    )


def test_discover_returns_two_unique_allowed_urls_in_order():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["query"] = request.url.params.get("q")
        seen["host"] = request.url.host
        return httpx.Response(200, text=RESULTS_PAGE)

    urls = _discoverer(handler).discover("Chatbots for customer support")

    assert urls == ["https://blog.example.com/post-1", "https://news.example.org/story"]
    assert seen["query"] == "Chatbots for customer support"
    assert seen["host"] == "html.duckduckgo.com"


def test_discover_returns_fewer_when_results_are_scarce():
    page = """
    <div id="links"><div class="result">
      <a class="result__a" href="https://only.example.com/a">Only</a>
    </div></div>
    """

    urls = _discoverer(lambda request: httpx.Response(200, text=page)).discover("rare topic")

    assert urls == ["https://only.example.com/a"]


def test_discover_raises_when_search_request_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(InsufficientReferences):
        _discoverer(handler).discover("anything")


def test_parse_result_links_only_reads_result_region():
    links = parse_result_links(RESULTS_PAGE, "https://html.duckduckgo.com/html/", "#links .result a.result__a")

    assert "https://outside.example.com/not-a-result" not in links
    assert links[0] == "https://blog.example.com/post-1"
    assert len(links) == 6


def test_unwrap_redirect_handles_known_wrappers():
    assert unwrap_redirect("https://duckduckgo.com/l/?uddg=https%3A%2F%2Fa.example.com%2Fx") == "https://a.example.com/x"
    assert unwrap_redirect("https://www.google.com/url?q=https://b.example.com/&sa=U") == "https://b.example.com/"
    assert unwrap_redirect("https://c.example.com/l/page") == "https://c.example.com/l/page"


def test_filter_reference_urls_applies_scheme_denylist_and_dedup():
    candidates = [
        "ftp://files.example.com/doc",
        "/relative/path",
        "https://m.facebook.com/post/1",
        "https://www.google.com/search?q=x",
        "https://a.example.com/one",
        "https://a.example.com/one",
        "http://b.example.com/two",
        "https://c.example.com/three",
    ]

    urls = filter_reference_urls(candidates, ["facebook.com", "google.com"], limit=5)

    assert urls == [
        "https://a.example.com/one",
        "http://b.example.com/two",
        "https://c.example.com/three",
    ]
    assert len(urls) == len(set(urls))


def test_filter_reference_urls_truncates_to_limit():
    candidates = [f"https://site{i}.example.com/" for i in range(5)]

    assert filter_reference_urls(candidates, [], limit=2) == candidates[:2]


def test_is_denied_host_matches_subdomains_only():
    assert is_denied_host("www.youtube.com", ["youtube.com"])
    assert is_denied_host("YOUTUBE.COM", ["youtube.com"])
    assert not is_denied_host("notyoutube.com", ["youtube.com"])
