"""Tests for the rewrite prompt, the synthesizer and the Gemini provider."""

from __future__ import annotations

import httpx
import pytest

from article_refresher.analyzers.rewriter import RewriteSynthesizer, strip_code_fences
from article_refresher.config import LoggingConfig, ProviderConfig, RewriteConfig
from article_refresher.core.errors import SynthesisError, SynthesisFailure
from article_refresher.core.types import ReferenceExcerpt
from article_refresher.llm.prompts import build_rewrite_prompt
from article_refresher.llm.providers.base import RewriteProvider
from article_refresher.llm.providers.gemini import GeminiProvider, _extract_text


class DummyProvider(RewriteProvider):
    def __init__(self, response: str = "<h2>Y</h2><p>Z</p>", error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt, temperature, max_output_tokens, timeout, logger=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def _refs(*texts: str) -> list[ReferenceExcerpt]:
    return [
        ReferenceExcerpt(source_url=f"https://ref{idx}.example.com/", text=text)
        for idx, text in enumerate(texts, start=1)
    ]


def test_build_rewrite_prompt_truncates_inputs():
    prompt = build_rewrite_prompt(
        "Chatbots",
        "O" * 4000,
        _refs("A" * 2500, "B" * 2500, "C" * 300),
        RewriteConfig(),
    )

    assert "O" * 3000 in prompt
    assert "O" * 3001 not in prompt
    assert "A" * 2000 in prompt
    assert "A" * 2001 not in prompt
    assert "B" * 2000 in prompt
    assert "B" * 2001 not in prompt
    assert "C" * 300 not in prompt


def test_build_rewrite_prompt_carries_title_and_length_instruction():
    prompt = build_rewrite_prompt("Chatbots", "Body", _refs("first", "second"), RewriteConfig())

    assert "Title: Chatbots" in prompt
    assert "Content: Body" in prompt
    assert "800-1200 words" in prompt
    assert "HTML" in prompt
    assert prompt.index("first") < prompt.index("second")


def test_build_rewrite_prompt_requires_two_references():
    with pytest.raises(ValueError):
        build_rewrite_prompt("Title", "Body", _refs("only one"), RewriteConfig())


def test_strip_code_fences():
    assert strip_code_fences("```html\n<h2>Y</h2>\n```") == "<h2>Y</h2>"
    assert strip_code_fences("```\n<p>Z</p>```") == "<p>Z</p>"
    assert strip_code_fences("  <p>plain</p>  ") == "<p>plain</p>"


def test_synthesizer_returns_model_html():
    provider = DummyProvider(response="```html\n<h2>Y</h2><p>Z</p>\n```")
    synthesizer = RewriteSynthesizer(RewriteConfig(), provider)

    body = synthesizer.rewrite("X", "Original body", _refs("a" * 300, "b" * 300))

    assert body == "<h2>Y</h2><p>Z</p>"
    assert len(provider.prompts) == 1
    assert "Title: X" in provider.prompts[0]


def test_synthesizer_rejects_single_reference_without_calling_model():
    provider = DummyProvider()
    synthesizer = RewriteSynthesizer(RewriteConfig(), provider)

    with pytest.raises(SynthesisFailure):
        synthesizer.rewrite("X", "Body", _refs("a" * 300))
    assert provider.prompts == []


def test_synthesizer_wraps_transport_errors():
    request = httpx.Request("POST", "https://generativelanguage.googleapis.com/")
    provider = DummyProvider(error=httpx.ConnectError("boom", request=request))
    synthesizer = RewriteSynthesizer(RewriteConfig(), provider)

    with pytest.raises(SynthesisFailure, match="ConnectError"):
        synthesizer.rewrite("X", "Body", _refs("a" * 300, "b" * 300))


@pytest.mark.parametrize("response", ["", "   ", "```html\n```"])
def test_synthesizer_rejects_empty_output(response):
    synthesizer = RewriteSynthesizer(RewriteConfig(), DummyProvider(response=response))

    with pytest.raises(SynthesisFailure, match="no usable text"):
        synthesizer.rewrite("X", "Body", _refs("a" * 300, "b" * 300))


def test_extract_text_prefers_non_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "internal reasoning", "thought": True},
                        {"text": "<h2>Final</h2>"},
                    ]
                }
            }
        ]
    }
    assert _extract_text(data) == "<h2>Final</h2>"


def test_extract_text_falls_back_to_thought_parts():
    data = {"candidates": [{"content": {"parts": [{"text": "only thought", "thought": True}]}}]}
    assert _extract_text(data) == "only thought"


def test_extract_text_handles_missing_candidates():
    assert _extract_text({}) == ""
    assert _extract_text({"candidates": []}) == ""


def test_gemini_provider_posts_generate_content_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = request.read().decode("utf-8")
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "<p>Rewritten</p>"}]}}]},
        )

    provider = GeminiProvider(
        ProviderConfig(api_key="test-key"),
        "test-key",
        LoggingConfig(),
        transport=httpx.MockTransport(handler),
    )

    text = provider.generate("Rewrite this", temperature=0.7, max_output_tokens=4096, timeout=5)

    assert text == "<p>Rewritten</p>"
    assert seen["path"] == "/v1beta/models/gemini-2.0-flash:generateContent"
    assert seen["key"] == "test-key"
    assert "Rewrite this" in seen["body"]
    assert '"temperature": 0.7' in seen["body"] or '"temperature":0.7' in seen["body"]


def test_gemini_provider_raises_on_http_error():
    provider = GeminiProvider(
        ProviderConfig(),
        "test-key",
        LoggingConfig(),
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="error")),
    )

    with pytest.raises(httpx.HTTPStatusError):
        provider.generate("Rewrite this", temperature=0.7, max_output_tokens=10, timeout=5)


def test_gemini_provider_requires_api_key():
    with pytest.raises(ValueError, match="Missing Gemini API key"):
        GeminiProvider(ProviderConfig(), None, LoggingConfig())


def test_synthesis_error_alias():
    assert SynthesisError is SynthesisFailure


def test_synthesizer_fails_when_model_answers_with_non_json_body():
    provider = GeminiProvider(
        ProviderConfig(),
        "test-key",
        LoggingConfig(),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>proxy error</html>")),
    )
    synthesizer = RewriteSynthesizer(RewriteConfig(), provider)

    with pytest.raises(SynthesisFailure, match="Model call failed"):
        synthesizer.rewrite("X", "Body", _refs("a" * 300, "b" * 300))
