"""OpenAI-compatible chat completions provider."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span
from .base import RewriteProvider


class OpenAICompatibleProvider(RewriteProvider):
    """Provider for any endpoint speaking the /chat/completions protocol."""

    name = "openai_compatible"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("Missing OpenAI-compatible API key")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self.transport = transport

    def generate(
        self,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
        timeout: float,
        logger: logging.Logger | None = None,
    ) -> str:
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_output_tokens,
        }
        with start_span(
            "openai.generate",
            kind="llm",
            input_value=prompt,
            attributes={"llm.model": self.cfg.model, "llm.provider": self.name},
        ) as span:
            try:
                data = self._post(payload, timeout=timeout)
            except (httpx.HTTPError, ValueError) as exc:
                record_span_error(span, exc)
                self._log(logger, "provider_error", str(exc))
                raise
            content = _extract_message(data)
            set_span_output(span, content)
            self._log(logger, "ok" if content else "empty", content)
            return content

    def _post(self, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        with httpx.Client(timeout=timeout, trust_env=self.cfg.trust_env, transport=self.transport) as client:
            resp = client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()

    def _log(self, logger: logging.Logger | None, status: str, content: str) -> None:
        active_logger = logger or self.llm_logger
        if active_logger is None:
            return
        log_event(
            active_logger,
            "LLM response",
            event="llm_rewrite_response",
            status=status,
            provider=self.name,
            model=self.cfg.model,
            raw_response=truncate_text(redact_text(content, self.log_cfg.llm_log_redaction)),
        )


def _extract_message(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except Exception:  # noqa: BLE001
        return ""
    return content if isinstance(content, str) else ""
