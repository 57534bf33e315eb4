"""
Shoot - LLM Gateway
===================
Single-shot calls to an OpenAI-compatible chat-completions endpoint.
No retries: callers turn any LLMError into their own fallback result.
"""

from __future__ import annotations

import time

import httpx

from shoot.core.config import get_settings
from shoot.core.errors import LLMError
from shoot.core.json_utils import ExtractResult, JsonShape, UnparseableJson, extract_json
from shoot.core.logging import get_logger

logger = get_logger("llm_gateway")
settings = get_settings()


class LLMGateway:
    """Issues one completion request per call and hands back raw or JSON-extracted text."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config=None) -> "LLMGateway":
        config = config or settings
        return cls(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            model=config.openai_model,
            timeout=config.llm_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key.strip())

    async def complete(
        self,
        *,
        system: str,
        user: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> str:
        if not self.configured:
            raise LLMError("OpenAI API key required")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("llm_request_failed", model=self.model, error=str(exc), error_type=type(exc).__name__)
            raise LLMError(f"LLM request failed: {exc}") from exc

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        if response.status_code >= 300:
            logger.error("llm_http_error", model=self.model, status=response.status_code, elapsed_ms=elapsed_ms)
            raise LLMError(
                f"LLM API error: {response.status_code} {response.reason_phrase}",
                details={"status": response.status_code, "body": response.text[:500]},
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("llm_reply_malformed", model=self.model, error=str(exc))
            raise LLMError("LLM reply did not contain a message") from exc
        if not isinstance(content, str):
            raise LLMError("LLM reply did not contain a message")

        logger.info("llm_completion_done", model=self.model, elapsed_ms=elapsed_ms, chars=len(content))
        return content

    async def complete_json(
        self,
        *,
        system: str,
        user: str,
        shape: JsonShape = "object",
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> ExtractResult:
        """Complete and greedily extract one JSON value. Transport errors still raise LLMError."""
        text = await self.complete(system=system, user=user, temperature=temperature, max_tokens=max_tokens)
        result = extract_json(text, shape)
        if isinstance(result, UnparseableJson):
            logger.warning("llm_json_unparseable", shape=shape, reason=result.reason, chars=len(text))
        return result


llm_gateway = LLMGateway.from_settings()
