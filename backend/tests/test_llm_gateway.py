import json

import httpx
import pytest

from shoot.core.errors import LLMError
from shoot.core.json_utils import ParsedJson, UnparseableJson
from shoot.services.llm_gateway import LLMGateway


def _gateway(handler, api_key: str = "sk-test") -> LLMGateway:
    return LLMGateway(
        api_key=api_key,
        base_url="https://llm.example.com/v1/",
        model="gpt-4",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _reply(content) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.mark.asyncio
async def test_complete_posts_chat_completion_request() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return _reply("hello")

    gateway = _gateway(handler)
    text = await gateway.complete(system="sys", user="hi", temperature=0.3, max_tokens=42)

    assert text == "hello"
    assert seen["url"] == "https://llm.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "gpt-4",
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}],
        "temperature": 0.3,
        "max_tokens": 42,
    }


@pytest.mark.asyncio
async def test_complete_without_key_never_sends() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    gateway = _gateway(handler, api_key="  ")
    assert gateway.configured is False
    with pytest.raises(LLMError):
        await gateway.complete(system="s", user="u")


@pytest.mark.asyncio
async def test_complete_non_2xx_raises_llm_error() -> None:
    gateway = _gateway(lambda request: httpx.Response(429, json={"error": "rate limited"}))
    with pytest.raises(LLMError) as exc_info:
        await gateway.complete(system="s", user="u")
    assert "429" in exc_info.value.message
    assert exc_info.value.details["status"] == 429


@pytest.mark.asyncio
async def test_complete_malformed_reply_raises_llm_error() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(LLMError):
        await gateway.complete(system="s", user="u")


@pytest.mark.asyncio
async def test_complete_network_error_raises_llm_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LLMError):
        await _gateway(handler).complete(system="s", user="u")


@pytest.mark.asyncio
async def test_complete_json_extracts_embedded_value() -> None:
    gateway = _gateway(lambda request: _reply('Here you go:\n```json\n{"files": {"a.ts": "x"}}\n```'))
    result = await gateway.complete_json(system="s", user="u")
    assert result == ParsedJson(value={"files": {"a.ts": "x"}})

    gateway = _gateway(lambda request: _reply("I cannot do that."))
    result = await gateway.complete_json(system="s", user="u", shape="array")
    assert isinstance(result, UnparseableJson)
    assert result.raw_text == "I cannot do that."
