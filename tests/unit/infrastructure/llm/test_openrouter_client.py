# tests/unit/infrastructure/llm/test_openrouter_client.py
import json
import httpx
import pytest

from domain.errors import MalformedUpstreamResponseError, UpstreamUnavailableError
from infrastructure.llm.openrouter_client import OpenRouterClient, strip_code_fences

def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}

def make_client(handler, api_key="sk-or-test"):
    return OpenRouterClient(api_key=api_key, transport=httpx.MockTransport(handler))

class TestOpenRouterClient:
    """Test the chat-completions transport"""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion('{"intents": []}'))

        client = make_client(handler)

        content = await client.complete("system", "Design a logo", response_format="json", temperature=0.3)

        assert content == '{"intents": []}'
        assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert seen["headers"]["authorization"] == "Bearer sk-or-test"
        assert seen["headers"]["x-title"] == "QUICKGIG Intent Detector"
        assert seen["body"]["model"] == "openai/gpt-4o-mini"
        assert seen["body"]["temperature"] == 0.3
        assert seen["body"]["response_format"] == {"type": "json_object"}
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "Design a logo"},
        ]

    @pytest.mark.asyncio
    async def test_plain_text_mode_omits_response_format(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("hello"))

        await make_client(handler).complete("system", "hi", response_format=None)

        assert "response_format" not in seen["body"]

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        def handler(request: httpx.Request):
            raise AssertionError("no request expected")

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler, api_key=None).complete("system", "hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 429, 500, 503])
    async def test_error_status(self, status):
        def handler(request: httpx.Request):
            return httpx.Response(status, json={"error": {"message": "nope"}})

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler).complete("system", "hi")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            await make_client(handler).complete("system", "hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"choices": []}, {"unexpected": True}, completion(None)])
    async def test_unexpected_body(self, body):
        def handler(request: httpx.Request):
            return httpx.Response(200, json=body)

        with pytest.raises(MalformedUpstreamResponseError):
            await make_client(handler).complete("system", "hi")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(MalformedUpstreamResponseError):
            await make_client(handler).complete("system", "hi")

    @pytest.mark.asyncio
    async def test_code_fences_are_stripped(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, json=completion('```json\n{"intents": []}\n```'))

        assert await make_client(handler).complete("system", "hi") == '{"intents": []}'

def test_strip_code_fences_leaves_plain_content():
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'
