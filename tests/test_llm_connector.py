"""Tests for the chat-completions transport, against a mocked HTTP layer."""

import json
from dataclasses import replace

import httpx
import pytest

from aidock.models.common import Conversation, Message
from aidock.services.llm_connector import OpenAITransport, TransportError, base_url_from_endpoint


def transport_with(handler):
    return OpenAITransport(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def conversation():
    convo = Conversation()
    convo.append(Message.user("List files in res://scripts/"))
    return convo


class TestBaseUrl:
    @pytest.mark.parametrize("endpoint, expected", [
        ("https://api.openai.com/v1/chat/completions", "https://api.openai.com/v1"),
        ("http://localhost:11434/v1/chat/completions/", "http://localhost:11434/v1"),
        ("https://openrouter.ai/api/v1", "https://openrouter.ai/api/v1"),
    ])
    def test_strips_completions_suffix(self, endpoint, expected):
        assert base_url_from_endpoint(endpoint) == expected


class TestOpenAITransport:
    """Tests for request shape and response classification."""

    @pytest.mark.asyncio
    async def test_request_body_and_headers(self, conversation, registry, transport_options):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "choices": [{"message": {"role": "assistant", "content": "hi"}, "finish_reason": "stop"}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
            })

        envelope = await transport_with(handler).send(conversation, registry.list(), transport_options)

        assert seen["url"] == "http://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["max_tokens"] == 4096
        assert seen["body"]["messages"] == [{"role": "user", "content": "List files in res://scripts/"}]
        assert len(seen["body"]["tools"]) == 10
        assert envelope.choices[0].message.content == "hi"
        assert envelope.usage.total_tokens == 15

    @pytest.mark.asyncio
    async def test_tools_omitted_when_empty(self, conversation, transport_options):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": []})

        await transport_with(handler).send(conversation, [], transport_options)
        assert "tools" not in seen["body"]

    @pytest.mark.asyncio
    async def test_error_body_with_success_status(self, conversation, transport_options):
        def handler(request):
            return httpx.Response(200, json={"error": {"message": "invalid_api_key"}})

        envelope = await transport_with(handler).send(conversation, [], transport_options)
        assert envelope.error.message == "invalid_api_key"
        assert envelope.choices == []

    @pytest.mark.asyncio
    async def test_error_status_becomes_envelope(self, conversation, transport_options):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}})

        envelope = await transport_with(handler).send(conversation, [], transport_options)
        assert envelope.error.message == "Incorrect API key provided"
        assert envelope.error.code == "invalid_api_key"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, conversation, transport_options):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, text="upstream unavailable")

        envelope = await transport_with(handler).send(conversation, [], transport_options)
        assert envelope.error is not None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connection_failure_raises(self, conversation, transport_options):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            await transport_with(handler).send(conversation, [], transport_options)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, conversation, transport_options):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "application/json"})

        with pytest.raises(TransportError):
            await transport_with(handler).send(conversation, [], transport_options)

    @pytest.mark.asyncio
    async def test_reasoning_fields_survive(self, conversation, transport_options):
        def handler(request):
            return httpx.Response(200, json={"choices": [{
                "message": {"role": "assistant", "content": "ok", "reasoning_content": "thinking..."},
            }]})

        envelope = await transport_with(handler).send(conversation, [], transport_options)
        assert envelope.choices[0].message.reasoning_text == "thinking..."

    @pytest.mark.asyncio
    async def test_null_tool_arguments_default_to_empty_object(self, conversation, transport_options):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [{"id": "c1", "type": "function",
                                "function": {"name": "get_selected_nodes", "arguments": None}}],
            }}]})

        envelope = await transport_with(handler).send(conversation, [], transport_options)
        assert envelope.choices[0].message.tool_calls[0].arguments_json == "{}"


class TestClientLifecycle:
    """The SDK client is reused until the connection settings change."""

    @pytest.mark.asyncio
    async def test_client_reused_for_same_settings(self, transport_options):
        transport = OpenAITransport()
        first = await transport._get_client(transport_options)
        assert await transport._get_client(transport_options) is first
        await first.close()

    @pytest.mark.asyncio
    async def test_replaced_client_is_closed(self, transport_options):
        transport = OpenAITransport()
        first = await transport._get_client(transport_options)
        second = await transport._get_client(replace(transport_options, api_key="sk-rotated"))

        assert second is not first
        assert first.is_closed()
        assert not second.is_closed()
        await second.close()

    @pytest.mark.asyncio
    async def test_injected_http_client_is_left_open(self, transport_options):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        transport = OpenAITransport(http_client=http_client)
        await transport._get_client(transport_options)
        await transport._get_client(replace(transport_options, model="other", timeout=5.0))
        assert not http_client.is_closed
        await http_client.aclose()
