# Transport to an OpenAI-compatible chat-completions endpoint.
# Author: AI Dock contributors
# Date: 2025-07-05
# Version: 0.2.0

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError
from openai import AsyncOpenAI, APIConnectionError, APIStatusError, APITimeoutError

from aidock.core.config import AppConfig, Settings
from aidock.models.common import ChatCompletionEnvelope, Conversation, ErrorInfo
from aidock.utils.logger import console

COMPLETIONS_SUFFIX = "/chat/completions"


class TransportError(Exception):
    """The request never produced a usable response (network failure, timeout, ...)."""


@dataclass
class TransportOptions:
    endpoint: str
    api_key: str
    model: str
    max_tokens: int = 4096
    timeout: float = 120.0

    @classmethod
    def from_config(cls, config: AppConfig, settings: Settings) -> "TransportOptions":
        return cls(
            endpoint=config.endpoint,
            api_key=config.api_key,
            model=config.model,
            max_tokens=settings.MAX_TOKENS,
            timeout=settings.REQUEST_TIMEOUT,
        )


class ChatTransport(Protocol):
    async def send(self, conversation: Conversation, tools: List[Dict[str, Any]],
                   options: TransportOptions) -> ChatCompletionEnvelope: ...


def base_url_from_endpoint(endpoint: str) -> str:
    """
    The settings hold the full completions URL; the client wants its base.
    'https://api.openai.com/v1/chat/completions' -> 'https://api.openai.com/v1'
    """
    url = endpoint.rstrip("/")
    if url.endswith(COMPLETIONS_SUFFIX):
        url = url[: -len(COMPLETIONS_SUFFIX)]
    return url


def _error_from_body(body: Any, fallback: str) -> ErrorInfo:
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return ErrorInfo.model_validate(inner)
        if isinstance(inner, str):
            return ErrorInfo(message=inner)
    return ErrorInfo(message=fallback)


class OpenAITransport:
    """
    Sends the whole conversation plus the tool definitions in one request.

    There is no retry: the client is built with max_retries=0 and a failure
    surfaces once. Error envelopes from the provider come back as
    envelope.error; failures with no usable response raise TransportError.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client = http_client
        self._client: Optional[AsyncOpenAI] = None
        self._client_key: Optional[tuple] = None

    async def _get_client(self, options: TransportOptions) -> AsyncOpenAI:
        # Rebuilt only when the user changes endpoint, key or timeout.
        key = (base_url_from_endpoint(options.endpoint), options.api_key, options.timeout)
        if self._client is None or key != self._client_key:
            if self._client is not None and self._http_client is None:
                await self._client.close()
            self._client = AsyncOpenAI(
                api_key=options.api_key,
                base_url=key[0],
                timeout=options.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
            self._client_key = key
        return self._client

    async def send(self, conversation: Conversation, tools: List[Dict[str, Any]],
                   options: TransportOptions) -> ChatCompletionEnvelope:
        client = await self._get_client(options)
        request_params: Dict[str, Any] = {
            "model": options.model,
            "messages": conversation.to_wire(),
            "max_tokens": options.max_tokens,
        }
        if tools:
            request_params["tools"] = tools

        console.info(f"Sending {len(conversation)} messages to '{options.model}' at {options.endpoint}")
        try:
            raw = await client.chat.completions.with_raw_response.create(**request_params)
            payload = raw.http_response.json()
        except APIStatusError as e:
            error = _error_from_body(e.body, f"HTTP {e.status_code}: {e.message}")
            console.error(f"An API error occurred: {error.message}")
            return ChatCompletionEnvelope(error=error)
        except (APIConnectionError, APITimeoutError) as e:
            console.error(f"Request to {options.endpoint} failed: {e}")
            raise TransportError(str(e)) from e
        except ValueError as e:
            console.error(f"Response from {options.endpoint} is not valid JSON: {e}")
            raise TransportError(f"Invalid response body: {e}") from e

        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected response body of type {type(payload).__name__}.")
        if payload.get("error"):
            error = _error_from_body(payload, "Unknown API Error")
            console.error(f"An API error occurred: {error.message}")
            return ChatCompletionEnvelope(error=error)
        try:
            return ChatCompletionEnvelope.model_validate(payload)
        except ValidationError as e:
            raise TransportError(f"Malformed response envelope: {e}") from e
