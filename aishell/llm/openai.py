"""OpenAI-compatible chat completion backends (OpenAI, Ollama)."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from aishell.config import DEFAULT_REQUEST_TIMEOUT
from aishell.llm.provider import (
    BackendStatusError,
    BackendUnreachableError,
    InvalidResponseError,
    LLMProvider,
    ProviderConfigError,
)
from aishell.schemas import ChatResponse, Message, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4"

OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434/v1"
OLLAMA_DEFAULT_MODEL = "mistral:7b-instruct-q4_0"


def _message_to_wire(message: Message) -> dict[str, Any]:
    """Convert a Message into an OpenAI chat message dictionary."""
    wire: dict[str, Any] = {"role": message.role.value, "content": message.content}
    if message.tool_calls:
        wire["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments},
            }
            for call in message.tool_calls
        ]
    if message.tool_call_id is not None:
        wire["tool_call_id"] = message.tool_call_id
    return wire


def _tool_to_wire(tool: ToolDefinition) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


def _parse_tool_calls(raw_calls: Any) -> tuple[ToolCall, ...] | None:
    """Extract function tool calls, ignoring other call types.

    Raises:
        InvalidResponseError: If a function call lacks an id or a name
    """
    if not raw_calls:
        return None
    if not isinstance(raw_calls, list):
        raise InvalidResponseError("tool_calls is not a list")

    calls = []
    for raw in raw_calls:
        if not isinstance(raw, dict):
            raise InvalidResponseError("tool call is not an object")
        if raw.get("type", "function") != "function":
            continue

        call_id = raw.get("id")
        if not isinstance(call_id, str) or not call_id:
            raise InvalidResponseError("tool call without an id")
        function = raw.get("function") or {}
        if not isinstance(function, dict) or not isinstance(function.get("name"), str):
            raise InvalidResponseError(f"tool call {call_id} without a function name")

        try:
            calls.append(
                ToolCall(
                    id=call_id,
                    name=function["name"],
                    arguments=function.get("arguments") or "",
                )
            )
        except ValidationError as e:
            raise InvalidResponseError(f"invalid tool call {call_id}: {e}") from e
    return tuple(calls) or None


class OpenAIProvider(LLMProvider):
    """Chat completions over the OpenAI HTTP API."""

    backend_name = "OpenAI"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = OPENAI_DEFAULT_BASE_URL,
        model: str = OPENAI_DEFAULT_MODEL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: Bearer token; omitted from requests when None
            base_url: API root, e.g. https://api.openai.com/v1
            model: Model identifier
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_env(
        cls,
        model: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        environ: Mapping[str, str] | None = None,
    ) -> OpenAIProvider:
        """Create a provider from OPENAI_* environment variables.

        Raises:
            ProviderConfigError: If OPENAI_API_KEY is not set
        """
        env = os.environ if environ is None else environ

        api_key = env.get("OPENAI_API_KEY")
        if not api_key:
            raise ProviderConfigError("OPENAI_API_KEY environment variable not set")

        return cls(
            api_key=api_key,
            base_url=env.get("OPENAI_BASE_URL") or OPENAI_DEFAULT_BASE_URL,
            model=model or env.get("OPENAI_MODEL") or OPENAI_DEFAULT_MODEL,
            timeout=timeout,
        )

    @property
    def model_name(self) -> str:
        return self.model

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_request(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> dict[str, Any]:
        """Build the JSON body for /chat/completions."""
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [_message_to_wire(m) for m in messages],
        }
        if tools is not None:
            body["tools"] = [_tool_to_wire(t) for t in tools]
            body["tool_choice"] = "auto"
        return body

    def chat(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ChatResponse:
        url = f"{self.base_url}/chat/completions"
        body = self.build_request(messages, tools)

        logger.debug(f"POST {url} model={self.model} messages={len(body['messages'])}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, headers=self._headers(), json=body)
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach {self.backend_name} API: {e}")
            raise BackendUnreachableError(
                f"Failed to send request to {self.backend_name} API: {e}"
            ) from e

        if not response.is_success:
            logger.error(f"{self.backend_name} API returned {response.status_code}")
            raise BackendStatusError(self.backend_name, response.status_code, response.text)

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> ChatResponse:
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise InvalidResponseError(
                f"Failed to parse {self.backend_name} API response: {e}"
            ) from e

        try:
            choices = data["choices"]
        except (KeyError, TypeError) as e:
            raise InvalidResponseError(
                f"Failed to parse {self.backend_name} API response: missing choices"
            ) from e
        if not choices:
            raise InvalidResponseError("No choices in response")

        try:
            choice = choices[0]
            message = choice.get("message") or {}
            tool_calls = _parse_tool_calls(message.get("tool_calls"))
        except (AttributeError, KeyError, TypeError, InvalidResponseError) as e:
            raise InvalidResponseError(
                f"Failed to parse {self.backend_name} API response: {e}"
            ) from e

        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise InvalidResponseError(
                f"Failed to parse {self.backend_name} API response: content is not text"
            )

        try:
            result = ChatResponse(
                content=content or "",
                tool_calls=tool_calls,
                finish_reason=choice.get("finish_reason") or "",
            )
        except ValidationError as e:
            raise InvalidResponseError(
                f"Failed to parse {self.backend_name} API response: {e}"
            ) from e

        logger.debug(
            f"Response: finish_reason={result.finish_reason}, "
            f"tool_calls={len(result.tool_calls or ())}"
        )
        return result


class OllamaProvider(OpenAIProvider):
    """Chat completions against Ollama's OpenAI-compatible endpoint."""

    backend_name = "Ollama"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OLLAMA_DEFAULT_BASE_URL,
        model: str = OLLAMA_DEFAULT_MODEL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            model=model,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_env(
        cls,
        model: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        environ: Mapping[str, str] | None = None,
    ) -> OllamaProvider:
        """Create a provider from OLLAMA_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("OLLAMA_BASE_URL") or OLLAMA_DEFAULT_BASE_URL,
            model=model or env.get("OLLAMA_MODEL") or OLLAMA_DEFAULT_MODEL,
            timeout=timeout,
        )
