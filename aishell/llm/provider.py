"""Remote reasoning backend interface and its transport errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from aishell.schemas import ChatResponse, Message, ToolDefinition


class TransportError(Exception):
    """Base error for a failed call to the remote backend."""

    pass


class BackendUnreachableError(TransportError):
    """Raised when the backend cannot be reached (connect error, timeout)."""

    pass


class BackendStatusError(TransportError):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, backend: str, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{backend} API error ({status_code}): {body}")


class InvalidResponseError(TransportError):
    """Raised when the response body is absent or cannot be parsed."""

    pass


class ProviderConfigError(Exception):
    """Raised when a provider is missing required configuration."""

    pass


class LLMProvider(ABC):
    """Chat-completion capability used by the agent loop.

    Implementations send the history exactly as given and must not mutate or
    reorder it.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier requests are sent to."""
        raise NotImplementedError

    @abstractmethod
    def chat(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ChatResponse:
        """Send a chat completion request.

        Args:
            messages: Full conversation history, in order
            tools: Optional tool catalog to advertise

        Returns:
            ChatResponse with content, tool calls and finish reason

        Raises:
            TransportError: If the request fails
        """
        raise NotImplementedError
