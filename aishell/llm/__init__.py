"""Remote reasoning backends."""

from aishell.config import DEFAULT_REQUEST_TIMEOUT
from aishell.llm.openai import OllamaProvider, OpenAIProvider
from aishell.llm.provider import (
    BackendStatusError,
    BackendUnreachableError,
    InvalidResponseError,
    LLMProvider,
    ProviderConfigError,
    TransportError,
)

PROVIDERS: dict[str, type[OpenAIProvider]] = {
    "openai": OpenAIProvider,
    "ollama": OllamaProvider,
}


def create_provider(
    provider: str,
    model: str | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> LLMProvider:
    """Create an LLM provider by name.

    Raises:
        ValueError: If the provider is not supported
        ProviderConfigError: If the provider's environment is incomplete
    """
    provider_cls = PROVIDERS.get(provider.lower())
    if provider_cls is None:
        raise ValueError(f"Unsupported provider: {provider}")
    return provider_cls.from_env(model=model, timeout=timeout)


__all__ = [
    "BackendStatusError",
    "BackendUnreachableError",
    "InvalidResponseError",
    "LLMProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "PROVIDERS",
    "ProviderConfigError",
    "TransportError",
    "create_provider",
]
