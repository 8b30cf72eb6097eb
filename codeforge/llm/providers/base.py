"""Base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

# Provider registry - providers register themselves here
_PROVIDER_REGISTRY: dict[str, type["LLMProvider"]] = {}


def register_provider(name: str):
    """
    Decorator to register an LLM provider class.

    Usage:
        @register_provider("openai")
        class OpenAIProvider(LLMProvider):
            ...

    Args:
        name: Provider name (e.g., "openai", "openrouter")

    Returns:
        Decorator function
    """

    def decorator(cls: type["LLMProvider"]) -> type["LLMProvider"]:
        _PROVIDER_REGISTRY[name.lower()] = cls
        return cls

    return decorator


class LLMResponse(BaseModel):
    """Response from an LLM call."""

    content: str | None = None
    usage: dict[str, Any] | None = Field(default_factory=dict)
    tool_calls: list[dict[str, Any]] | None = Field(default_factory=list)
    model: str | None = None
    stop_reason: str | None = None


class LLMProvider(ABC):
    """Base class for LLM providers."""

    @abstractmethod
    async def generate(
        self,
        messages: list[dict[str, Any]],
        model: str,
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        **kwargs,
    ) -> LLMResponse:
        """
        Make a chat completion request to the LLM.

        Args:
            messages: Conversation in normalized form (role-based messages plus
                ``function_call`` / ``function_call_output`` items)
            model: Model identifier
            tools: Optional list of tool schemas for function calling
            temperature: Optional temperature parameter
            max_tokens: Optional max tokens parameter
            system_prompt: Optional system prompt, sent ahead of the messages
            **kwargs: Provider-specific additional parameters

        Returns:
            LLMResponse with content, usage, tool_calls, model, and stop_reason
        """
        pass

    def convert_history_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Convert normalized history messages to provider format.

        History stores tool interactions in a provider-agnostic format:
        - ``{type: "function_call", name, call_id, arguments}``
        - ``{type: "function_call_output", call_id, output}``

        The default implementation is a no-op (returns as-is).
        Providers that need conversion should override this.
        """
        return messages


def get_provider(provider_name: str, **kwargs) -> LLMProvider:
    """
    Get LLM provider instance by name from the registry.

    Args:
        provider_name: Name of the provider ("openai", "openrouter")
        **kwargs: Provider-specific initialization parameters

    Returns:
        LLMProvider instance

    Raises:
        ValueError: If the provider is not found or not supported
    """
    provider_name_lower = provider_name.lower()

    provider_class = _PROVIDER_REGISTRY.get(provider_name_lower)
    if provider_class:
        return provider_class(**kwargs)

    # Importing the module triggers the @register_provider decorator
    if provider_name_lower == "openai":
        from . import openai  # noqa: F401
    elif provider_name_lower == "openrouter":
        from . import openrouter  # noqa: F401
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. Supported providers: openai, openrouter."
        )

    provider_class = _PROVIDER_REGISTRY.get(provider_name_lower)
    if not provider_class:
        raise ValueError(f"Provider {provider_name} was imported but not registered.")
    return provider_class(**kwargs)
