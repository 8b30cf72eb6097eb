"""OpenRouter provider - routes to OpenAI provider with OpenRouter's base URL."""

import os

from .base import register_provider
from .openai import OpenAIProvider

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@register_provider("openrouter")
class OpenRouterProvider(OpenAIProvider):
    """OpenRouter provider using the OpenAI Chat Completions API."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        """
        Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key. If not provided, uses OPENROUTER_API_KEY env var.
            base_url: Optional base URL. If not provided, uses OPENROUTER_BASE_URL or
                OpenRouter's public endpoint.
        """
        openrouter_api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not openrouter_api_key:
            raise ValueError(
                "OpenRouter API key not provided. Set OPENROUTER_API_KEY environment variable "
                "or pass api_key parameter."
            )

        super().__init__(
            api_key=openrouter_api_key,
            base_url=base_url or os.getenv("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL),
        )
