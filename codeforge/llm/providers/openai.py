"""OpenAI provider implementation using the Chat Completions API."""

import json
import logging
import os
from typing import Any

from openai import AsyncOpenAI

from .base import LLMProvider, LLMResponse, register_provider

logger = logging.getLogger(__name__)


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    """Provider for any OpenAI-compatible Chat Completions endpoint."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. If not provided, uses OPENAI_API_KEY env var.
            base_url: Optional base URL for the API. If not provided, defaults to OpenAI's URL.
                     Useful for other OpenAI-compatible endpoints.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.base_url = base_url or os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

    def convert_history_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Convert normalized history messages to Chat Completions format.

        Consecutive ``function_call`` messages are grouped into a single
        ``{role: "assistant", tool_calls: [...]}``; when an assistant text
        message directly precedes them it carries the tool calls itself. Each
        ``function_call_output`` becomes a ``{role: "tool", ...}`` message.
        """
        result: list[dict[str, Any]] = []

        i = 0
        while i < len(messages):
            msg = messages[i]
            msg_type = msg.get("type")

            if msg_type == "function_call":
                tool_calls: list[dict[str, Any]] = []
                while i < len(messages) and messages[i].get("type") == "function_call":
                    fc = messages[i]
                    tool_calls.append(
                        {
                            "id": fc.get("call_id", ""),
                            "type": "function",
                            "function": {
                                "name": fc.get("name", ""),
                                "arguments": fc.get("arguments", "{}"),
                            },
                        }
                    )
                    i += 1
                previous = result[-1] if result else None
                if (
                    previous is not None
                    and previous.get("role") == "assistant"
                    and "tool_calls" not in previous
                ):
                    previous["tool_calls"] = tool_calls
                else:
                    result.append({"role": "assistant", "content": None, "tool_calls": tool_calls})

            elif msg_type == "function_call_output":
                output = msg.get("output", "")
                result.append(
                    {
                        "role": "tool",
                        "tool_call_id": msg.get("call_id", ""),
                        "content": output if isinstance(output, str) else json.dumps(output),
                    }
                )
                i += 1

            else:
                # Regular message (role-based) - pass through
                result.append(dict(msg))
                i += 1

        return result

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
        """Generate using the Chat Completions API.

        ``tools`` are passed through unchanged; ``Tool.to_llm_tool_definition``
        already emits the ``{"type": "function", "function": {...}}`` shape.
        """
        chat_messages = self.convert_history_messages(messages or [])
        if system_prompt and not any(m.get("role") == "system" for m in chat_messages):
            chat_messages.insert(0, {"role": "system", "content": system_prompt})

        request_params: dict[str, Any] = {"model": model, "messages": chat_messages}
        if temperature is not None:
            request_params["temperature"] = temperature
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        if tools:
            request_params["tools"] = tools
        request_params.update(kwargs)

        logger.debug(
            "Chat Completions request: model=%s, %d message(s), %d tool(s)",
            model,
            len(chat_messages),
            len(tools or []),
        )
        try:
            completion = await self.client.chat.completions.create(**request_params)
        except Exception as e:
            raise RuntimeError(f"Chat Completions API call failed: {e}") from e

        if not completion:
            raise RuntimeError("Chat Completions API returned no response")
        return _to_llm_response(completion, model)


def _to_llm_response(completion: Any, requested_model: str) -> LLMResponse:
    """Map a ChatCompletion onto LLMResponse, taking only the first choice."""
    content = None
    stop_reason = None
    tool_calls: list[dict[str, Any]] = []

    if completion.choices:
        choice = completion.choices[0]
        if not choice.message:
            raise RuntimeError("Chat Completions API returned no message")
        content = choice.message.content or ""
        stop_reason = choice.finish_reason
        tool_calls = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in choice.message.tool_calls or []
        ]

    usage = {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    if completion.usage:
        usage = {
            "input_tokens": completion.usage.prompt_tokens,
            "output_tokens": completion.usage.completion_tokens,
            "total_tokens": completion.usage.total_tokens,
        }

    return LLMResponse(
        content=content,
        usage=usage,
        tool_calls=tool_calls,
        model=completion.model or requested_model,
        stop_reason=stop_reason,
    )
