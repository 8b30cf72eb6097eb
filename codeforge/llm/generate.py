"""LLM generation as a durable step."""

from typing import Any

from ..core.context import WorkflowContext
from .providers.base import LLMProvider, LLMResponse


async def llm_generate(
    ctx: WorkflowContext,
    provider: LLMProvider,
    step_key: str,
    messages: list[dict[str, Any]],
    model: str,
    tools: list[dict[str, Any]] | None = None,
    system_prompt: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> LLMResponse:
    """
    Call the model inside ``ctx.step.run`` so a replay returns the recorded response.

    Args:
        ctx: WorkflowContext for the current execution
        provider: Provider to call
        step_key: Durable step key for the call
        messages: Conversation in normalized form
        model: Model identifier
        tools: Tool definitions in function-calling format
        system_prompt: Optional system prompt
        temperature: Optional temperature
        max_tokens: Optional output token limit

    Returns:
        The LLMResponse for this call
    """
    return await ctx.step.run(
        step_key,
        provider.generate,
        messages=messages,
        model=model,
        tools=tools,
        temperature=temperature,
        max_tokens=max_tokens,
        system_prompt=system_prompt,
    )
