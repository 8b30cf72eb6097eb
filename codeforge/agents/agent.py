"""Agent definition and the single agent turn."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.context import WorkflowContext
from ..core.state import RunState
from ..core.workflow import StepExecutionError
from ..llm.generate import llm_generate
from ..llm.providers.base import LLMProvider
from ..middleware.hook import HookAction, HookContext
from ..middleware.hook_executor import execute_hooks
from ..tools.tool import Tool
from ..types.types import (
    AgentResult,
    OutputItem,
    TextMessage,
    ToolCall,
    ToolCallMessage,
    ToolFailure,
    ToolOutcome,
    ToolResult,
    Usage,
)

logger = logging.getLogger(__name__)


class Agent:
    """
    An LLM-driven agent: a system prompt, a model binding, a fixed tool list
    and response hooks.

    An agent's configuration does not change once built. Each call to
    ``run_turn`` performs one model call (durable step ``llm_generate:{name}``),
    executes the tool calls the model asked for in the order it asked for them,
    then runs the response hooks with the turn result and the run state.

    Usage:
        code_agent = Agent(
            name="code-agent",
            description="An expert coding agent",
            system_prompt=PROMPT,
            model="deepseek/deepseek-r1-distill-llama-70b:free",
            tools=sandbox_tools(ctx, sandbox_id),
            on_response=[capture_task_summary],
        )

        # Single-shot use, without a network
        output = await title_agent.run(ctx, summary)
    """

    def __init__(
        self,
        name: str,
        system_prompt: str,
        model: str,
        provider: LLMProvider | None = None,
        description: str | None = None,
        tools: list[Tool] | None = None,
        on_response: Callable | list[Callable] | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ):
        self.name = name
        self.description = description or ""
        self.system_prompt = system_prompt
        self.model = model
        self.provider = provider
        self.tools: tuple[Tool, ...] = tuple(tools or ())
        self._tools_by_id = {tool.id: tool for tool in self.tools}
        if len(self._tools_by_id) != len(self.tools):
            raise ValueError(f"Agent '{name}' has duplicate tool ids")
        if on_response is None:
            on_response = []
        elif callable(on_response):
            on_response = [on_response]
        self.on_response: tuple[Callable, ...] = tuple(on_response)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, model={self.model!r})"

    def _resolve_provider(self, ctx: WorkflowContext) -> LLMProvider:
        provider = self.provider or ctx.llm_provider
        if provider is None:
            raise ValueError(
                f"Agent '{self.name}' has no LLM provider and none is configured on the context"
            )
        return provider

    def build_messages(self, input: str | None, state: RunState) -> list[dict[str, Any]]:
        """Prompt for the next turn: prior conversation, the user input, then this run's turns."""
        messages = [turn.to_message() for turn in state.history]
        if input:
            messages.append({"role": "user", "content": input})
        for result in state.results:
            messages.extend(result.messages)
        return messages

    async def _execute_tool_call(
        self, ctx: WorkflowContext, tool_call: ToolCall, state: RunState
    ) -> ToolOutcome:
        tool = self._tools_by_id.get(tool_call.function.name)
        if tool is None:
            message = f"Tool '{tool_call.function.name}' is not available"
            logger.error("Agent %s requested unknown tool: %s", self.name, tool_call.function.name)
            return ToolFailure(error=message)
        return await tool.execute(ctx, tool_call.function.arguments, state)

    async def run_turn(
        self, ctx: WorkflowContext, input: str | None, state: RunState
    ) -> AgentResult:
        """Run one turn against ``state`` and return its result.

        The result is not appended to ``state.results``; the caller decides
        whether the turn becomes part of the run.

        Raises:
            StepExecutionError: If the model call fails after retries or a hook fails
        """
        provider = self._resolve_provider(ctx)
        tool_definitions = [tool.to_llm_tool_definition() for tool in self.tools]

        response = await llm_generate(
            ctx,
            provider,
            f"llm_generate:{self.name}",
            messages=self.build_messages(input, state),
            model=self.model,
            tools=tool_definitions or None,
            system_prompt=self.system_prompt,
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
        )

        output: list[OutputItem] = []
        turn_messages: list[dict[str, Any]] = []
        if response.content:
            output.append(TextMessage(role="assistant", content=response.content))
            turn_messages.append({"role": "assistant", "content": response.content})

        tool_calls = [ToolCall.model_validate(tc) for tc in response.tool_calls or []]
        if tool_calls:
            output.append(ToolCallMessage(tools=tool_calls))
            for tool_call in tool_calls:
                turn_messages.append(
                    {
                        "type": "function_call",
                        "name": tool_call.function.name,
                        "call_id": tool_call.id,
                        "arguments": tool_call.function.arguments,
                    }
                )

        # Tool calls run one at a time, in the order the model requested them
        tool_results: list[ToolResult] = []
        for tool_call in tool_calls:
            outcome = await self._execute_tool_call(ctx, tool_call, state)
            tool_result = ToolResult(
                tool_name=tool_call.function.name,
                tool_call_id=tool_call.id,
                outcome=outcome,
            )
            tool_results.append(tool_result)
            turn_messages.append(
                {
                    "type": "function_call_output",
                    "call_id": tool_call.id,
                    "output": tool_result.output_text(),
                }
            )

        result = AgentResult(
            agent_name=self.name,
            output=output,
            tool_results=tool_results,
            messages=turn_messages,
            usage=Usage.model_validate(response.usage or {}),
        )

        if self.on_response:
            hook_result = await execute_hooks(
                list(self.on_response),
                HookContext(agent_name=self.name, result=result, state=state),
                ctx,
            )
            if hook_result.action == HookAction.FAIL:
                raise StepExecutionError(hook_result.error_message or "Response hook failed")

        return result

    async def run(self, ctx: WorkflowContext, input: str) -> list[OutputItem]:
        """Run a single turn on a fresh state and return the output items."""
        result = await self.run_turn(ctx, input, RunState())
        return result.output
