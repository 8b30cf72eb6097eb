"""Terminal tool -- run shell commands inside the sandbox."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import WorkflowContext
from ...core.state import RunState
from ...core.workflow import StepExecutionError
from ...tools.tool import Tool, ToolExecutionError
from ..environment import SandboxHandle


class TerminalInput(BaseModel):
    """Input schema for the terminal tool."""

    command: str = Field(description="The shell command to run")


def create_terminal_tool(get_sandbox: Callable[[], Awaitable[SandboxHandle]]) -> Tool:
    """Create the terminal tool.

    Args:
        get_sandbox: Async callable that resolves the run's sandbox.

    Returns:
        A Tool instance for terminal.
    """

    async def handler(ctx: WorkflowContext, input: TerminalInput, state: RunState) -> str:
        async def run_terminal_command() -> str:
            sandbox = await get_sandbox()
            return await sandbox.run_command(input.command)

        try:
            return await ctx.step.run("terminal", run_terminal_command)
        except StepExecutionError as e:
            raise ToolExecutionError(f"Error running command: {e}") from e

    return Tool(
        id="terminal",
        description="Use the terminal to run shell commands.",
        input_schema_class=TerminalInput,
        handler=handler,
    )
