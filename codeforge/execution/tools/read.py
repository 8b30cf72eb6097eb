"""readFiles tool -- read file contents from the sandbox."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import WorkflowContext
from ...core.state import RunState
from ...core.workflow import StepExecutionError
from ...tools.tool import Tool, ToolExecutionError
from ..environment import SandboxHandle


class ReadFilesInput(BaseModel):
    """Input schema for the readFiles tool."""

    files: list[str] = Field(description="Paths of the files to read")


def create_read_files_tool(get_sandbox: Callable[[], Awaitable[SandboxHandle]]) -> Tool:
    """Create the readFiles tool.

    Returns a JSON array of ``{"path", "content"}`` objects, in request order.

    Args:
        get_sandbox: Async callable that resolves the run's sandbox.

    Returns:
        A Tool instance for readFiles.
    """

    async def handler(ctx: WorkflowContext, input: ReadFilesInput, state: RunState) -> str:
        async def read_files() -> str:
            sandbox = await get_sandbox()
            contents = []
            for path in input.files:
                contents.append({"path": path, "content": await sandbox.read_file(path)})
            return json.dumps(contents)

        try:
            return await ctx.step.run("read-files", read_files)
        except StepExecutionError as e:
            raise ToolExecutionError(f"Error reading files: {e}") from e

    return Tool(
        id="readFiles",
        description="Read files from the sandbox.",
        input_schema_class=ReadFilesInput,
        handler=handler,
    )
