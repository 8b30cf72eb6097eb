"""createOrUpdateFiles tool -- write files into the sandbox."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import WorkflowContext
from ...core.state import RunState
from ...core.workflow import StepExecutionError
from ...tools.tool import Tool, ToolExecutionError
from ..environment import SandboxHandle


class FileEntry(BaseModel):
    """One file to write."""

    path: str = Field(description="Path of the file inside the sandbox")
    content: str = Field(description="Full content of the file")


class CreateOrUpdateFilesInput(BaseModel):
    """Input schema for the createOrUpdateFiles tool."""

    files: list[FileEntry] = Field(description="Files to create or overwrite")


def create_files_tool(get_sandbox: Callable[[], Awaitable[SandboxHandle]]) -> Tool:
    """Create the createOrUpdateFiles tool.

    The whole batch is written inside one durable step that returns the merged
    file map. The run state only sees that map once the step has succeeded, so
    a batch that fails part way leaves ``state.files`` as it was.

    Args:
        get_sandbox: Async callable that resolves the run's sandbox.

    Returns:
        A Tool instance for createOrUpdateFiles.
    """

    async def handler(
        ctx: WorkflowContext, input: CreateOrUpdateFilesInput, state: RunState
    ) -> str:
        async def write_files() -> dict[str, str]:
            updated_files = dict(state.files)
            sandbox = await get_sandbox()
            for file in input.files:
                await sandbox.write_file(file.path, file.content)
                updated_files[file.path] = file.content
            return updated_files

        try:
            updated_files = await ctx.step.run("create-or-update-files", write_files)
        except StepExecutionError as e:
            raise ToolExecutionError(f"Error creating or updating files: {e}") from e

        state.commit_files(updated_files)
        return "Files updated successfully"

    return Tool(
        id="createOrUpdateFiles",
        description="Create or update files in the sandbox.",
        input_schema_class=CreateOrUpdateFilesInput,
        handler=handler,
    )
