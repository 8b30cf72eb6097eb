"""Sandbox tools factory.

Creates the tools (terminal, createOrUpdateFiles, readFiles) that operate on
one run's sandbox. The tools hold only the sandbox id and re-resolve the
handle through the context's SandboxProvider on every call, so a replayed
execution never depends on a handle captured by an earlier process.

Example::

    tools = sandbox_tools(ctx, sandbox_id)
    agent = Agent(name="code-agent", tools=tools, ...)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..tools.tool import Tool
from .environment import SandboxHandle, SandboxProvider
from .tools.files import create_files_tool
from .tools.read import create_read_files_tool
from .tools.terminal import create_terminal_tool
from .types import E2BSandboxConfig, LocalSandboxConfig

if TYPE_CHECKING:
    from ..core.context import WorkflowContext
    from ..utils.config import Settings


async def get_sandbox(ctx: WorkflowContext, sandbox_id: str) -> SandboxHandle:
    """Resolve a sandbox by id through the context's provider."""
    if ctx.sandbox_provider is None:
        raise RuntimeError("No SandboxProvider configured on the workflow context")
    return await ctx.sandbox_provider.connect(sandbox_id)


def sandbox_tools(ctx: WorkflowContext, sandbox_id: str) -> list[Tool]:
    """Create the sandbox tools for one run.

    Args:
        ctx: The workflow context of the run
        sandbox_id: Id of the sandbox provisioned for the run

    Returns:
        The terminal, createOrUpdateFiles and readFiles tools, in that order.
    """

    async def resolve() -> SandboxHandle:
        return await get_sandbox(ctx, sandbox_id)

    return [
        create_terminal_tool(resolve),
        create_files_tool(resolve),
        create_read_files_tool(resolve),
    ]


def sandbox_provider_from_settings(settings: Settings) -> SandboxProvider:
    """Build the SandboxProvider selected by ``settings.sandbox_backend``."""
    if settings.sandbox_backend == "local":
        from .local import LocalSandboxProvider

        return LocalSandboxProvider(LocalSandboxConfig())

    # E2B SDK is only imported when that backend is selected
    from .e2b import E2BSandboxProvider

    return E2BSandboxProvider(E2BSandboxConfig(api_key=settings.require("e2b_api_key")))
