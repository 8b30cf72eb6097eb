"""Execution framework -- sandboxes and the tools that operate on them.

Provides tools for running commands and reading/writing files inside
ephemeral sandboxes (E2B, Local).
"""

from .environment import (
    CommandError,
    ProvisioningError,
    SandboxHandle,
    SandboxProvider,
    format_command_failure,
)
from .local import LocalSandbox, LocalSandboxProvider
from .sandbox_tools import get_sandbox, sandbox_provider_from_settings, sandbox_tools
from .tools.files import create_files_tool
from .tools.read import create_read_files_tool
from .tools.terminal import create_terminal_tool
from .types import E2BSandboxConfig, LocalSandboxConfig, SandboxInfo

__all__ = [
    # Main entry points
    "sandbox_tools",
    "sandbox_provider_from_settings",
    "get_sandbox",
    # Interfaces
    "SandboxHandle",
    "SandboxProvider",
    "ProvisioningError",
    "CommandError",
    "format_command_failure",
    # Backends
    "LocalSandbox",
    "LocalSandboxProvider",
    # Tool factories
    "create_terminal_tool",
    "create_files_tool",
    "create_read_files_tool",
    # Types
    "E2BSandboxConfig",
    "LocalSandboxConfig",
    "SandboxInfo",
]
