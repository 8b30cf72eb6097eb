"""Abstract interface for sandboxes.

All sandbox tools operate against this interface. Implementations
include E2B and Local sandboxes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from .types import SandboxInfo

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


class ProvisioningError(Exception):
    """Raised when a sandbox cannot be created or re-resolved."""


class CommandError(Exception):
    """Raised by a backend when a command exits unsuccessfully."""

    def __init__(self, message: str, exit_code: int | None = None):
        self.exit_code = exit_code
        super().__init__(message)


def format_command_failure(error: BaseException | str, stdout: str, stderr: str) -> str:
    """Diagnostic handed back to the agent when a command fails."""
    return f"Command failed: {error}\nstdout: {stdout}\nstderr: {stderr}"


class SandboxHandle(ABC):
    """Reference to one ephemeral sandbox."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Sandbox identifier, stable across re-resolution."""
        ...

    @abstractmethod
    async def _execute(
        self, command: str, on_stdout: OutputCallback, on_stderr: OutputCallback
    ) -> None:
        """Run a shell command, streaming output chunks to the callbacks.

        Raises on a non-zero exit or a transport failure.
        """
        ...

    async def run_command(self, command: str) -> str:
        """Run a shell command and return its stdout.

        Output is accumulated as it streams. A failed command does not raise:
        the returned string is the failure diagnostic, which carries the error
        and everything written to stdout and stderr.
        """
        stdout_buffer: list[str] = []
        stderr_buffer: list[str] = []
        try:
            await self._execute(command, stdout_buffer.append, stderr_buffer.append)
        except Exception as e:
            stdout = "".join(stdout_buffer)
            stderr = "".join(stderr_buffer)
            logger.error("Command failed in sandbox %s: %s", self.id, e)
            return format_command_failure(e, stdout, stderr)
        return "".join(stdout_buffer)

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """Write a whole file, creating parent directories as needed."""
        ...

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Read a whole file as UTF-8 text."""
        ...

    @abstractmethod
    def host_for(self, port: int) -> str:
        """Routable host (without scheme) for a port inside the sandbox."""
        ...

    @abstractmethod
    async def release(self) -> None:
        """Tear the sandbox down. Safe to call more than once."""
        ...

    @abstractmethod
    def get_info(self) -> SandboxInfo:
        """Get sandbox metadata."""
        ...


class SandboxProvider(ABC):
    """Creates sandboxes and resolves existing ones by id."""

    @abstractmethod
    async def create(self, template: str) -> SandboxHandle:
        """Provision a new sandbox from a template.

        Raises:
            ProvisioningError: If the sandbox service is unavailable or out of quota
        """
        ...

    @abstractmethod
    async def connect(self, sandbox_id: str) -> SandboxHandle:
        """Re-resolve an existing sandbox by id.

        Raises:
            ProvisioningError: If the sandbox does not exist or cannot be reached
        """
        ...

    @abstractmethod
    async def release(self, sandbox_id: str) -> None:
        """Tear down a sandbox by id. Releasing an already released sandbox is a no-op."""
        ...
