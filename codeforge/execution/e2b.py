"""E2B sandbox backend.

Sandboxes are remote microVMs created from a template through the
``e2b-code-interpreter`` SDK.
"""

from __future__ import annotations

import logging
import os

from e2b_code_interpreter import AsyncSandbox

from .environment import OutputCallback, ProvisioningError, SandboxHandle, SandboxProvider
from .types import E2BSandboxConfig, SandboxInfo

logger = logging.getLogger(__name__)


class E2BSandbox(SandboxHandle):
    """Handle on a running E2B sandbox."""

    def __init__(self, sandbox: AsyncSandbox, template: str | None = None):
        self._sandbox = sandbox
        self._template = template
        self._released = False

    @property
    def id(self) -> str:
        return self._sandbox.sandbox_id

    async def _execute(
        self, command: str, on_stdout: OutputCallback, on_stderr: OutputCallback
    ) -> None:
        # Raises CommandExitException on a non-zero exit
        await self._sandbox.commands.run(command, on_stdout=on_stdout, on_stderr=on_stderr)

    async def write_file(self, path: str, content: str) -> None:
        await self._sandbox.files.write(path, content)

    async def read_file(self, path: str) -> str:
        return await self._sandbox.files.read(path)

    def host_for(self, port: int) -> str:
        return self._sandbox.get_host(port)

    async def release(self) -> None:
        if self._released:
            return
        await self._sandbox.kill()
        self._released = True

    def get_info(self) -> SandboxInfo:
        return SandboxInfo(type="e2b", sandbox_id=self.id, template=self._template)


class E2BSandboxProvider(SandboxProvider):
    """Creates and resolves E2B sandboxes."""

    def __init__(self, config: E2BSandboxConfig | None = None):
        self._config = config or E2BSandboxConfig()
        self._api_key = self._config.api_key or os.getenv("E2B_API_KEY")
        if not self._api_key:
            raise ValueError(
                "E2B API key not provided. Set E2B_API_KEY environment variable "
                "or pass api_key in the sandbox config."
            )

    async def create(self, template: str) -> E2BSandbox:
        try:
            sandbox = await AsyncSandbox.create(
                template=template,
                api_key=self._api_key,
                timeout=self._config.timeout,
            )
        except Exception as e:
            raise ProvisioningError(f"Failed to create E2B sandbox from '{template}': {e}") from e
        logger.info("Created E2B sandbox %s from template %s", sandbox.sandbox_id, template)
        return E2BSandbox(sandbox, template=template)

    async def connect(self, sandbox_id: str) -> E2BSandbox:
        try:
            sandbox = await AsyncSandbox.connect(sandbox_id, api_key=self._api_key)
        except Exception as e:
            raise ProvisioningError(f"Failed to connect to E2B sandbox {sandbox_id}: {e}") from e
        return E2BSandbox(sandbox)

    async def release(self, sandbox_id: str) -> None:
        killed = await AsyncSandbox.kill(sandbox_id=sandbox_id, api_key=self._api_key)
        if killed:
            logger.info("Killed E2B sandbox %s", sandbox_id)
        else:
            logger.debug("E2B sandbox %s was already gone", sandbox_id)
