"""Local sandbox backend.

Each sandbox is a workspace directory on the host and commands run through
an asyncio subprocess. There is no isolation; use it for development only.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import shutil
import tempfile
import uuid

from .environment import (
    CommandError,
    OutputCallback,
    ProvisioningError,
    SandboxHandle,
    SandboxProvider,
)
from .types import LocalSandboxConfig, SandboxInfo

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


async def _pump(stream: asyncio.StreamReader | None, callback: OutputCallback) -> None:
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        text = decoder.decode(chunk)
        if text:
            callback(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        callback(tail)


async def _terminate(proc: asyncio.subprocess.Process, pumps: list[asyncio.Future]) -> None:
    for pump in pumps:
        pump.cancel()
    await asyncio.gather(*pumps, return_exceptions=True)
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


class LocalSandbox(SandboxHandle):
    """Workspace directory on the host."""

    def __init__(self, sandbox_id: str, workspace: str, timeout: int = 300):
        self._id = sandbox_id
        self._workspace = workspace
        self._timeout = timeout

    @property
    def id(self) -> str:
        return self._id

    @property
    def workspace(self) -> str:
        return self._workspace

    async def _execute(
        self, command: str, on_stdout: OutputCallback, on_stderr: OutputCallback
    ) -> None:
        proc = await asyncio.create_subprocess_exec(
            "sh",
            "-c",
            command,
            cwd=self._workspace,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        pumps = [
            asyncio.ensure_future(_pump(proc.stdout, on_stdout)),
            asyncio.ensure_future(_pump(proc.stderr, on_stderr)),
        ]
        try:
            await asyncio.wait_for(asyncio.gather(*pumps), timeout=self._timeout)
            exit_code = await proc.wait()
        except asyncio.TimeoutError:
            await _terminate(proc, pumps)
            raise CommandError(f"Command timed out after {self._timeout} seconds", 137) from None
        except BaseException:
            await _terminate(proc, pumps)
            raise

        if exit_code != 0:
            raise CommandError(f"Command exited with code {exit_code}", exit_code)

    async def write_file(self, path: str, content: str) -> None:
        resolved = self._resolve_path(path)
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as f:
            f.write(content)

    async def read_file(self, path: str) -> str:
        resolved = self._resolve_path(path)
        with open(resolved, encoding="utf-8") as f:
            return f.read()

    def host_for(self, port: int) -> str:
        return f"localhost:{port}"

    async def release(self) -> None:
        shutil.rmtree(self._workspace, ignore_errors=True)

    def get_info(self) -> SandboxInfo:
        return SandboxInfo(type="local", sandbox_id=self._id)

    def _resolve_path(self, p: str) -> str:
        """Resolve a path inside the workspace; absolute paths are rooted at the workspace."""
        resolved = os.path.abspath(os.path.join(self._workspace, p.lstrip("/")))
        if resolved != self._workspace and not resolved.startswith(self._workspace + os.sep):
            raise ValueError(f'Path traversal detected: "{p}" is outside of the sandbox')
        return resolved


class LocalSandboxProvider(SandboxProvider):
    """Creates workspaces under a root directory, one per sandbox id."""

    def __init__(self, config: LocalSandboxConfig | None = None):
        self._config = config or LocalSandboxConfig()
        self._root = os.path.abspath(
            self._config.root_dir or tempfile.mkdtemp(prefix="codeforge-")
        )

    def _workspace_for(self, sandbox_id: str) -> str:
        return os.path.join(self._root, sandbox_id)

    async def create(self, template: str) -> LocalSandbox:
        sandbox_id = f"local-{uuid.uuid4().hex[:12]}"
        workspace = self._workspace_for(sandbox_id)
        try:
            os.makedirs(workspace)
        except OSError as e:
            raise ProvisioningError(f"Failed to create local sandbox: {e}") from e
        logger.info("Created local sandbox %s (template %s ignored)", sandbox_id, template)
        return LocalSandbox(sandbox_id, workspace, timeout=self._config.timeout)

    async def connect(self, sandbox_id: str) -> LocalSandbox:
        workspace = self._workspace_for(sandbox_id)
        if os.path.basename(workspace) != sandbox_id or not os.path.isdir(workspace):
            raise ProvisioningError(f"Local sandbox {sandbox_id} does not exist")
        return LocalSandbox(sandbox_id, workspace, timeout=self._config.timeout)

    async def release(self, sandbox_id: str) -> None:
        workspace = self._workspace_for(sandbox_id)
        if os.path.basename(workspace) != sandbox_id:
            return
        shutil.rmtree(workspace, ignore_errors=True)
