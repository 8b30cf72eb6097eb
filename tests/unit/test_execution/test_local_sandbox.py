"""Tests for the local sandbox backend."""

import asyncio
import os

import pytest

from codeforge.execution.environment import ProvisioningError
from codeforge.execution.local import LocalSandbox, LocalSandboxProvider
from codeforge.execution.types import LocalSandboxConfig


@pytest.fixture
def provider(tmp_path):
    return LocalSandboxProvider(LocalSandboxConfig(root_dir=str(tmp_path), timeout=10))


class TestLocalSandboxProvider:
    @pytest.mark.asyncio
    async def test_create_makes_workspace(self, provider, tmp_path):
        sandbox = await provider.create("vibegourab")

        assert sandbox.id.startswith("local-")
        assert os.path.isdir(tmp_path / sandbox.id)
        assert sandbox.get_info().type == "local"

    @pytest.mark.asyncio
    async def test_connect_resolves_existing_sandbox(self, provider):
        sandbox = await provider.create("vibegourab")

        resolved = await provider.connect(sandbox.id)

        assert resolved.id == sandbox.id
        assert resolved.workspace == sandbox.workspace

    @pytest.mark.asyncio
    async def test_connect_unknown_sandbox_raises(self, provider):
        with pytest.raises(ProvisioningError):
            await provider.connect("local-missing")

    @pytest.mark.asyncio
    async def test_release_removes_workspace_and_is_idempotent(self, provider):
        sandbox = await provider.create("vibegourab")

        await provider.release(sandbox.id)
        await provider.release(sandbox.id)

        assert not os.path.exists(sandbox.workspace)
        with pytest.raises(ProvisioningError):
            await provider.connect(sandbox.id)


class TestLocalSandbox:
    @pytest.mark.asyncio
    async def test_run_command_returns_stdout(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path))

        assert await sandbox.run_command("echo hello") == "hello\n"

    @pytest.mark.asyncio
    async def test_failed_command_returns_diagnostic(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path))

        output = await sandbox.run_command("echo partial; echo oops >&2; exit 3")

        assert output.startswith("Command failed: Command exited with code 3")
        assert "stdout: partial\n" in output
        assert "stderr: oops\n" in output

    @pytest.mark.asyncio
    async def test_write_then_read_creates_directories(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path))

        await sandbox.write_file("app/page.tsx", "export default 1")

        assert (tmp_path / "app" / "page.tsx").read_text() == "export default 1"
        assert await sandbox.read_file("/app/page.tsx") == "export default 1"

    @pytest.mark.asyncio
    async def test_path_traversal_is_rejected(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path / "ws"))

        with pytest.raises(ValueError, match="Path traversal"):
            await sandbox.write_file("../escape.txt", "x")

    def test_host_for(self, tmp_path):
        assert LocalSandbox("local-1", str(tmp_path)).host_for(3000) == "localhost:3000"


class TestLocalSandboxOutput:
    @pytest.mark.asyncio
    async def test_line_longer_than_stream_limit_is_returned_whole(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path))

        output = await sandbox.run_command("head -c 200000 /dev/zero | tr '\\0' a; echo")

        assert output == "a" * 200000 + "\n"

    @pytest.mark.asyncio
    async def test_process_is_killed_when_output_handling_fails(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path))

        def on_stdout(chunk):
            raise RuntimeError("callback broke")

        with pytest.raises(RuntimeError, match="callback broke"):
            await sandbox._execute("echo start; sleep 1; touch done", on_stdout, lambda c: None)

        await asyncio.sleep(1.5)
        assert not (tmp_path / "done").exists()

    @pytest.mark.asyncio
    async def test_timed_out_process_is_killed(self, tmp_path):
        sandbox = LocalSandbox("local-1", str(tmp_path), timeout=1)

        output = await sandbox.run_command("sleep 2; touch done")

        assert output.startswith("Command failed: Command timed out after 1 seconds")
        await asyncio.sleep(1.5)
        assert not (tmp_path / "done").exists()
