"""Tests for the sandbox tools: terminal, createOrUpdateFiles and readFiles."""

import json

import pytest

from codeforge.core.state import RunState
from codeforge.execution.local import LocalSandboxProvider
from codeforge.execution.sandbox_tools import (
    get_sandbox,
    sandbox_provider_from_settings,
    sandbox_tools,
)
from codeforge.types.types import ToolFailure, ToolSuccess
from codeforge.utils.config import ConfigurationError, Settings

from conftest import FakeSandbox


@pytest.fixture
def sandbox(sandbox_provider):
    sandbox = FakeSandbox("sbx-1")
    sandbox_provider.sandboxes[sandbox.id] = sandbox
    return sandbox


@pytest.fixture
def tools(mock_workflow_context, sandbox):
    return {tool.id: tool for tool in sandbox_tools(mock_workflow_context, sandbox.id)}


class TestSandboxToolsFactory:
    def test_returns_the_three_tools_in_order(self, mock_workflow_context):
        tools = sandbox_tools(mock_workflow_context, "sbx-1")
        assert [t.id for t in tools] == ["terminal", "createOrUpdateFiles", "readFiles"]

    def test_each_tool_has_valid_llm_definition(self, mock_workflow_context):
        for tool in sandbox_tools(mock_workflow_context, "sbx-1"):
            definition = tool.to_llm_tool_definition()
            assert definition["function"]["name"] == tool.id
            assert definition["function"]["description"]
            assert definition["function"]["parameters"]["type"] == "object"

    @pytest.mark.asyncio
    async def test_get_sandbox_without_provider_raises(self, mock_workflow_context):
        mock_workflow_context.sandbox_provider = None
        with pytest.raises(RuntimeError, match="No SandboxProvider"):
            await get_sandbox(mock_workflow_context, "sbx-1")

    def test_provider_from_settings_local(self):
        provider = sandbox_provider_from_settings(Settings(sandbox_backend="local"))
        assert isinstance(provider, LocalSandboxProvider)

    def test_provider_from_settings_e2b_requires_key(self):
        with pytest.raises(ConfigurationError, match="e2b_api_key"):
            sandbox_provider_from_settings(Settings(sandbox_backend="e2b"))


class TestTerminalTool:
    @pytest.mark.asyncio
    async def test_returns_stdout(self, mock_workflow_context, tools, sandbox):
        sandbox.commands["npm install zod --yes"] = "added 1 package\n"

        outcome = await tools["terminal"].execute(
            mock_workflow_context, {"command": "npm install zod --yes"}, RunState()
        )

        assert outcome == ToolSuccess(output="added 1 package\n")

    @pytest.mark.asyncio
    async def test_failed_command_is_a_value(self, mock_workflow_context, tools, sandbox):
        sandbox.failing_commands["npm run lint"] = ("checking\n", "2 errors\n")

        outcome = await tools["terminal"].execute(
            mock_workflow_context, {"command": "npm run lint"}, RunState()
        )

        assert isinstance(outcome, ToolSuccess)
        assert outcome.output.startswith("Command failed:")
        assert "stdout: checking\n" in outcome.output
        assert "stderr: 2 errors\n" in outcome.output

    @pytest.mark.asyncio
    async def test_unreachable_sandbox_is_a_failure(
        self, mock_workflow_context, tools, sandbox, sandbox_provider
    ):
        await sandbox_provider.release(sandbox.id)

        outcome = await tools["terminal"].execute(
            mock_workflow_context, {"command": "ls"}, RunState()
        )

        assert isinstance(outcome, ToolFailure)
        assert outcome.error.startswith("Error running command:")


class TestCreateOrUpdateFilesTool:
    @pytest.mark.asyncio
    async def test_writes_files_and_updates_state(self, mock_workflow_context, tools, sandbox):
        state = RunState(files={"app/page.tsx": "old"})

        outcome = await tools["createOrUpdateFiles"].execute(
            mock_workflow_context,
            {
                "files": [
                    {"path": "app/page.tsx", "content": "new"},
                    {"path": "components/todo.tsx", "content": "todo"},
                ]
            },
            state,
        )

        assert outcome == ToolSuccess(output="Files updated successfully")
        assert state.files == {"app/page.tsx": "new", "components/todo.tsx": "todo"}
        assert sandbox.files == state.files

    @pytest.mark.asyncio
    async def test_partial_failure_leaves_state_unchanged(
        self, mock_workflow_context, tools, sandbox
    ):
        sandbox.failing_paths.add("b.tsx")
        state = RunState(files={"existing.tsx": "keep"})

        outcome = await tools["createOrUpdateFiles"].execute(
            mock_workflow_context,
            {
                "files": [
                    {"path": "a.tsx", "content": "a"},
                    {"path": "b.tsx", "content": "b"},
                ]
            },
            state,
        )

        assert isinstance(outcome, ToolFailure)
        assert outcome.error.startswith("Error creating or updating files:")
        assert state.files == {"existing.tsx": "keep"}

    @pytest.mark.asyncio
    async def test_later_write_overwrites_earlier(self, mock_workflow_context, tools):
        state = RunState()
        tool = tools["createOrUpdateFiles"]

        await tool.execute(
            mock_workflow_context, {"files": [{"path": "a.tsx", "content": "1"}]}, state
        )
        await tool.execute(
            mock_workflow_context, {"files": [{"path": "a.tsx", "content": "2"}]}, state
        )

        assert state.files == {"a.tsx": "2"}

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, mock_workflow_context, tools):
        outcome = await tools["createOrUpdateFiles"].execute(
            mock_workflow_context, {"files": [{"path": "a.tsx"}]}, RunState()
        )
        assert isinstance(outcome, ToolFailure)
        assert "Invalid arguments" in outcome.error


class TestReadFilesTool:
    @pytest.mark.asyncio
    async def test_returns_json_in_request_order(self, mock_workflow_context, tools, sandbox):
        sandbox.files.update({"/home/user/a.tsx": "A", "/home/user/b.tsx": "B"})

        outcome = await tools["readFiles"].execute(
            mock_workflow_context,
            {"files": ["/home/user/b.tsx", "/home/user/a.tsx"]},
            RunState(),
        )

        assert isinstance(outcome, ToolSuccess)
        assert json.loads(outcome.output) == [
            {"path": "/home/user/b.tsx", "content": "B"},
            {"path": "/home/user/a.tsx", "content": "A"},
        ]

    @pytest.mark.asyncio
    async def test_missing_file_is_a_failure(self, mock_workflow_context, tools):
        outcome = await tools["readFiles"].execute(
            mock_workflow_context, {"files": ["/home/user/missing.tsx"]}, RunState()
        )

        assert isinstance(outcome, ToolFailure)
        assert outcome.error.startswith("Error reading files:")
