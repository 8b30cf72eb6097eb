"""Unit tests for the pieces of the code-agent function."""

import pytest

from codeforge.core.state import RunState
from codeforge.core.workflow import StepExecutionError
from codeforge.functions.code_agent import (
    DEFAULT_RESPONSE,
    DEFAULT_TITLE,
    CodeAgentEvent,
    acquire_sandbox,
    build_code_agent,
    capture_task_summary,
    extract_text,
    load_previous_messages,
)
from codeforge.middleware.hook import HookAction, HookContext
from codeforge.persistence.models import MessageRole, MessageType
from codeforge.types.types import (
    AgentResult,
    TextContentPart,
    TextMessage,
    ToolCall,
    ToolCallFunction,
    ToolCallMessage,
)

from conftest import FakeSandboxProvider


class TestExtractText:
    def test_string_content_is_trimmed(self):
        assert extract_text([TextMessage(content="  Todo App \n")], DEFAULT_TITLE) == "Todo App"

    def test_parts_are_joined_with_spaces(self):
        output = [
            TextMessage(content=[TextContentPart(text="Todo"), TextContentPart(text="App ")])
        ]
        assert extract_text(output, DEFAULT_TITLE) == "Todo App"

    def test_dict_items(self):
        output = [{"type": "text", "content": [{"type": "text", "text": "A"}, {"text": "B"}]}]
        assert extract_text(output, DEFAULT_TITLE) == "A B"

    def test_missing_output_falls_back(self):
        assert extract_text([], DEFAULT_TITLE) == "Fragment"
        assert extract_text(None, DEFAULT_RESPONSE) == "Here's what I built for you."

    def test_non_text_first_item_falls_back(self):
        call = ToolCall(id="c1", function=ToolCallFunction(name="terminal", arguments="{}"))
        output = [ToolCallMessage(tools=[call]), TextMessage(content="ignored")]
        assert extract_text(output, DEFAULT_TITLE) == "Fragment"

    def test_blank_text_falls_back(self):
        assert extract_text([TextMessage(content="   ")], DEFAULT_TITLE) == "Fragment"

    def test_non_string_content_falls_back(self):
        assert extract_text([{"type": "text", "content": 42}], DEFAULT_TITLE) == "Fragment"


class TestCaptureTaskSummary:
    def _run(self, state, *texts):
        result = AgentResult(
            agent_name="code-agent", output=[TextMessage(content=t) for t in texts]
        )
        return capture_task_summary(
            None, HookContext(agent_name="code-agent", result=result, state=state)
        )

    def test_records_last_assistant_text_with_marker(self):
        state = RunState()
        text = "All done.\n<task_summary>\nBuilt a todo app.\n</task_summary>"

        hook_result = self._run(state, "thinking", text)

        assert hook_result.action == HookAction.CONTINUE
        assert state.summary == text

    def test_only_the_last_text_of_the_turn_counts(self):
        state = RunState()
        self._run(state, "<task_summary>draft</task_summary>", "still going")
        assert state.summary == ""

    def test_first_summary_is_kept(self):
        state = RunState()
        self._run(state, "<task_summary>first</task_summary>")
        self._run(state, "<task_summary>second</task_summary>")
        assert state.summary == "<task_summary>first</task_summary>"


class TestCodeAgentEvent:
    def test_accepts_wire_and_python_names(self):
        assert CodeAgentEvent.model_validate({"projectId": "p1", "value": "x"}).project_id == "p1"
        assert CodeAgentEvent(project_id="p1", value="x").project_id == "p1"


class TestAcquireSandbox:
    @pytest.mark.asyncio
    async def test_releases_on_success(self, mock_workflow_context, sandbox_provider, step_store):
        async with acquire_sandbox(mock_workflow_context, "vibegourab") as sandbox_id:
            assert sandbox_id == "sbx-1"

        assert sandbox_provider.templates == ["vibegourab"]
        assert sandbox_provider.release_calls == ["sbx-1"]
        assert step_store.step_keys(mock_workflow_context.execution_id) == [
            "get-sandbox-id",
            "close-sandbox",
        ]

    @pytest.mark.asyncio
    async def test_releases_on_error(self, mock_workflow_context, sandbox_provider):
        with pytest.raises(RuntimeError, match="agent crashed"):
            async with acquire_sandbox(mock_workflow_context, "vibegourab"):
                raise RuntimeError("agent crashed")

        assert sandbox_provider.release_calls == ["sbx-1"]

    @pytest.mark.asyncio
    async def test_no_release_when_provisioning_fails(self, mock_workflow_context):
        provider = FakeSandboxProvider(fail_create=True)
        mock_workflow_context.sandbox_provider = provider

        with pytest.raises(StepExecutionError, match="sandbox quota exceeded"):
            async with acquire_sandbox(mock_workflow_context, "vibegourab"):
                pass

        assert provider.release_calls == []

    @pytest.mark.asyncio
    async def test_release_failure_is_logged(self, mock_workflow_context, caplog):
        provider = FakeSandboxProvider(fail_release=True)
        mock_workflow_context.sandbox_provider = provider

        with caplog.at_level("WARNING"):
            async with acquire_sandbox(mock_workflow_context, "vibegourab"):
                pass

        assert provider.release_calls == ["sbx-1"]
        assert "Failed to release sandbox sbx-1" in caplog.text


class TestLoadPreviousMessages:
    @pytest.mark.asyncio
    async def test_last_five_oldest_first(self, mock_workflow_context, message_store):
        for i in range(1, 7):
            role = MessageRole.ASSISTANT if i % 2 == 0 else MessageRole.USER
            await message_store.create_message("p1", f"m{i}", role, MessageType.TEXT)

        turns = await load_previous_messages(mock_workflow_context, "p1")

        assert [t.content for t in turns] == ["m2", "m3", "m4", "m5", "m6"]
        assert [t.role for t in turns] == ["assistant", "user", "assistant", "user", "assistant"]

    @pytest.mark.asyncio
    async def test_error_and_result_messages_keep_their_author(
        self, mock_workflow_context, message_store
    ):
        await message_store.create_message("p1", "build", MessageRole.USER, MessageType.TEXT)
        await message_store.create_message(
            "p1", "Error: No summary or files generated.", MessageRole.ASSISTANT, MessageType.ERROR
        )

        turns = await load_previous_messages(mock_workflow_context, "p1")

        assert [t.role for t in turns] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_empty_project(self, mock_workflow_context):
        assert await load_previous_messages(mock_workflow_context, "new-project") == []


def test_code_agent_has_sandbox_tools_and_summary_hook(mock_workflow_context):
    agent = build_code_agent(mock_workflow_context, "sbx-1")

    assert agent.name == "code-agent"
    assert [t.id for t in agent.tools] == ["terminal", "createOrUpdateFiles", "readFiles"]
    assert agent.on_response == (capture_task_summary,)
    assert agent.model == mock_workflow_context.settings.model
