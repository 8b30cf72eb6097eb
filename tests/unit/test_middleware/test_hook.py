"""Tests for response hooks and the hook executor."""

import pytest

from codeforge.core.state import RunState
from codeforge.middleware.hook import HookAction, HookContext, HookResult, hook
from codeforge.middleware.hook_executor import execute_hooks
from codeforge.types.types import AgentResult, TextMessage


def _hook_context(text="hello"):
    return HookContext(
        agent_name="code-agent",
        result=AgentResult(agent_name="code-agent", output=[TextMessage(content=text)]),
        state=RunState(),
    )


class TestHookDecorator:
    def test_valid_hook(self):
        @hook
        def noop(ctx, hook_context):
            return HookResult.continue_with()

        assert noop(None, _hook_context()).action == HookAction.CONTINUE

    def test_invalid_signature(self):
        with pytest.raises(TypeError, match="exactly 2 parameters"):

            @hook
            def bad(ctx):
                pass

    def test_fail_result(self):
        result = HookResult.fail("nope")
        assert result.action == HookAction.FAIL
        assert result.error_message == "nope"


class TestExecuteHooks:
    @pytest.mark.asyncio
    async def test_hooks_share_the_run_state(self, mock_workflow_context):
        hook_context = _hook_context("<task_summary>done</task_summary>")

        def record(ctx, hc):
            hc.state.record_summary(hc.result.last_text())

        async def check(ctx, hc):
            assert hc.state.summary
            return HookResult.continue_with()

        result = await execute_hooks([record, check], hook_context, mock_workflow_context)

        assert result.action == HookAction.CONTINUE
        assert hook_context.state.summary == "<task_summary>done</task_summary>"

    @pytest.mark.asyncio
    async def test_stops_at_first_failure(self, mock_workflow_context):
        calls = []

        def failing(ctx, hc):
            calls.append("failing")
            return HookResult.fail("bad turn")

        def after(ctx, hc):
            calls.append("after")

        result = await execute_hooks([failing, after], _hook_context(), mock_workflow_context)

        assert result.action == HookAction.FAIL
        assert result.error_message == "bad turn"
        assert calls == ["failing"]

    @pytest.mark.asyncio
    async def test_invalid_return_type_fails(self, mock_workflow_context):
        def wrong(ctx, hc):
            return "ok"

        result = await execute_hooks([wrong], _hook_context(), mock_workflow_context)

        assert result.action == HookAction.FAIL
        assert "invalid result type: str" in result.error_message
