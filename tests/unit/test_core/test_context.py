"""Unit tests for codeforge.core.context module."""

from datetime import datetime, timezone

import pytest

from codeforge.core.context import WorkflowContext
from codeforge.core.step import RetryPolicy, Step
from codeforge.core.store import InMemoryStepStore
from codeforge.utils.config import Settings


class TestWorkflowContext:
    def test_defaults(self):
        ctx = WorkflowContext(workflow_id="wf", execution_id="exec-1")
        assert isinstance(ctx.step_store, InMemoryStepStore)
        assert isinstance(ctx.settings, Settings)
        assert isinstance(ctx.step, Step)
        assert ctx.retry_policy == RetryPolicy()
        assert ctx.sandbox_provider is None

    def test_explicit_retry_policy_wins(self):
        policy = RetryPolicy(max_retries=5, base_delay=0.1, max_delay=1)
        ctx = WorkflowContext(
            workflow_id="wf",
            execution_id="exec-1",
            retry_policy=policy,
            settings=Settings(step_max_retries=0),
        )
        assert ctx.retry_policy is policy

    def test_to_dict(self):
        created_at = datetime(2025, 1, 2, tzinfo=timezone.utc)
        ctx = WorkflowContext(
            workflow_id="wf",
            execution_id="exec-1",
            event_name="code-agent/run",
            created_at=created_at,
        )
        assert ctx.to_dict() == {
            "workflow_id": "wf",
            "execution_id": "exec-1",
            "event_name": "code-agent/run",
            "created_at": created_at.isoformat(),
        }


class TestInMemoryStepStore:
    @pytest.mark.asyncio
    async def test_records_are_copied(self):
        store = InMemoryStepStore()
        record = {"success": True, "outputs": {"files": {"a": "1"}}}
        await store.put("exec", "step", record)
        record["outputs"]["files"]["a"] = "mutated"

        stored = await store.get("exec", "step")
        assert stored["outputs"] == {"files": {"a": "1"}}
        assert store.step_keys("exec") == ["step"]

    @pytest.mark.asyncio
    async def test_missing_record_and_clear(self):
        store = InMemoryStepStore()
        assert await store.get("exec", "step") is None
        await store.put("exec", "step", {"success": True})
        store.clear()
        assert store.step_keys("exec") == []
