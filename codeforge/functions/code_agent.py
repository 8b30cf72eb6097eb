"""The ``code-agent`` durable function.

Triggered by ``code-agent/run`` with ``{"projectId", "value"}``. Provisions a
sandbox, replays the project's recent conversation, lets the coding agent work
in the sandbox until it reports completion (or runs out of turns), names and
describes the result, and stores exactly one assistant message for the run.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..agents.agent import Agent
from ..agents.network import Network
from ..core.context import WorkflowContext
from ..core.state import RunState
from ..core.workflow import StepExecutionError, workflow
from ..execution.sandbox_tools import get_sandbox, sandbox_tools
from ..middleware.hook import HookContext, HookResult, hook
from ..persistence.models import Fragment, Message, MessageRole, MessageType
from ..types.types import ConversationTurn
from .prompts import FRAGMENT_TITLE_PROMPT, PROMPT, RESPONSE_PROMPT

logger = logging.getLogger(__name__)

TASK_SUMMARY_MARKER = "<task_summary>"
DEFAULT_TITLE = "Fragment"
DEFAULT_RESPONSE = "Here's what I built for you."
ERROR_CONTENT = "Error: No summary or files generated."


class CodeAgentEvent(BaseModel):
    """Payload of a ``code-agent/run`` event."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    value: str


class CodeAgentResult(BaseModel):
    """What a code-agent run returns."""

    url: str
    title: str
    files: dict[str, str]
    summary: str


@hook
def capture_task_summary(ctx: WorkflowContext, hook_context: HookContext) -> HookResult:
    """Record the turn's last assistant text as the summary once it carries the marker.

    The first marked text wins; later turns never replace it.
    """
    text = hook_context.result.last_text()
    if text and TASK_SUMMARY_MARKER in text:
        if hook_context.state.record_summary(text):
            logger.info("Agent %s reported completion", hook_context.agent_name)
    return HookResult.continue_with()


def extract_text(output: Sequence[Any] | None, fallback: str) -> str:
    """Plain text of the first output item, or ``fallback``.

    The fallback is used when there is no first item, when it is not a text
    item, or when its text is empty after trimming. Multi-part content is
    joined with single spaces.
    """
    if not output:
        return fallback
    first = output[0]
    if isinstance(first, BaseModel):
        first = first.model_dump()
    if not isinstance(first, dict) or first.get("type") != "text":
        return fallback

    content = first.get("content")
    if isinstance(content, list):
        text = " ".join(
            (part.get("text") or "") if isinstance(part, dict) else str(part) for part in content
        )
    elif isinstance(content, str):
        text = content
    else:
        return fallback
    return text.strip() or fallback


def build_code_agent(ctx: WorkflowContext, sandbox_id: str) -> Agent:
    return Agent(
        name="code-agent",
        description="An expert coding agent for Next.js development",
        system_prompt=PROMPT,
        model=ctx.settings.model,
        tools=sandbox_tools(ctx, sandbox_id),
        on_response=[capture_task_summary],
    )


def build_fragment_title_generator(ctx: WorkflowContext) -> Agent:
    return Agent(
        name="fragment-title-generator",
        description="Generates a short, descriptive title for a code fragment",
        system_prompt=FRAGMENT_TITLE_PROMPT,
        model=ctx.settings.model,
    )


def build_response_generator(ctx: WorkflowContext) -> Agent:
    return Agent(
        name="response-generator",
        description="Generates a user-friendly message explaining what was built",
        system_prompt=RESPONSE_PROMPT,
        model=ctx.settings.model,
    )


@asynccontextmanager
async def acquire_sandbox(ctx: WorkflowContext, template: str) -> AsyncIterator[str]:
    """Provision a sandbox for the run and release it on every exit path.

    Nothing is released when provisioning itself fails.
    """
    if ctx.sandbox_provider is None:
        raise RuntimeError("No SandboxProvider configured on the workflow context")
    provider = ctx.sandbox_provider

    async def create_sandbox() -> str:
        sandbox = await provider.create(template)
        return sandbox.id

    sandbox_id = await ctx.step.run("get-sandbox-id", create_sandbox)
    try:
        yield sandbox_id
    finally:
        try:
            await ctx.step.run("close-sandbox", provider.release, sandbox_id)
        except StepExecutionError as e:
            logger.warning("Failed to release sandbox %s: %s", sandbox_id, e)


async def load_previous_messages(ctx: WorkflowContext, project_id: str) -> list[ConversationTurn]:
    """The project's most recent messages as conversation turns, oldest first."""
    if ctx.message_store is None:
        raise RuntimeError("No MessageStore configured on the workflow context")
    store = ctx.message_store

    async def get_previous_messages() -> list[ConversationTurn]:
        messages = await store.find_messages(
            project_id, limit=ctx.settings.history_limit, order="desc"
        )
        turns = [
            ConversationTurn(
                content=message.content,
                role="assistant" if message.role == MessageRole.ASSISTANT else "user",
            )
            for message in messages
        ]
        return list(reversed(turns))

    return await ctx.step.run("get-previous-messages", get_previous_messages)


@workflow(id="code-agent", trigger_on_event="code-agent/run")
async def code_agent_function(ctx: WorkflowContext, payload: CodeAgentEvent) -> CodeAgentResult:
    settings = ctx.settings
    async with acquire_sandbox(ctx, settings.sandbox_template) as sandbox_id:
        previous_messages = await load_previous_messages(ctx, payload.project_id)
        state = RunState(history=previous_messages)

        code_agent = build_code_agent(ctx, sandbox_id)
        network = Network(
            name="coding-agent-network",
            agents=[code_agent],
            max_iter=settings.max_iter,
        )
        await network.run(ctx, payload.value, state)

        title_output = await build_fragment_title_generator(ctx).run(ctx, state.summary)
        response_output = await build_response_generator(ctx).run(ctx, state.summary)
        title = extract_text(title_output, DEFAULT_TITLE)
        response = extract_text(response_output, DEFAULT_RESPONSE)

        is_error = not state.summary or not state.files

        async def get_sandbox_url() -> str:
            sandbox = await get_sandbox(ctx, sandbox_id)
            return f"https://{sandbox.host_for(settings.preview_port)}"

        sandbox_url = await ctx.step.run("get-sandbox-url", get_sandbox_url)

        async def save_result() -> Message:
            if is_error:
                return await ctx.message_store.create_message(
                    project_id=payload.project_id,
                    content=ERROR_CONTENT,
                    role=MessageRole.ASSISTANT,
                    type=MessageType.ERROR,
                )
            return await ctx.message_store.create_message(
                project_id=payload.project_id,
                content=response,
                role=MessageRole.ASSISTANT,
                type=MessageType.RESULT,
                fragment=Fragment(sandbox_url=sandbox_url, title=title, files=state.files),
            )

        await ctx.step.run("save-result", save_result)

        return CodeAgentResult(
            url=sandbox_url,
            title=title,
            files=state.files,
            summary=state.summary,
        )
