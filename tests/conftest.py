"""Shared pytest configuration and fixtures."""

import json
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from codeforge.core.context import WorkflowContext
from codeforge.core.store import InMemoryStepStore
from codeforge.execution.environment import (
    CommandError,
    ProvisioningError,
    SandboxHandle,
    SandboxProvider,
)
from codeforge.execution.types import SandboxInfo
from codeforge.functions.prompts import FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT
from codeforge.llm.providers.base import LLMProvider, LLMResponse
from codeforge.persistence.store import InMemoryMessageStore
from codeforge.utils.config import Settings


class FakeSandbox(SandboxHandle):
    """In-memory sandbox.

    ``commands`` maps a command to its stdout; ``failing_commands`` maps a
    command to ``(stdout, stderr)`` written before it fails. Writing a path in
    ``failing_paths`` raises.
    """

    def __init__(self, sandbox_id: str):
        self._id = sandbox_id
        self.files: dict[str, str] = {}
        self.commands: dict[str, str] = {}
        self.failing_commands: dict[str, tuple[str, str]] = {}
        self.failing_paths: set[str] = set()
        self.executed: list[str] = []
        self.released = False

    @property
    def id(self) -> str:
        return self._id

    async def _execute(self, command, on_stdout, on_stderr) -> None:
        self.executed.append(command)
        if command in self.failing_commands:
            stdout, stderr = self.failing_commands[command]
            on_stdout(stdout)
            on_stderr(stderr)
            raise CommandError("exit status 1", 1)
        on_stdout(self.commands.get(command, ""))

    async def write_file(self, path: str, content: str) -> None:
        if path in self.failing_paths:
            raise OSError(f"disk full while writing {path}")
        self.files[path] = content

    async def read_file(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def host_for(self, port: int) -> str:
        return f"{port}-{self._id}.sandbox.test"

    async def release(self) -> None:
        self.released = True

    def get_info(self) -> SandboxInfo:
        return SandboxInfo(type="local", sandbox_id=self._id)


class FakeSandboxProvider(SandboxProvider):
    """Sandbox service double that counts provisioning and release calls."""

    def __init__(self, fail_create: bool = False, fail_release: bool = False, configure=None):
        self.fail_create = fail_create
        self.fail_release = fail_release
        # Called with each new sandbox, to script its behavior
        self.configure = configure
        self.sandboxes: dict[str, FakeSandbox] = {}
        self.create_calls = 0
        self.release_calls: list[str] = []
        self.templates: list[str] = []

    async def create(self, template: str) -> FakeSandbox:
        self.create_calls += 1
        self.templates.append(template)
        if self.fail_create:
            raise ProvisioningError("sandbox quota exceeded")
        sandbox = FakeSandbox(f"sbx-{self.create_calls}")
        if self.configure is not None:
            self.configure(sandbox)
        self.sandboxes[sandbox.id] = sandbox
        return sandbox

    async def connect(self, sandbox_id: str) -> FakeSandbox:
        sandbox = self.sandboxes.get(sandbox_id)
        if sandbox is None or sandbox.released:
            raise ProvisioningError(f"sandbox {sandbox_id} not found")
        return sandbox

    async def release(self, sandbox_id: str) -> None:
        self.release_calls.append(sandbox_id)
        if self.fail_release:
            raise ProvisioningError("sandbox service unavailable")
        sandbox = self.sandboxes.get(sandbox_id)
        if sandbox is not None:
            await sandbox.release()


def tool_call(name: str, arguments: dict, call_id: str | None = None) -> dict:
    """A tool call as returned by an LLM provider."""
    return {
        "id": call_id or f"call_{uuid.uuid4().hex[:8]}",
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments)},
    }


class ScriptedLLMProvider(LLMProvider):
    """LLM double that answers with a fixed sequence of responses."""

    def __init__(self, responses: list[LLMResponse] | None = None):
        self.responses = list(responses or [])
        self.calls: list[dict] = []

    def next_response(self, system_prompt: str | None) -> LLMResponse:
        if not self.responses:
            raise AssertionError("ScriptedLLMProvider ran out of responses")
        return self.responses.pop(0)

    async def generate(
        self,
        messages,
        model,
        tools=None,
        temperature=None,
        max_tokens=None,
        system_prompt=None,
        **kwargs,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "model": model,
                "tools": tools,
                "system_prompt": system_prompt,
            }
        )
        return self.next_response(system_prompt)


class CodeAgentLLM(ScriptedLLMProvider):
    """LLM double for full code-agent runs.

    The coding agent gets ``responses`` in order (then plain "still working"
    text); the title and response generators get fixed answers.
    """

    def __init__(
        self,
        responses: list[LLMResponse] | None = None,
        title: LLMResponse | None = None,
        reply: LLMResponse | None = None,
    ):
        super().__init__(responses)
        self.title = title or LLMResponse(content="  Todo App  ")
        self.reply = reply or LLMResponse(content="I built a todo app for you.")

    def next_response(self, system_prompt: str | None) -> LLMResponse:
        if system_prompt == FRAGMENT_TITLE_PROMPT:
            return self.title
        if system_prompt == RESPONSE_PROMPT:
            return self.reply
        if self.responses:
            return self.responses.pop(0)
        return LLMResponse(content="Still working on it.")

    def code_agent_calls(self) -> list[dict]:
        return [
            c
            for c in self.calls
            if c["system_prompt"] not in (FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT)
        ]


@pytest.fixture
def settings():
    """Settings with retries disabled so failing steps fail fast."""
    return Settings(step_max_retries=0, step_base_delay=0, step_max_delay=0)


@pytest.fixture
def step_store():
    return InMemoryStepStore()


@pytest.fixture
def sandbox_provider():
    return FakeSandboxProvider()


@pytest.fixture
def message_store():
    return InMemoryMessageStore()


@pytest.fixture
def llm_provider():
    return ScriptedLLMProvider()


@pytest.fixture
def mock_workflow_context(settings, step_store, sandbox_provider, message_store, llm_provider):
    """Create a WorkflowContext wired to in-memory fakes."""
    return WorkflowContext(
        workflow_id="test-workflow",
        execution_id=str(uuid.uuid4()),
        step_store=step_store,
        sandbox_provider=sandbox_provider,
        message_store=message_store,
        llm_provider=llm_provider,
        settings=settings,
    )


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for API calls."""
    client = AsyncMock()
    client.request = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_tracer():
    """Mock OpenTelemetry tracer."""
    tracer = MagicMock()
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=False)
    tracer.start_as_current_span = MagicMock(return_value=span)
    return tracer


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI AsyncOpenAI client."""
    client = AsyncMock()
    client.chat.completions.create = AsyncMock()
    return client
