"""Worker class for executing codeforge workflows."""

import logging
import traceback
import uuid
from typing import Any

from ..core.context import WorkflowContext
from ..core.store import InMemoryStepStore, StepStore
from ..core.workflow import _WORKFLOW_REGISTRY, Workflow
from ..execution.environment import SandboxProvider
from ..features.events import Event
from ..features.tracing import get_tracer
from ..llm.providers.base import LLMProvider, get_provider
from ..persistence.store import InMemoryMessageStore, MessageStore
from ..utils.config import Settings

logger = logging.getLogger(__name__)


class Worker:
    """
    codeforge worker that executes workflows in response to events.

    The worker owns the collaborators every run needs (step store, sandbox
    provider, message store, LLM provider and settings) and hands them to each
    execution through a fresh WorkflowContext.

    Usage:
        from codeforge import Worker, Event
        from codeforge.functions.code_agent import code_agent_function

        worker = Worker.from_settings(Settings.from_env(), workflows=[code_agent_function])
        result = await worker.dispatch(
            Event(name="code-agent/run", data={"projectId": "p1", "value": "Build a todo app"})
        )
    """

    def __init__(
        self,
        workflows: list[Workflow] | None = None,
        step_store: StepStore | None = None,
        sandbox_provider: SandboxProvider | None = None,
        message_store: MessageStore | None = None,
        llm_provider: LLMProvider | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize worker.

        Args:
            workflows: Workflows this worker runs. Defaults to every registered workflow.
            step_store: Where step results are memoized (default: in memory)
            sandbox_provider: Sandbox service used by the runs
            message_store: Project message persistence (default: in memory)
            llm_provider: Default LLM provider for agents without their own
            settings: Runtime settings (default: ``Settings()``)
        """
        self.step_store = step_store if step_store is not None else InMemoryStepStore()
        self.sandbox_provider = sandbox_provider
        self.message_store = message_store if message_store is not None else InMemoryMessageStore()
        self.llm_provider = llm_provider
        self.settings = settings or Settings()

        self.workflows_registry: dict[str, Workflow] = {}
        candidates = _WORKFLOW_REGISTRY.values() if workflows is None else workflows
        for workflow in candidates:
            if not isinstance(workflow, Workflow):
                logger.warning("Skipping non-Workflow object in workflows list: %s", workflow)
                continue
            self.workflows_registry[workflow.id] = workflow

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        workflows: list[Workflow] | None = None,
        step_store: StepStore | None = None,
    ) -> "Worker":
        """Build a worker with the sandbox, LLM and persistence backends ``settings`` select.

        Raises:
            ConfigurationError: If a selected backend is missing its credentials
        """
        from ..execution.sandbox_tools import sandbox_provider_from_settings

        if settings.llm_provider == "openrouter":
            llm_provider = get_provider(
                "openrouter",
                api_key=settings.require("openrouter_api_key"),
                base_url=settings.openrouter_base_url,
            )
        else:
            llm_provider = get_provider(settings.llm_provider)

        message_store: MessageStore
        if settings.persistence_url:
            from ..persistence.http import HttpMessageStore

            message_store = HttpMessageStore(
                settings.persistence_url, api_key=settings.persistence_api_key
            )
        else:
            message_store = InMemoryMessageStore()

        return cls(
            workflows=workflows,
            step_store=step_store,
            sandbox_provider=sandbox_provider_from_settings(settings),
            message_store=message_store,
            llm_provider=llm_provider,
            settings=settings,
        )

    def workflow_for_event(self, event_name: str) -> Workflow:
        """Return the workflow triggered by ``event_name``.

        Raises:
            ValueError: If no registered workflow listens to the event
        """
        for workflow in self.workflows_registry.values():
            if workflow.trigger_on_event == event_name:
                return workflow
        raise ValueError(f"No workflow is triggered by event '{event_name}'")

    async def dispatch(self, event: Event, execution_id: str | None = None) -> Any:
        """Run the workflow triggered by ``event`` and return its result.

        Passing the ``execution_id`` of an earlier run replays it: steps that
        already completed return their recorded results instead of running again.
        """
        workflow = self.workflow_for_event(event.name)
        payload = workflow.prepare_payload(event.data)
        execution_id = execution_id or str(uuid.uuid4())

        ctx = WorkflowContext(
            workflow_id=workflow.id,
            execution_id=execution_id,
            step_store=self.step_store,
            sandbox_provider=self.sandbox_provider,
            message_store=self.message_store,
            llm_provider=self.llm_provider,
            settings=self.settings,
            event_name=event.name,
            created_at=event.created_at,
        )

        logger.info("Executing %s (execution %s) for event %s", workflow.id, execution_id, event.id)
        tracer = get_tracer()
        with tracer.start_as_current_span(
            name=f"workflow.{workflow.id}",
            attributes={
                "workflow.id": workflow.id,
                "workflow.execution_id": execution_id,
                "workflow.event": event.name,
            },
        ):
            try:
                result = await workflow.execute(ctx, payload)
            except Exception as error:
                logger.error(
                    "Execution error: %s\nStack trace:\n%s", error, traceback.format_exc()
                )
                raise

        logger.info("Execution %s of %s completed", execution_id, workflow.id)
        return result
