"""Context passed to workflow functions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .store import InMemoryStepStore, StepStore

if TYPE_CHECKING:
    from ..execution.environment import SandboxProvider
    from ..llm.providers.base import LLMProvider
    from ..persistence.store import MessageStore
    from ..utils.config import Settings
    from .step import RetryPolicy


class WorkflowContext:
    """Context available to all workflow functions.

    Carries the execution identity, the collaborators a workflow talks to
    (sandbox service, message store, LLM provider) and a Step helper for
    durable execution.
    """

    def __init__(
        self,
        workflow_id: str,
        execution_id: str,
        step_store: StepStore | None = None,
        retry_policy: RetryPolicy | None = None,
        sandbox_provider: SandboxProvider | None = None,
        message_store: MessageStore | None = None,
        llm_provider: LLMProvider | None = None,
        settings: Settings | None = None,
        event_name: str | None = None,
        created_at: datetime | None = None,
    ):
        self.workflow_id = workflow_id
        self.execution_id = execution_id
        self.step_store = step_store if step_store is not None else InMemoryStepStore()
        self.sandbox_provider = sandbox_provider
        self.message_store = message_store
        self.llm_provider = llm_provider
        self.event_name = event_name
        self.created_at = created_at

        if settings is None:
            from ..utils.config import Settings

            settings = Settings()
        self.settings = settings

        # Initialize step helper for durable execution
        from .step import RetryPolicy, Step

        if retry_policy is None:
            retry_policy = RetryPolicy(
                max_retries=settings.step_max_retries,
                base_delay=settings.step_base_delay,
                max_delay=settings.step_max_delay,
            )
        self.retry_policy = retry_policy
        self.step = Step(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging."""
        return {
            "workflow_id": self.workflow_id,
            "execution_id": self.execution_id,
            "event_name": self.event_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
