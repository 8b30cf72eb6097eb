"""Durable workflow definitions and the workflow registry."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Global registry of workflows
_WORKFLOW_REGISTRY: dict[str, Workflow] = {}


class StepExecutionError(Exception):
    """
    Exception raised when a step fails and the workflow must fail.
    """

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason)


class Workflow:
    """A registered durable function.

    Workflow functions take ``(ctx: WorkflowContext)`` or
    ``(ctx: WorkflowContext, payload)``; every side effect inside them should go
    through ``ctx.step`` so that replaying an execution returns recorded results
    instead of repeating the work.
    """

    def __init__(
        self,
        id: str,
        func: Callable,
        description: str | None = None,
        trigger_on_event: str | None = None,
        payload_schema_class: type[BaseModel] | None = None,
    ):
        self.id = id
        self.func = func
        self.description = description
        self.trigger_on_event = trigger_on_event
        self.is_async = inspect.iscoroutinefunction(func)
        self.has_payload_param = len(inspect.signature(func).parameters) >= 2
        self._payload_schema_class = payload_schema_class

    @property
    def payload_schema_class(self) -> type[BaseModel] | None:
        return self._payload_schema_class

    def prepare_payload(self, data: BaseModel | dict[str, Any] | None) -> Any:
        """Validate raw event data against the payload schema, if there is one."""
        if self._payload_schema_class is None:
            return data
        if isinstance(data, self._payload_schema_class):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        return self._payload_schema_class.model_validate(data or {})

    async def execute(self, ctx: Any, payload: Any = None) -> Any:
        """Run the workflow function with a prepared context."""
        args = (ctx, self.prepare_payload(payload)) if self.has_payload_param else (ctx,)
        if self.is_async:
            return await self.func(*args)
        return await asyncio.to_thread(self.func, *args)

    def __call__(self, *args, **kwargs):
        return self.func(*args, **kwargs)

    def __repr__(self) -> str:
        return f"Workflow(id={self.id!r}, trigger_on_event={self.trigger_on_event!r})"


def _payload_schema_from_signature(func: Callable) -> type[BaseModel] | None:
    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        return None
    annotation = params[1].annotation
    if isinstance(annotation, str):
        func_module = inspect.getmodule(func)
        try:
            annotation = eval(annotation, func_module.__dict__ if func_module else {})
        except (NameError, AttributeError, SyntaxError):
            return None
    if inspect.isclass(annotation) and issubclass(annotation, BaseModel):
        return annotation
    for arg in getattr(annotation, "__args__", ()):
        if inspect.isclass(arg) and issubclass(arg, BaseModel):
            return arg
    return None


def workflow(
    id: str | Callable | None = None,
    description: str | None = None,
    trigger_on_event: str | None = None,
):
    """Decorator to register a durable workflow.

    Usage:
        @workflow
        async def my_workflow(ctx):
            ...

        @workflow(id="code-agent", trigger_on_event="code-agent/run")
        async def code_agent(ctx: WorkflowContext, payload: CodeAgentEvent):
            ...

    Args:
        id: Optional workflow ID (defaults to function name)
        description: Optional description
        trigger_on_event: Optional event name that triggers this workflow when
            dispatched to a Worker
    """

    def decorator(func: Callable) -> Workflow:
        params = list(inspect.signature(func).parameters.values())
        if len(params) < 1 or len(params) > 2:
            raise TypeError(
                f"Workflow function '{func.__name__}' must have 1 or 2 parameters: "
                f"(ctx: WorkflowContext) or (ctx: WorkflowContext, payload)"
            )

        workflow_id = id if isinstance(id, str) else func.__name__
        if workflow_id in _WORKFLOW_REGISTRY:
            logger.warning("Workflow %s is already registered; replacing it", workflow_id)

        workflow_obj = Workflow(
            id=workflow_id,
            func=func,
            description=description,
            trigger_on_event=trigger_on_event,
            payload_schema_class=_payload_schema_from_signature(func),
        )
        _WORKFLOW_REGISTRY[workflow_id] = workflow_obj
        return workflow_obj

    # Handle @workflow (without parentheses) - the function is passed as the first argument
    if callable(id):
        return decorator(id)

    return decorator


def get_workflow(workflow_id: str) -> Workflow | None:
    """Get a workflow by ID from the registry."""
    return _WORKFLOW_REGISTRY.get(workflow_id)


def get_all_workflows() -> dict[str, Workflow]:
    """Get all registered workflows."""
    return _WORKFLOW_REGISTRY.copy()
