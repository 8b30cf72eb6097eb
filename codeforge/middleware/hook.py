"""Response hooks.

A response hook runs after each agent turn, once the turn's tool calls have
finished. It gets the turn result and the run state (by reference) and may
update the state, e.g. to capture the task summary.

Signature: ``(ctx: WorkflowContext, hook_context: HookContext) -> HookResult | None``
"""

import inspect
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from ..core.state import RunState
from ..types.types import AgentResult


class HookAction(Enum):
    """What the agent does once a hook returns."""

    CONTINUE = "continue"
    FAIL = "fail"


class HookContext(BaseModel):
    """Context available to hooks.

    Attributes:
        agent_name: Name of the agent whose turn just finished
        result: The turn's result, tool results included
        state: The run state, shared with the network and the tools
    """

    agent_name: str
    result: AgentResult
    state: RunState


class HookResult(BaseModel):
    """Outcome of one hook; FAIL aborts the turn with ``error_message``."""

    action: HookAction = HookAction.CONTINUE
    error_message: str | None = None

    @classmethod
    def continue_with(cls) -> "HookResult":
        return cls(action=HookAction.CONTINUE)

    @classmethod
    def fail(cls, message: str) -> "HookResult":
        return cls(action=HookAction.FAIL, error_message=message)


def _check_hook_signature(func: Callable) -> None:
    params = list(inspect.signature(func).parameters.values())
    if len(params) != 2:
        raise TypeError(
            f"Hook function '{func.__name__}' must have exactly 2 parameters: "
            f"(ctx: WorkflowContext, hook_context: HookContext). Got {len(params)} parameters."
        )


def hook(func: Callable | None = None):
    """
    Mark a function as a response hook, checking its signature.

    Usage:
        @hook
        def capture(ctx: WorkflowContext, hook_context: HookContext) -> HookResult:
            return HookResult.continue_with()

    Raises:
        TypeError: If the function does not take exactly (ctx, hook_context)
    """

    def decorator(f: Callable) -> Callable:
        _check_hook_signature(f)
        return f

    if func is not None:
        return decorator(func)
    return decorator
