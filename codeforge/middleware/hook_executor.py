"""Hook execution for agent response hooks."""

import inspect
import logging
from collections.abc import Callable

from ..core.context import WorkflowContext
from .hook import HookAction, HookContext, HookResult

logger = logging.getLogger(__name__)


def _get_function_identifier(func: Callable, index: int) -> str:
    """Get an identifier for a hook, falling back to its index."""
    if hasattr(func, "__name__") and func.__name__ != "<lambda>":
        return func.__name__
    return f"hook_{index}"


async def execute_hooks(
    hooks: list[Callable],
    hook_context: HookContext,
    ctx: WorkflowContext,
) -> HookResult:
    """
    Execute hooks sequentially and return the combined result.

    Hooks run in-process rather than as durable steps: they only read the turn
    result and update the run state, and both are rebuilt identically on
    replay. Execution stops at the first hook that returns FAIL. A hook that
    returns None counts as CONTINUE.

    Args:
        hooks: List of hook callables (functions decorated with @hook)
        hook_context: Context to pass to hooks
        ctx: WorkflowContext for the current execution

    Returns:
        HookResult with the action to take
    """
    for index, hook_func in enumerate(hooks):
        func_id = _get_function_identifier(hook_func, index)
        hook_result = hook_func(ctx, hook_context)
        if inspect.isawaitable(hook_result):
            hook_result = await hook_result

        if hook_result is None:
            continue
        if not isinstance(hook_result, HookResult):
            return HookResult.fail(
                f"Hook '{func_id}' returned invalid result type: "
                f"{type(hook_result).__name__}. Expected HookResult."
            )
        if hook_result.action == HookAction.FAIL:
            logger.warning("Hook %s failed: %s", func_id, hook_result.error_message)
            return hook_result

    return HookResult.continue_with()
