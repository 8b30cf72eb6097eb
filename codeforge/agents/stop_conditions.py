"""Stop conditions for agent networks.

A network checks its stop conditions before every iteration and halts as
soon as one of them holds.
"""

import functools
import inspect
import logging
from collections.abc import Callable

from pydantic import BaseModel

from ..core.state import RunState

logger = logging.getLogger(__name__)


class StopConditionContext(BaseModel):
    """Context available to stop conditions.

    Attributes:
        state: The run state (read it, don't modify it)
        iteration: Number of agent turns taken so far
    """

    state: RunState
    iteration: int = 0


def stop_condition(fn: Callable) -> Callable:
    """
    Decorator for stop condition functions.

    Stop conditions take `ctx: StopConditionContext` as the first parameter
    and optionally a second parameter (config class instance) for configuration.
    They return a boolean (True to stop, False to continue).

    When called with config params, they return a configured callable that will
    be called later by the network with StopConditionContext.

    Usage:
        @stop_condition
        def summary_recorded(ctx: StopConditionContext) -> bool:
            return bool(ctx.state.summary)

        class MaxStepsConfig(BaseModel):
            count: int

        @stop_condition
        def max_steps(ctx: StopConditionContext, config: MaxStepsConfig) -> bool:
            return ctx.iteration >= config.count

        network = Network(..., stop_conditions=[max_steps(MaxStepsConfig(count=10))])
    """
    sig = inspect.signature(fn)
    params = list(sig.parameters.values())

    if not params or params[0].annotation not in (StopConditionContext, "StopConditionContext"):
        raise TypeError(
            f"Invalid stop_condition function '{fn.__name__}': "
            f"first parameter must be typed as 'StopConditionContext'. "
            f"Got {params[0].annotation if params else 'no parameters'}."
        )

    config_class = None
    has_config = len(params) >= 2 and params[1].annotation != inspect.Signature.empty
    if has_config:
        config_class = params[1].annotation
        if not (inspect.isclass(config_class) and issubclass(config_class, BaseModel)):
            raise TypeError(
                f"Invalid stop_condition function '{fn.__name__}': "
                f"second parameter must be a Pydantic BaseModel class, got {config_class}."
            )

    is_async = inspect.iscoroutinefunction(fn)

    if not has_config:
        fn.__stop_condition_name__ = fn.__name__
        return fn

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        """Return a callable bound to the given config."""
        if args and len(args) == 1 and isinstance(args[0], config_class):
            config = args[0]
        elif args and len(args) == 1 and isinstance(args[0], dict):
            config = config_class.model_validate(args[0])
        elif kwargs:
            config = config_class(**kwargs)
        elif not args:
            config = config_class()
        else:
            raise ValueError(f"stop_condition '{fn.__name__}' got invalid config: {args}")

        if is_async:

            async def configured_callable(ctx: StopConditionContext) -> bool:
                return await fn(ctx, config)
        else:

            def configured_callable(ctx: StopConditionContext) -> bool:
                return fn(ctx, config)

        configured_callable.__stop_condition_name__ = fn.__name__
        configured_callable.__stop_condition_config__ = config
        return configured_callable

    wrapper.__stop_condition_name__ = fn.__name__
    return wrapper


async def evaluate_stop_conditions(
    conditions: list[Callable], ctx: StopConditionContext
) -> str | None:
    """Return the name of the first condition that holds, or None."""
    for condition in conditions:
        result = condition(ctx)
        if inspect.isawaitable(result):
            result = await result
        if result:
            return getattr(condition, "__stop_condition_name__", repr(condition))
    return None


# Built-in stop condition functions
@stop_condition
def summary_recorded(ctx: StopConditionContext) -> bool:
    """Stop once the run has a completion summary."""
    return bool(ctx.state.summary)


class MaxStepsConfig(BaseModel):
    """Configuration for max_steps stop condition."""

    count: int = 15


@stop_condition
def max_steps(ctx: StopConditionContext, config: MaxStepsConfig) -> bool:
    """
    Stop when the number of agent turns reaches count.

    Usage:
        network = Network(..., stop_conditions=[max_steps(MaxStepsConfig(count=15))])
    """
    return ctx.iteration >= config.count
