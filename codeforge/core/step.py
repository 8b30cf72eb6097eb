"""Step execution helper for durable execution within workflows."""

from __future__ import annotations

import asyncio
import contextvars
import inspect
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel, Field

from ..features.tracing import get_tracer
from ..utils.retry import retry_with_backoff
from ..utils.serializer import deserialize, safe_serialize, schema_name_for, serialize
from .workflow import StepExecutionError

if TYPE_CHECKING:
    from .context import WorkflowContext

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel):
    """Default retry settings for steps that don't pass their own."""

    max_retries: int = Field(default=2, ge=0)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=10.0, ge=0)


class Step:
    """Step execution helper - provides durable execution primitives.

    Steps are executed within a workflow context and their outputs are
    saved to avoid re-execution on workflow replay.

    A step key used more than once in one execution is suffixed with its
    occurrence number (``terminal``, ``terminal:1``, ``terminal:2``). Replaying
    the same control flow produces the same sequence of keys, so each call maps
    back to its own record.
    """

    def __init__(self, ctx: WorkflowContext):
        """Initialize Step with a WorkflowContext.

        Args:
            ctx: The workflow execution context
        """
        self.ctx = ctx
        self._key_counts: dict[str, int] = {}

    def _resolve_key(self, step_key: str) -> str:
        occurrence = self._key_counts.get(step_key, 0)
        self._key_counts[step_key] = occurrence + 1
        return step_key if occurrence == 0 else f"{step_key}:{occurrence}"

    async def _handle_existing_step(self, existing_step: dict[str, Any]) -> Any:
        """
        Handle existing step output - either return cached result or raise error.

        Raises:
            StepExecutionError: If step previously failed
        """
        if existing_step.get("success", False):
            outputs = existing_step.get("outputs")
            if outputs is None:
                return None
            return deserialize(outputs, existing_step.get("output_schema_name"))

        error = existing_step.get("error", {})
        error_message = (
            error.get("message", "Step execution failed")
            if isinstance(error, dict)
            else str(error)
        )
        raise StepExecutionError(error_message)

    async def _save_step_output(self, step_key: str, result: Any) -> Any:
        """Save step output using step_key as the unique identifier.

        Pydantic models (and lists of them) are stored as JSON dicts together
        with their schema name so they can be rebuilt on replay. Any other
        result must be JSON serializable.
        """
        outputs = serialize(result)
        await self.ctx.step_store.put(
            self.ctx.execution_id,
            step_key,
            {
                "success": True,
                "outputs": outputs,
                "output_schema_name": schema_name_for(result),
                "error": None,
            },
        )
        return outputs

    async def _save_step_output_with_error(self, step_key: str, error: str) -> None:
        """Save step output with error."""
        await self.ctx.step_store.put(
            self.ctx.execution_id,
            step_key,
            {
                "success": False,
                "outputs": None,
                "output_schema_name": None,
                "error": {"message": error},
            },
        )

    async def run(
        self,
        step_key: str,
        func: Callable,
        *args,
        max_retries: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        **kwargs,
    ) -> Any:
        """
        Execute a callable as a durable step with retry support.

        Checks the step store for an existing result. If found, returns the
        cached result. Otherwise, executes function with retries, saves output,
        and returns result.

        Args:
            step_key: Step key identifier
            func: Callable to execute (sync or async)
            *args: Positional arguments to pass to function
            max_retries: Maximum number of retries on failure (default: context retry policy)
            base_delay: Base delay in seconds for exponential backoff
            max_delay: Maximum delay in seconds
            **kwargs: Keyword arguments to pass to function

        Returns:
            Result of function execution

        Raises:
            StepExecutionError: If function fails after all retries
        """
        policy = self.ctx.retry_policy
        max_retries = policy.max_retries if max_retries is None else max_retries
        base_delay = policy.base_delay if base_delay is None else base_delay
        max_delay = policy.max_delay if max_delay is None else max_delay

        step_key = self._resolve_key(step_key)

        existing_step = await self.ctx.step_store.get(self.ctx.execution_id, step_key)
        if existing_step:
            logger.debug("Replaying step %s for execution %s", step_key, self.ctx.execution_id)
            return await self._handle_existing_step(existing_step)

        func_name = func.__name__ if hasattr(func, "__name__") else str(func)
        tracer = get_tracer()
        with tracer.start_as_current_span(
            name=f"step.{step_key}",
            attributes={
                "step.key": step_key,
                "step.function": func_name,
                "step.execution_id": self.ctx.execution_id,
                "step.workflow_id": self.ctx.workflow_id,
                "step.max_retries": max_retries,
            },
        ) as step_span:
            # Function arguments may be complex objects that are not JSON serializable
            safe_args = [safe_serialize(arg) for arg in args]
            safe_kwargs = {k: safe_serialize(v) for k, v in kwargs.items()}
            step_span.set_attribute(
                "step.input", json.dumps({"args": safe_args, "kwargs": safe_kwargs})
            )

            async def _execute_func() -> Any:
                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                # Run sync function in executor with the current context restored
                func_ctx = contextvars.copy_context()
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(None, lambda: func_ctx.run(func, *args, **kwargs))

            try:
                result = await retry_with_backoff(
                    _execute_func,
                    max_retries=max_retries,
                    base_delay=base_delay,
                    max_delay=max_delay,
                )
            except Exception as e:
                error_message = f"Step {step_key} failed after {max_retries + 1} attempts: {e}"
                logger.error(error_message)
                step_span.set_status(Status(StatusCode.ERROR, str(e)))
                step_span.record_exception(e)
                step_span.set_attribute("step.status", "failed")
                await self._save_step_output_with_error(step_key, error_message)
                raise StepExecutionError(error_message) from e

            try:
                serialized_result = await self._save_step_output(step_key, result)
            except TypeError as e:
                step_span.set_status(Status(StatusCode.ERROR, str(e)))
                raise StepExecutionError(
                    f"Step {step_key} returned an unsaveable result: {e}"
                ) from e

            step_span.set_status(Status(StatusCode.OK))
            step_span.set_attributes(
                {"step.status": "completed", "step.output": json.dumps(serialized_result)}
            )
            return result
