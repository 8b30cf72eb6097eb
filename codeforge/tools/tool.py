"""Tool class for defining tools that can be called by LLM agents."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from ..core.workflow import StepExecutionError
from ..types.types import ToolFailure, ToolOutcome, ToolSuccess

if TYPE_CHECKING:
    from ..core.context import WorkflowContext
    from ..core.state import RunState

logger = logging.getLogger(__name__)

ToolHandler = Callable[["WorkflowContext", BaseModel, "RunState"], Awaitable[Any]]


class ToolExecutionError(Exception):
    """Raised by a tool handler when the operation behind the tool failed.

    The message is what the agent sees, so it should say what went wrong in
    terms the model can act on.
    """


class Tool:
    """
    A function the agent can call.

    A tool has an id, a description and a JSON schema for its parameters (built
    from a Pydantic input model), all exposed to the model for function
    calling. ``execute`` never raises for expected failures: invalid arguments,
    a failing sandbox operation or a failed durable step all come back as a
    ToolFailure value that is fed to the agent like any other result.
    """

    def __init__(
        self,
        id: str,
        description: str,
        input_schema_class: type[BaseModel],
        handler: ToolHandler,
        parameters: dict[str, Any] | None = None,
    ):
        """
        Initialize a tool.

        Args:
            id: Unique tool identifier (the function name the model calls)
            description: Description for the LLM (what this tool does)
            input_schema_class: Pydantic model the arguments are validated against
            handler: Async callable ``(ctx, input, state)`` doing the work
            parameters: JSON schema for tool parameters (default: from input_schema_class)
        """
        self.id = id
        self._tool_description = description
        self._input_schema_class = input_schema_class
        self._handler = handler
        self._tool_parameters = parameters or input_schema_class.model_json_schema()

    @property
    def description(self) -> str:
        return self._tool_description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._tool_parameters

    def to_llm_tool_definition(self) -> dict[str, Any]:
        """
        Convert tool to LLM function calling format.

        Returns format compatible with OpenAI function calling:
        {
            "type": "function",
            "function": {
                "name": "tool_id",
                "description": "...",
                "parameters": {...}
            }
        }
        """
        return {
            "type": "function",
            "function": {
                "name": self.id,
                "description": self._tool_description,
                "parameters": self._tool_parameters,
            },
        }

    def parse_arguments(self, arguments: str | dict[str, Any] | None) -> BaseModel:
        """Validate raw tool-call arguments (a JSON string or a dict).

        Raises:
            ValueError: If the arguments are not valid JSON or don't match the schema
        """
        if arguments is None or arguments == "":
            arguments = {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as e:
                raise ValueError(f"arguments are not valid JSON: {e}") from e
        try:
            return self._input_schema_class.model_validate(arguments)
        except ValidationError as e:
            raise ValueError(str(e)) from e

    async def execute(
        self,
        ctx: WorkflowContext,
        arguments: str | dict[str, Any] | None,
        state: RunState,
    ) -> ToolOutcome:
        """Run the tool and return its outcome as a value."""
        try:
            input_obj = self.parse_arguments(arguments)
        except ValueError as e:
            message = f"Invalid arguments for tool '{self.id}': {e}"
            logger.error(message)
            return ToolFailure(error=message)

        try:
            output = await self._handler(ctx, input_obj, state)
        except ToolExecutionError as e:
            logger.error("Tool %s failed: %s", self.id, e)
            return ToolFailure(error=str(e))
        except StepExecutionError as e:
            logger.error("Tool %s failed: %s", self.id, e)
            return ToolFailure(error=f"Error running {self.id}: {e}")
        return ToolSuccess(output=output)

    def __repr__(self) -> str:
        return f"Tool(id={self.id!r})"
