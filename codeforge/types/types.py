"""Type definitions for agent turns, tool calls, and usage."""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from ..utils.serializer import serialize


class Usage(BaseModel):
    """Token usage information from LLM calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class ToolCallFunction(BaseModel):
    """Function information within a tool call."""

    name: str
    arguments: str  # JSON string


class ToolCall(BaseModel):
    """A tool call made by the LLM."""

    id: str
    type: str = "function"
    function: ToolCallFunction


class ToolSuccess(BaseModel):
    """A tool call that completed; ``output`` is fed back to the agent."""

    status: Literal["completed"] = "completed"
    output: Any = None


class ToolFailure(BaseModel):
    """A tool call that failed; ``error`` is fed back to the agent as an ordinary value."""

    status: Literal["failed"] = "failed"
    error: str


ToolOutcome = Annotated[ToolSuccess | ToolFailure, Field(discriminator="status")]


class ToolResult(BaseModel):
    """Result from executing one requested tool call."""

    tool_name: str
    tool_call_id: str
    outcome: ToolOutcome

    @property
    def succeeded(self) -> bool:
        return self.outcome.status == "completed"

    def output_text(self) -> str:
        """Text handed back to the model for this call."""
        if isinstance(self.outcome, ToolFailure):
            return self.outcome.error
        output = self.outcome.output
        if isinstance(output, str):
            return output
        return json.dumps(serialize(output))


class TextContentPart(BaseModel):
    """One part of a multi-part text message."""

    type: Literal["text"] = "text"
    text: str


class TextMessage(BaseModel):
    """Text produced by (or addressed to) an agent."""

    type: Literal["text"] = "text"
    role: Literal["system", "user", "assistant"] = "assistant"
    content: str | list[TextContentPart]

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return " ".join(part.text for part in self.content)


class ToolCallMessage(BaseModel):
    """Tool calls requested by the agent in one turn."""

    type: Literal["tool_call"] = "tool_call"
    role: Literal["assistant"] = "assistant"
    tools: list[ToolCall]


OutputItem = Annotated[TextMessage | ToolCallMessage, Field(discriminator="type")]


class AgentResult(BaseModel):
    """The outcome of one agent turn.

    Attributes:
        agent_name: Name of the agent that ran the turn
        output: Items the model produced (text and requested tool calls)
        tool_results: Results of the requested tool calls, in request order
        messages: The turn in normalized history form, replayed into later prompts
        usage: Token usage of the model call
    """

    agent_name: str
    output: list[OutputItem] = []
    tool_results: list[ToolResult] = []
    messages: list[dict[str, Any]] = []
    usage: Usage = Field(default_factory=Usage)

    def last_text(self, role: str = "assistant") -> str | None:
        """Return the most recent text message authored by ``role``, if any."""
        for item in reversed(self.output):
            if isinstance(item, TextMessage) and item.role == role:
                return item.text()
        return None


class ConversationTurn(BaseModel):
    """A prior conversation message replayed to the agent as context."""

    type: Literal["text"] = "text"
    role: Literal["user", "assistant"]
    content: str

    def to_message(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}
