"""Type definitions for codeforge."""

from .types import (
    AgentResult,
    ConversationTurn,
    OutputItem,
    TextContentPart,
    TextMessage,
    ToolCall,
    ToolCallFunction,
    ToolCallMessage,
    ToolFailure,
    ToolOutcome,
    ToolResult,
    ToolSuccess,
    Usage,
)

__all__ = [
    "AgentResult",
    "ConversationTurn",
    "OutputItem",
    "TextContentPart",
    "TextMessage",
    "ToolCall",
    "ToolCallFunction",
    "ToolCallMessage",
    "ToolFailure",
    "ToolOutcome",
    "ToolResult",
    "ToolSuccess",
    "Usage",
]
