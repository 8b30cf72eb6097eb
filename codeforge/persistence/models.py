"""Persisted message and fragment records."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"


class MessageType(str, Enum):
    TEXT = "TEXT"
    RESULT = "RESULT"
    ERROR = "ERROR"


class Fragment(BaseModel):
    """The code artifact of a successful run."""

    sandbox_url: str
    title: str
    files: dict[str, str]


class Message(BaseModel):
    """A message in a project's conversation.

    At most one fragment is attached, and only to RESULT messages.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    role: MessageRole
    type: MessageType
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    fragment: Fragment | None = None
