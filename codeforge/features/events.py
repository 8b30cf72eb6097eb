"""Events that trigger durable functions."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class Event(BaseModel):
    """An event sent to the worker.

    Attributes:
        name: Event topic, matched against a workflow's ``trigger_on_event``
        data: Event payload, validated against the workflow's payload schema
        id: Event ID (UUID string)
        created_at: Timestamp when the event was created
    """

    name: str
    data: dict[str, Any] = {}
    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
