"""Message store interface and the in-memory implementation."""

from __future__ import annotations

import asyncio
from typing import Literal, Protocol

from .models import Fragment, Message, MessageRole, MessageType

SortOrder = Literal["asc", "desc"]


class PersistenceError(Exception):
    """Raised when the message store cannot be read or written."""


class MessageStore(Protocol):
    """Where project messages live."""

    async def find_messages(
        self, project_id: str, limit: int, order: SortOrder = "desc"
    ) -> list[Message]:
        """Return up to ``limit`` messages of a project ordered by creation time."""
        ...

    async def create_message(
        self,
        project_id: str,
        content: str,
        role: MessageRole,
        type: MessageType,
        fragment: Fragment | None = None,
    ) -> Message:
        """Persist one message, with its fragment if given, and return it."""
        ...


class InMemoryMessageStore:
    """Process-local MessageStore, used by tests and the CLI."""

    def __init__(self, messages: list[Message] | None = None):
        self._messages: list[Message] = list(messages or [])
        self._lock = asyncio.Lock()

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def messages_for(self, project_id: str) -> list[Message]:
        return [m for m in self._messages if m.project_id == project_id]

    async def find_messages(
        self, project_id: str, limit: int, order: SortOrder = "desc"
    ) -> list[Message]:
        if limit < 0:
            raise PersistenceError(f"Invalid limit: {limit}")
        # Insertion order breaks created_at ties
        indexed = [
            (m.created_at, i, m) for i, m in enumerate(self._messages) if m.project_id == project_id
        ]
        indexed.sort(key=lambda item: (item[0], item[1]), reverse=(order == "desc"))
        return [m.model_copy(deep=True) for _, _, m in indexed[:limit]]

    async def create_message(
        self,
        project_id: str,
        content: str,
        role: MessageRole,
        type: MessageType,
        fragment: Fragment | None = None,
    ) -> Message:
        if fragment is not None and type != MessageType.RESULT:
            raise PersistenceError("Only RESULT messages can carry a fragment")
        message = Message(
            project_id=project_id,
            content=content,
            role=role,
            type=type,
            fragment=fragment,
        )
        async with self._lock:
            self._messages.append(message)
        return message.model_copy(deep=True)
