"""Message persistence."""

from .http import HttpMessageStore
from .models import Fragment, Message, MessageRole, MessageType
from .store import InMemoryMessageStore, MessageStore, PersistenceError

__all__ = [
    "Fragment",
    "HttpMessageStore",
    "InMemoryMessageStore",
    "Message",
    "MessageRole",
    "MessageStore",
    "MessageType",
    "PersistenceError",
]
