"""Utility functions for codeforge runtime."""

from .config import ConfigurationError, Settings
from .retry import retry_with_backoff
from .serializer import (
    deserialize,
    is_json_serializable,
    safe_serialize,
    schema_name_for,
    serialize,
)

__all__ = [
    "ConfigurationError",
    "Settings",
    "is_json_serializable",
    "serialize",
    "safe_serialize",
    "schema_name_for",
    "deserialize",
    "retry_with_backoff",
]
