"""JSON serialization utilities for memoized step outputs."""

import json
from typing import Any

from pydantic import BaseModel


def is_json_serializable(obj: Any) -> bool:
    """Check if an object is JSON serializable by attempting json.dumps.

    Args:
        obj: Object to check

    Returns:
        True if the object is JSON serializable, False otherwise
    """
    try:
        json.dumps(obj)
        return True
    except (TypeError, ValueError):
        return False


def schema_name_for(obj: Any) -> str | None:
    """Return the schema name used to restore ``obj`` after a round trip.

    Pydantic models map to ``"module.ClassName"`` and non-empty lists of models
    to ``"list[module.ClassName]"``. Anything else has no schema name.
    """
    if isinstance(obj, BaseModel):
        return f"{obj.__class__.__module__}.{obj.__class__.__name__}"
    if isinstance(obj, list) and obj and isinstance(obj[0], BaseModel):
        return f"list[{obj[0].__class__.__module__}.{obj[0].__class__.__name__}]"
    return None


def serialize(obj: Any) -> Any:
    """Serialize an object to a JSON-serializable object.

    Pydantic models (and lists of them) are dumped with model_dump(mode="json").
    Other values must already be JSON serializable.

    Raises:
        TypeError: If the object is not a Pydantic model and not JSON serializable
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")

    if isinstance(obj, list) and obj and isinstance(obj[0], BaseModel):
        return [item.model_dump(mode="json") for item in obj]

    if not is_json_serializable(obj):
        raise TypeError(
            f"Object of type {type(obj).__name__} is not JSON serializable. "
            f"If it's a Pydantic model, ensure it inherits from BaseModel."
        )

    return obj


def _load_model_class(schema: str) -> type[BaseModel]:
    module_path, class_name = schema.rsplit(".", 1)
    module = __import__(module_path, fromlist=[class_name])
    model_class = getattr(module, class_name)
    if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
        raise TypeError(f"{schema} is not a Pydantic model")
    return model_class


def deserialize(obj: Any, output_schema_name: str | None = None) -> Any:
    """Restore a serialized value, rebuilding Pydantic models from their schema name.

    Args:
        obj: Object to deserialize
        output_schema_name: The name of the output schema (can be
            "list[module.ClassName]" for lists)

    Returns:
        Deserialized object
    """
    if not output_schema_name:
        return obj

    try:
        if output_schema_name.startswith("list[") and isinstance(obj, list):
            model_class = _load_model_class(output_schema_name[5:-1])
            return [model_class.model_validate(item) for item in obj]

        if isinstance(obj, dict):
            return _load_model_class(output_schema_name).model_validate(obj)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        raise ValueError(
            f"Failed to reconstruct Pydantic model from output_schema_name: "
            f"{output_schema_name}. Error: {str(e)}"
        ) from e
    return obj


def safe_serialize(value):
    """Serialize with fallback for non-serializable values."""
    try:
        return serialize(value)
    except (TypeError, ValueError):
        if hasattr(value, "__name__"):
            return f"<{value.__name__}>"
        return f"<{type(value).__name__}>"
