"""Storage for memoized step outputs."""

import copy
from typing import Any, Protocol


class StepStore(Protocol):
    """Where step outputs are recorded, keyed by execution id and step key.

    A record is a dict with ``success`` (bool), ``outputs``,
    ``output_schema_name`` and, for failures, ``error`` ({"message": str}).
    """

    async def get(self, execution_id: str, step_key: str) -> dict[str, Any] | None: ...

    async def put(self, execution_id: str, step_key: str, record: dict[str, Any]) -> None: ...


class InMemoryStepStore:
    """Process-local StepStore. Records survive as long as the store instance."""

    def __init__(self):
        self._records: dict[str, dict[str, dict[str, Any]]] = {}

    async def get(self, execution_id: str, step_key: str) -> dict[str, Any] | None:
        record = self._records.get(execution_id, {}).get(step_key)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, execution_id: str, step_key: str, record: dict[str, Any]) -> None:
        self._records.setdefault(execution_id, {})[step_key] = copy.deepcopy(record)

    def step_keys(self, execution_id: str) -> list[str]:
        """Step keys recorded for an execution, in recording order."""
        return list(self._records.get(execution_id, {}))

    def clear(self) -> None:
        self._records.clear()
