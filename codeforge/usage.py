"""Points-based usage limits for code generations."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .features.events import Event
from .persistence.models import MessageRole, MessageType

if TYPE_CHECKING:
    from .persistence.store import MessageStore
    from .runtime.worker import Worker

logger = logging.getLogger(__name__)

FREE_POINTS = 5
PRO_POINTS = 100
USAGE_DURATION_SECONDS = 30 * 24 * 60 * 60
GENERATION_COST = 1

CODE_AGENT_EVENT = "code-agent/run"


class Plan(str, Enum):
    FREE = "free"
    PRO = "pro"


PLAN_POINTS = {Plan.FREE: FREE_POINTS, Plan.PRO: PRO_POINTS}


class UsageStatus(BaseModel):
    """Usage of one user in the current window."""

    remaining_points: int
    consumed_points: int
    ms_before_next: int


class UsageLimitExceededError(Exception):
    """Raised when a user has no points left in the current window."""

    def __init__(self, user_id: str, status: UsageStatus):
        self.user_id = user_id
        self.status = status
        super().__init__(
            f"Usage limit exceeded for user {user_id}; "
            f"resets in {status.ms_before_next // 1000} seconds"
        )


class UsageTracker:
    """Fixed-window points limiter, keyed by user id.

    A window opens on a user's first consumption and lasts ``duration_seconds``;
    when it expires the user's consumed points reset. The points available in a
    window depend on the user's plan.
    """

    def __init__(
        self,
        duration_seconds: int = USAGE_DURATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.duration_seconds = duration_seconds
        self._clock = clock
        # user_id -> (consumed points, window expiry)
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    def _current_window(self, user_id: str) -> tuple[int, float] | None:
        window = self._windows.get(user_id)
        if window is None or window[1] <= self._clock():
            return None
        return window

    def _status(self, consumed: int, expires_at: float, points: int) -> UsageStatus:
        return UsageStatus(
            remaining_points=max(points - consumed, 0),
            consumed_points=consumed,
            ms_before_next=max(int((expires_at - self._clock()) * 1000), 0),
        )

    async def consume(
        self, user_id: str, cost: int = GENERATION_COST, plan: Plan = Plan.FREE
    ) -> UsageStatus:
        """Spend ``cost`` points for ``user_id``.

        Raises:
            UsageLimitExceededError: If the user doesn't have ``cost`` points left
        """
        if cost < 0:
            raise ValueError("cost must not be negative")
        points = PLAN_POINTS[plan]
        async with self._lock:
            window = self._current_window(user_id)
            consumed, expires_at = window or (0, self._clock() + self.duration_seconds)
            if consumed + cost > points:
                raise UsageLimitExceededError(user_id, self._status(consumed, expires_at, points))
            consumed += cost
            self._windows[user_id] = (consumed, expires_at)
            return self._status(consumed, expires_at, points)

    async def get_status(self, user_id: str, plan: Plan = Plan.FREE) -> UsageStatus | None:
        """Current usage of ``user_id``, or None if there is no open window."""
        window = self._current_window(user_id)
        if window is None:
            return None
        return self._status(window[0], window[1], PLAN_POINTS[plan])


async def trigger_code_agent(
    worker: Worker,
    usage_tracker: UsageTracker,
    message_store: MessageStore,
    user_id: str,
    project_id: str,
    value: str,
    plan: Plan = Plan.FREE,
) -> Any:
    """Start a code-agent run for a user's prompt.

    Points are consumed first, so a user over the limit never gets a run and
    no message is stored. Then the prompt is stored as a USER TEXT message and
    the ``code-agent/run`` event is dispatched.

    Raises:
        UsageLimitExceededError: If the user is out of points
    """
    status = await usage_tracker.consume(user_id, GENERATION_COST, plan=plan)
    logger.info(
        "User %s consumed %d point(s); %d remaining",
        user_id,
        GENERATION_COST,
        status.remaining_points,
    )
    await message_store.create_message(
        project_id=project_id,
        content=value,
        role=MessageRole.USER,
        type=MessageType.TEXT,
    )
    return await worker.dispatch(
        Event(name=CODE_AGENT_EVENT, data={"projectId": project_id, "value": value})
    )
