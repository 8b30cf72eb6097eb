"""Exponential backoff for durable step attempts."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


async def retry_with_backoff(
    func: Callable,
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    *args,
    **kwargs,
) -> Any:
    """
    Await ``func`` up to ``max_retries + 1`` times, sleeping between failed attempts.

    The n-th retry waits ``min(base_delay * 2**n, max_delay)`` seconds. There is
    no wait after the final attempt: its exception is raised straight away so a
    failing step is recorded without delay.

    Raises:
        Exception: Whatever the final attempt raised
    """
    attempts = max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if attempt == attempts:
                raise
            delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
            logger.debug(
                "Attempt %d/%d failed (%s); retrying in %.2fs", attempt, attempts, e, delay
            )
            await asyncio.sleep(delay)
