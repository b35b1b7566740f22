# src/taskboard/sync/optimistic.py

from __future__ import annotations

"""
Optimistic mutation primitive.

Every dashboard mutation follows the same shape:
- apply the change to local state right away (returns whatever the rollback needs),
- await the remote call,
- on success optionally reconcile local state with the server result,
- on failure roll the local change back.

Remote failures never escape: the caller gets True/False.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_optimistic(
    *,
    label: str,
    apply: Callable[[], T],
    remote: Callable[[], Awaitable[R]],
    rollback: Callable[[T, Exception], None],
    reconcile: Callable[[T, R], None] | None = None,
) -> bool:
    """
    Run one optimistic mutation.

    apply() runs synchronously before the remote call is even created, so the
    change is visible to the caller as soon as this coroutine takes its first step.
    Cancellation is not a failure and propagates without rollback.
    """
    token = apply()

    try:
        result = await remote()
    except Exception as e:
        logger.warning("%s failed, rolling back: %s", label, e, exc_info=True)
        rollback(token, e)
        return False

    if reconcile is not None:
        reconcile(token, result)
    logger.debug("%s confirmed", label)
    return True
