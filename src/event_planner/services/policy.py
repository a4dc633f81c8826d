"""Failure policy applied at every service operation boundary.

Reads favor availability: a failure on the selected path degrades to the
local mirror and is logged. Writes favor correctness: a failure is logged and
re-raised for the caller to present.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailurePolicy(str, Enum):
    """What an operation does when its selected path fails."""

    DEGRADE = "degrade"  # Serve the fallback result
    PROPAGATE = "propagate"  # Log and re-raise


READ_POLICY = FailurePolicy.DEGRADE
WRITE_POLICY = FailurePolicy.PROPAGATE


async def guarded(
    operation: str,
    policy: FailurePolicy,
    action: Callable[[], Awaitable[T]],
    fallback: Callable[[], Awaitable[T]] | None = None,
) -> T:
    """Run `action` under `policy`.

    Args:
        operation: Description used in log messages
        policy: Failure policy for this operation
        action: The operation on its selected path
        fallback: Result source for DEGRADE (required for that policy)

    Returns:
        The action result, or the fallback result after a degraded failure
    """
    if policy is FailurePolicy.DEGRADE and fallback is None:
        raise ValueError("DEGRADE policy requires a fallback")

    try:
        return await action()
    except Exception as e:
        if policy is FailurePolicy.PROPAGATE:
            logger.error(f"Error in {operation}: {e}")
            raise
        logger.warning(f"Error in {operation}, using fallback: {e}")
        return await fallback()
