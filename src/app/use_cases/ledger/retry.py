"""Automatic retry for optimistic-lock conflicts

``CONCURRENCY_CONFLICT`` is the only error a caller retries on its own.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from libs.result import Result
from src.domain.errors import ConcurrencyConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_conflict_retry(
    operation: Callable[[], Awaitable[Result[T]]],
    attempts: int = 1,
) -> Result[T]:
    """Run ``operation``; re-run it up to ``attempts`` more times on conflict"""
    result = await operation()
    retries = 0
    while result.is_err() and result.error.code == ConcurrencyConflict.code and retries < attempts:
        retries += 1
        logger.info(f"Retrying after concurrency conflict (attempt {retries} of {attempts})")
        result = await operation()
    return result
