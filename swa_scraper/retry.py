"""Bounded retry for UI steps that can fail on a half-rendered page"""

from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from .config import MAX_ATTEMPTS
from .exceptions import (
    AmbiguousMatchError,
    ExtractionError,
    InputMismatchError,
    ResourceTimeoutError,
    ThrottleDetectedError,
)
from .models import ErrorType

T = TypeVar("T")


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = MAX_ATTEMPTS,
    on_failure: Optional[Callable[[int, Exception], Awaitable[None]]] = None,
    description: str = "operation",
) -> T:
    """
    Run an async operation until it succeeds or runs out of attempts.

    Attempts run back to back, never concurrently and without a pause; any
    pacing belongs to the operation itself.

    Args:
        operation: Zero-argument coroutine function to execute
        max_attempts: Total number of attempts (at least 1)
        on_failure: Optional callback awaited after every failed attempt:
            on_failure(attempt, error), attempt counting from 1
        description: Name used in log messages

    Raises:
        The exception of the last attempt, unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()

            if attempt > 1:
                logger.success(f"✓ {description} recovered on attempt {attempt}")

            return result

        except Exception as e:
            error_type = classify_error(e)
            logger.warning(
                f"⚠️ {description}: attempt {attempt}/{max_attempts} failed "
                f"({error_type.value}): {e}"
            )

            if on_failure:
                await on_failure(attempt, e)

            if attempt >= max_attempts:
                logger.error(f"❌ {description} failed after {max_attempts} attempts: {e}")
                raise


def classify_error(error: Exception) -> ErrorType:
    """Classify error for logging"""
    if isinstance(error, (AmbiguousMatchError, InputMismatchError, ResourceTimeoutError)):
        return ErrorType.TRANSIENT
    elif isinstance(error, ThrottleDetectedError):
        return ErrorType.RATE_LIMIT
    elif isinstance(error, ExtractionError):
        return ErrorType.EXTRACTION
    else:
        return ErrorType.PERMANENT
