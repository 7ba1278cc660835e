from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..logging_config import log_structured_error
from .internal import (
    CallbackFailure,
    ConfigError,
    InternalError,
    MalformedLineError,
    ModuleLoadError,
    NetworkError,
)

T = TypeVar("T")


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, NetworkError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, MalformedLineError):
        error_type = "parsing"
    elif isinstance(error, ModuleLoadError):
        error_type = "module"
    elif isinstance(error, CallbackFailure):
        error_type = "callback"
    elif isinstance(error, ConfigError):
        error_type = "config"
    elif isinstance(error, InternalError):
        error_type = "internal"

    merged = dict(getattr(error, "data", None) or {})
    if context:
        merged.update(context)

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {error}",
        exception=error,
        context=merged or None,
    )


async def retry_network_operation(
    operation: Callable[[], Awaitable[T]],
    context: str,
    max_attempts: int = 3,
    max_wait: float = 30.0,
) -> T:
    """Run a network operation with Tenacity exponential backoff.

    Args:
        operation: Async callable performing one attempt.
        context: Descriptive context for the operation.
        max_attempts: Maximum number of attempts.
        max_wait: Upper bound for a single backoff wait, in seconds.

    Returns:
        The result of the first successful attempt.

    Raises:
        NetworkError: If every attempt failed.
    """
    attempt_count = 0

    def before_attempt(retry_state):
        nonlocal attempt_count
        attempt_count = retry_state.attempt_number
        if attempt_count > 1:
            logging.info(f"Retrying {context} (retry {attempt_count})")

    def after_attempt(retry_state):
        if retry_state.outcome.failed:
            log_error(
                f"Attempt failed for {context}",
                retry_state.outcome.exception(),
                context={"attempt": attempt_count, "operation": context},
            )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, max=max_wait),
        retry=retry_if_exception_type((OSError, TimeoutError)),
        before=before_attempt,
        after=after_attempt,
        reraise=False,
    )

    try:
        return await retrying(operation)
    except RetryError as e:
        cause = e.last_attempt.exception()
        raise NetworkError(
            f"{context} failed after {max_attempts} attempts: {cause}",
            data={"operation": context, "attempts": max_attempts},
        ) from cause
