"""
Retry policy for Databricks REST calls.

Decides which requests may be sent more than once and retries them with
exponential backoff. A POST that creates something (a job, a run) is only
resent when Databricks can deduplicate it through an idempotency token;
otherwise a timeout after the server accepted the call would create a
second job or run.
"""

import time
import functools
from typing import Any, Callable, Dict, Optional, Tuple, Type

# POST endpoints whose repetition leaves the workspace in the same state
IDEMPOTENT_POST_PATHS = frozenset({
    "/jobs/delete",
    "/jobs/reset",
    "/jobs/runs/cancel",
    "/jobs/runs/delete",
    "/clusters/start",
    "/clusters/delete",
})

# POST endpoints Databricks deduplicates when the body has an idempotency_token
TOKEN_DEDUPLICATED_PATHS = frozenset({
    "/jobs/run-now",
    "/jobs/runs/submit",
})

RETRYABLE_STATUS_CODES = frozenset({
    408,  # Request Timeout
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
})


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


def is_idempotent(method: str, path: str, body: Optional[Dict[str, Any]] = None) -> bool:
    """
    Whether sending the request twice has the same effect as sending it once.

    Args:
        method: HTTP verb
        path: Resource path below /api/<version>
        body: JSON body, checked for an idempotency_token

    Returns:
        True if the request may be retried
    """
    method = method.upper()
    if method in ("GET", "HEAD"):
        return True
    if method != "POST":
        return False
    if path in IDEMPOTENT_POST_PATHS:
        return True
    return path in TOKEN_DEDUPLICATED_PATHS and bool(body and body.get("idempotency_token"))


def should_retry_http_status(status_code: int) -> bool:
    """Check if HTTP status code indicates a retryable error."""
    return status_code in RETRYABLE_STATUS_CODES


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)

    Raises:
        RetryError: Chained to the last failure once every attempt failed
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}"
                        ) from e

                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    time.sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator
