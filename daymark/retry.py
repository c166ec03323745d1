"""Retry decorator with exponential backoff for job-board HTTP calls."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Tuple, Type

import requests

logger = logging.getLogger(__name__)

# Status codes worth another attempt; any other HTTP error is final.
RETRYABLE_STATUS: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def is_transient(exc: BaseException) -> bool:
    """True unless *exc* is an HTTP error carrying a non-retryable status."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in RETRYABLE_STATUS
    return True


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (requests.RequestException, OSError),
    should_retry: Callable[[BaseException], bool] = is_transient,
) -> Callable:
    """Decorator: retries the wrapped adapter call with exponential backoff.

    An exception outside *retryable*, or one rejected by *should_retry*
    (e.g. a 401 from a misconfigured key), propagates on the first attempt.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if not should_retry(exc):
                        raise
                    if attempt == max_attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            fn.__qualname__,
                            max_attempts,
                            exc,
                        )
                        raise
                    delay = min(
                        base_delay * (backoff_factor ** (attempt - 1)), max_delay
                    )
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        max_attempts,
                        exc,
                        delay,
                    )
                    time.sleep(delay)
            raise RuntimeError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
