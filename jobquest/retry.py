"""Retry decorator with exponential backoff for idempotent backend reads."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)


def _always(exc: BaseException) -> bool:
    return True


def retry(
    *,
    max_attempts: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    when: Callable[[BaseException], bool] = _always,
    sleep: Callable[[float], None] | None = None,
) -> Callable:
    """Retry the wrapped call on ``retryable`` exceptions accepted by ``when``.

    Exceptions outside ``retryable``, or rejected by ``when`` (a 404, a
    validation error), propagate on the first attempt.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if not when(exc) or attempt >= max_attempts:
                        if attempt > 1:
                            logger.error(
                                "%s failed after %d attempts: %s",
                                fn.__qualname__, attempt, exc,
                            )
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__, attempt, max_attempts, exc, delay,
                    )
                    (sleep or time.sleep)(delay)
                    attempt += 1

        return wrapper

    return decorator
