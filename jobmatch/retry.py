"""Retry decorator with exponential backoff for collaborator I/O."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    give_up: Optional[Callable[[BaseException], bool]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff.

    ``give_up`` is consulted for every retryable exception; returning True
    re-raises immediately (e.g. SMTP authentication failures).
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exc: BaseException | None = None
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    last_exc = exc
                    if give_up is not None and give_up(exc):
                        logger.error(
                            "%s failed with non-retryable error: %s",
                            fn.__qualname__,
                            exc,
                        )
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
                    (sleep or time.sleep)(delay)
            raise last_exc  # type: ignore[misc]

        return wrapper

    return decorator
