"""Retry helpers: backoff decorator for network calls, bounded policy for login checks."""
from __future__ import annotations

import functools
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exc: BaseException | None = None
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    last_exc = exc
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
            raise last_exc  # type: ignore[misc]

        return wrapper

    return decorator


def retry_from(policy: Any, *, retryable: Tuple[Type[BaseException], ...] = (Exception,)) -> Callable:
    """``retry`` configured from a policy object such as ``RetrySettings``."""
    return retry(
        max_attempts=policy.max_attempts,
        base_delay=policy.delay,
        max_delay=policy.max_delay,
        backoff_factor=policy.backoff,
        retryable=retryable,
    )


@dataclass
class PollResult:
    ok: bool
    attempts: int
    reason: str = ""


@dataclass
class RetryPolicy:
    """Bounded re-check loop, e.g. waiting for a CAPTCHA to be solved.

    ``check`` returns True when the condition is satisfied. The loop never
    raises; a terminal failure comes back as ``PollResult(ok=False)`` with
    ``failure_reason``.
    """

    max_attempts: int = 3
    delay: float = 5.0
    backoff: float = 1.0
    max_delay: float = 60.0
    failure_reason: str = "timeout"
    sleep: Callable[[float], None] = time.sleep

    def delays(self) -> list[float]:
        return [
            min(self.delay * (self.backoff ** i), self.max_delay)
            for i in range(max(self.max_attempts - 1, 0))
        ]

    def poll(self, check: Callable[[], bool]) -> PollResult:
        waits = self.delays()
        for attempt in range(1, self.max_attempts + 1):
            if check():
                return PollResult(ok=True, attempts=attempt)
            if attempt < self.max_attempts:
                self.sleep(waits[attempt - 1])
        return PollResult(ok=False, attempts=self.max_attempts, reason=self.failure_reason)
