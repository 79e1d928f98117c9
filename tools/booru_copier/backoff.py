"""Exponential backoff around a single logical operation.

A :class:`Backoff` lives for one operation (one page fetch, or all the
upload attempts for one image).  Each retryable failure sleeps for the
current delay and then doubles it, up to ``max_delay``.  Once the delay
sits at the cap, every further failure counts as an attempt at the cap;
with ``max_attempts_at_max_delay`` set, reaching that count gives up by
raising :class:`RetriesExhausted`.  ``None`` retries forever.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from .config import RetryConfig
from .errors import BooruRequestError

logger = logging.getLogger("copier.backoff")

T = TypeVar("T")


class RetriesExhausted(Exception):
    """Gave up after too many failures at the maximum delay."""

    def __init__(self, failures: int) -> None:
        super().__init__(f"gave up after {failures} failed attempts")
        self.failures = failures


class Backoff:
    def __init__(
        self,
        initial_delay: float,
        max_delay: float,
        max_attempts_at_max_delay: int | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.max_attempts_at_max_delay = max_attempts_at_max_delay
        self._sleep = sleep
        self.delay = initial_delay
        self.attempts_at_max_delay = 0
        self.failures = 0

    @classmethod
    def from_config(
        cls,
        cfg: RetryConfig,
        *,
        give_up: bool,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Backoff:
        limit = cfg.max_attempts_at_max_delay if give_up else None
        return cls(cfg.initial_delay, cfg.max_delay, limit, sleep=sleep)

    @property
    def exhausted(self) -> bool:
        if self.max_attempts_at_max_delay is None:
            return False
        return self.attempts_at_max_delay >= self.max_attempts_at_max_delay

    def wait(self) -> None:
        """Sleep for the current delay, then step the backoff state."""
        self.failures += 1
        self._sleep(self.delay)
        if self.delay < self.max_delay:
            self.delay = min(self.delay * 2, self.max_delay)
        else:
            self.attempts_at_max_delay += 1

    def run(
        self,
        operation: Callable[[], T],
        *,
        retry_on: tuple[type[BaseException], ...] = (BooruRequestError,),
        on_retry: Callable[[BaseException, float], None] | None = None,
    ) -> T:
        """Call *operation* until it returns, retrying the *retry_on* errors.

        Whatever *operation* returns is final, so terminal outcomes are
        returned rather than raised.
        """
        while True:
            try:
                return operation()
            except retry_on as exc:
                if on_retry is not None:
                    on_retry(exc, self.delay)
                else:
                    logger.warning("%s; retrying in %s seconds...", exc, self.delay)
                self.wait()
                if self.exhausted:
                    raise RetriesExhausted(self.failures) from exc
