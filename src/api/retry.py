"""Bounded retry with linear backoff for idempotent host actions."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type

import backoff

from config.api import APIConfig

from .error_handling import RetryExhaustedError, TransientNetworkError, categorize_error


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts an operation gets and how long to wait between them.

    ``max_attempts`` counts the initial attempt, so a policy built from a
    retry count of 5 allows 6 attempts in total.
    """

    max_attempts: int = APIConfig.GRAVITY_UPDATE_RETRY_COUNT + 1
    base_delay: float = APIConfig.RETRY_BASE_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    @classmethod
    def from_retry_count(cls, retry_count: int, base_delay: float = APIConfig.RETRY_BASE_DELAY) -> "RetryPolicy":
        return cls(max_attempts=retry_count + 1, base_delay=base_delay)


def linear(base: float = 1.0):
    """Wait generator for ``backoff``: base, 2 * base, 3 * base, ..."""
    # Advance past the initial send() backoff makes to prime the generator
    yield
    attempt = 1
    while True:
        yield attempt * base
        attempt += 1


class RetryExecutor:
    """Drive a zero-argument async operation through a :class:`RetryPolicy`.

    ``TransientNetworkError`` triggers a wait and another attempt; any other
    exception propagates immediately. Once the budget is spent the
    ``exhausted_error`` type is raised with the total number of attempts.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        logger_obj: Optional[logging.Logger] = None,
        exhausted_error: Type[RetryExhaustedError] = RetryExhaustedError,
    ):
        self.policy = policy
        self.logger = logger_obj or logging.getLogger(__name__)
        self.exhausted_error = exhausted_error

    def _backoff_handler(self, details):
        """Handler for logging backoff attempts with error categorization."""
        exception = details["exception"]
        error_category = categorize_error(exception)
        self.logger.warning(
            f"Backing off {details['wait']:.1f}s after {error_category.value} error "
            f"(attempt {details['tries']}/{self.policy.max_attempts}): {exception}"
        )

    async def run(self, operation: Callable[[], Awaitable[bool]], host, path: str) -> bool:
        """
        Run ``operation`` until it succeeds, fails hard, or the budget is spent.

        Args:
            operation: Zero-argument coroutine function returning a bool
            host: Host the operation targets, used for error attribution
            path: Request path of the operation, used for error attribution

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: (or the configured subclass) after
                ``policy.max_attempts`` transient failures
        """
        attempts = {"count": 0}

        def on_giveup(details):
            attempts["count"] = details["tries"]
            self.logger.error(
                f"Exhausted retries waiting for {host.full_url} to be up after {details['tries']} attempts. "
                f"Check the server!"
            )

        @backoff.on_exception(
            linear,
            TransientNetworkError,
            max_tries=self.policy.max_attempts,
            jitter=None,
            on_backoff=self._backoff_handler,
            on_giveup=on_giveup,
            base=self.policy.base_delay,
        )
        async def retrying() -> bool:
            return await operation()

        try:
            return await retrying()
        except TransientNetworkError as e:
            raise self.exhausted_error(
                host, path, attempts["count"] or self.policy.max_attempts, last_error=e
            ) from e
