"""Fixed-delay retry for throttled destination calls."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from src.errors import DestinationError, RetryExhaustedError

logger = logging.getLogger(__name__)

THROTTLING_CODES = frozenset({
    "ThrottlingException",
    "Throttling",
    "SlowDown",
    "RequestLimitExceeded",
    "TooManyRequestsException",
})
THROTTLING_MESSAGE = "Rate exceeded"


@dataclass(frozen=True)
class RetryPolicy:
    """How long to keep retrying throttled calls.

    A zero ``max_attempts`` or ``max_duration_seconds`` leaves that limit off,
    so the default policy retries until the destination stops throttling.
    """

    delay_seconds: float = 1.0
    max_attempts: int = 0
    max_duration_seconds: float = 0.0

    def exhausted(self, attempts: int, elapsed: float) -> bool:
        if self.max_attempts and attempts >= self.max_attempts:
            return True
        if self.max_duration_seconds and elapsed + self.delay_seconds > self.max_duration_seconds:
            return True
        return False


def is_throttling(exc: Exception) -> bool:
    """True if the error is a rate-limit response worth retrying."""
    if not isinstance(exc, ClientError):
        return False
    error = exc.response.get("Error", {})
    if error.get("Code") in THROTTLING_CODES:
        return True
    return THROTTLING_MESSAGE in str(error.get("Message", "")) or THROTTLING_MESSAGE in str(exc)


def call_with_retry(
    operation: Callable[..., Any],
    policy: RetryPolicy,
    *,
    description: str,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    **kwargs,
) -> Any:
    """Call ``operation(**kwargs)``, retrying throttled calls with the same kwargs.

    Raises RetryExhaustedError when the policy runs out, and DestinationError
    for any other AWS failure.
    """
    started = clock()
    attempts = 0
    while True:
        attempts += 1
        try:
            return operation(**kwargs)
        except (ClientError, BotoCoreError) as e:
            if not is_throttling(e):
                raise DestinationError(f"Error occurred to {description}: {e}") from e
            elapsed = clock() - started
            if policy.exhausted(attempts, elapsed):
                raise RetryExhaustedError(
                    f"Gave up to {description} after {attempts} throttled attempts "
                    f"({elapsed:.1f}s): {e}"
                ) from e
            logger.warning(
                "Throttled while trying to %s (attempt %d), retrying in %.1fs",
                description, attempts, policy.delay_seconds,
            )
            sleep(policy.delay_seconds)
