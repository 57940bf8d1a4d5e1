"""Bounded retry with exponential backoff, shared by outbound gateways."""

import random
from dataclasses import dataclass
from typing import Awaitable, Callable


def get_retry_delay(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    include_jitter: bool = True,
) -> float:
    """
    Calculate retry delay using exponential backoff with cap.

    Args:
        attempt: Zero-based attempt number (0 = first retry)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound before jitter
        include_jitter: Add random jitter to prevent thundering herd

    Returns:
        Delay in seconds (1, 2, 4, 8, 16, 32, 60, 60... with the defaults)
    """
    delay = min(base_delay * 2**attempt, max_delay)
    if include_jitter:
        # Jitter scales with delay to spread out retries
        return delay + random.uniform(0, delay * 0.1)
    return float(delay)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def delay_for(self, attempt: int) -> float:
        return get_retry_delay(attempt, self.base_delay, self.max_delay)


Sleep = Callable[[float], Awaitable[None]]
