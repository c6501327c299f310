"""Exponential backoff with jitter.

Used by the retry engine when the server provides no retry hint.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Optional

from tenacity import RetryCallState
from tenacity.wait import wait_base

if TYPE_CHECKING:
    from fetchwise.domain.config.retry import RetryConfig

# Lower bound of any delay between attempts, in seconds
MIN_DELAY = 1.0


def compute_delay(
    attempt: int,
    base: float,
    cap: float,
    multiplier: float,
    jitter: float,
    rng: Optional[random.Random] = None,
) -> float:
    """Compute the delay before the next attempt.

    The unjittered delay is ``min(cap, base * multiplier ** attempt)``. Jitter
    interpolates between that value (jitter=0) and a uniform draw over
    ``[0, value]`` (jitter=1). The result never drops below ``MIN_DELAY`` and
    never exceeds ``cap`` (the floor wins if ``cap < MIN_DELAY``).

    Args:
        attempt: Number of retries already performed, starting from 0
        base: Initial delay in seconds
        cap: Maximum delay in seconds
        multiplier: Exponential backoff multiplier
        jitter: Jitter factor between 0.0 and 1.0
        rng: Random source (module-level ``random`` if None)

    Returns:
        Delay in seconds
    """
    rng = rng or random
    try:
        exponential = min(cap, base * multiplier ** attempt)
    except OverflowError:
        exponential = cap
    delay = rng.uniform(exponential * (1.0 - jitter), exponential)
    return max(MIN_DELAY, min(cap, delay))


class wait_backoff_jitter(wait_base):
    """Tenacity wait strategy backed by :func:`compute_delay`."""

    def __init__(self, config: RetryConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_delay(
            attempt=retry_state.attempt_number - 1,
            base=self.config.delay_min,
            cap=self.config.delay_max,
            multiplier=self.config.backoff_multiplier,
            jitter=self.config.jitter,
            rng=self.rng,
        )
