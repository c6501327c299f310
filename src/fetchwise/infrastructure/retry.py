"""Retry engine built on tenacity.

Repeats a single logical request until it succeeds, the response is not
retryable, or the retry budget is spent. HTTP error statuses are returned, not
raised; only transport errors and cancellation propagate.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
)

from fetchwise.domain.config.retry import RetryConfig
from fetchwise.domain.models.events import RetryEvent, RetryHandler
from fetchwise.domain.models.outcome import (
    AttemptOutcome,
    RetryableFailure,
    Success,
    TerminalFailure,
)
from fetchwise.infrastructure.backoff import MIN_DELAY, wait_backoff_jitter
from fetchwise.infrastructure.cancellation import CancellationToken
from fetchwise.infrastructure.http_client import Transport
from fetchwise.infrastructure.retry_hint import read_retry_hint

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504, 506, 507, 508})


def is_retryable(status_code: int, config: RetryConfig) -> bool:
    """Check if a response status should be retried.

    A configured ``condition`` replaces the standard classification entirely.
    """
    retryable = status_code in RETRYABLE_STATUS_CODES
    if config.condition is not None:
        return bool(config.condition(status_code, retryable))
    return retryable


def is_success(status_code: int) -> bool:
    """Check for a 2xx status; redirects and 304 are not a success here"""
    return 200 <= status_code < 300


def classify_response(response: requests.Response, config: RetryConfig) -> AttemptOutcome:
    """Turn a response into an attempt outcome"""
    if is_retryable(response.status_code, config):
        return RetryableFailure(response, suggested_delay=read_retry_hint(response.headers))
    if is_success(response.status_code):
        return Success(response)
    return TerminalFailure(response)


class wait_retry_hint(wait_backoff_jitter):
    """Wait for the server's retry hint, falling back to backoff with jitter."""

    def __call__(self, retry_state: RetryCallState) -> float:
        delay: Optional[float] = None
        if retry_state.outcome is not None and not retry_state.outcome.failed:
            outcome = retry_state.outcome.result()
            if isinstance(outcome, RetryableFailure):
                delay = outcome.suggested_delay
        if delay is None:
            delay = super().__call__(retry_state)
        return max(MIN_DELAY, delay)


class RetryEngine:
    """Executes requests with retry on retryable status codes"""

    def __init__(
        self,
        config: RetryConfig,
        transport: Transport,
        on_retry: Optional[RetryHandler] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize retry engine

        Args:
            config: Retry configuration (read-only)
            transport: Transport used to send each attempt
            on_retry: Optional callback receiving a RetryEvent before each wait
            rng: Random source for jitter (module-level ``random`` if None)
        """
        self.config = config
        self.transport = transport
        self.on_retry = on_retry
        self.rng = rng

    def _attempt(self, request: requests.PreparedRequest, token: CancellationToken) -> AttemptOutcome:
        response = self.transport.send(request, token)
        return classify_response(response, self.config)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        if retry_state.outcome is None or retry_state.next_action is None:
            return
        response = retry_state.outcome.result().response
        delay = retry_state.next_action.sleep
        logger.warning(
            f"HTTP {response.status_code} from {response.url} "
            f"(attempt {retry_state.attempt_number}/{self.config.max_attempts}). "
            f"Retrying in {delay:.1f}s..."
        )
        if self.on_retry is not None:
            self.on_retry(
                RetryEvent(
                    attempt=retry_state.attempt_number,
                    max_attempts=self.config.max_attempts,
                    retry_after=delay,
                    status_code=response.status_code,
                    status_text=response.reason or "",
                )
            )

    def _on_exhausted(self, retry_state: RetryCallState) -> AttemptOutcome:
        outcome = retry_state.outcome.result()
        logger.error(
            f"HTTP {outcome.response.status_code} from {outcome.response.url} "
            f"after {self.config.max_attempts} retries, giving up"
        )
        return outcome

    def execute(self, request: requests.PreparedRequest, token: CancellationToken) -> requests.Response:
        """Send request, retrying retryable responses

        Args:
            request: Prepared request (sent unchanged on every attempt)
            token: Cancellation token of the operation

        Returns:
            Last response received

        Raises:
            OperationCancelled: If cancelled during an attempt or a wait
            requests.RequestException: On transport errors (not retried)
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts + 1),
            wait=wait_retry_hint(self.config, rng=self.rng),
            retry=retry_if_result(lambda outcome: isinstance(outcome, RetryableFailure)),
            sleep=token.sleep,
            before_sleep=self._before_sleep,
            retry_error_callback=self._on_exhausted,
            reraise=True,
        )
        outcome = retrying(self._attempt, request, token)
        return outcome.response
