"""HTTP transport used by the retry engine.

We keep the network call behind a small protocol so the retry and pagination
logic never depends on a concrete client.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from fetchwise.infrastructure.cancellation import CancellationToken, FetchTimeout

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Sends one prepared request and returns the response."""

    def send(self, request: requests.PreparedRequest, token: CancellationToken) -> requests.Response:
        ...


class RequestsTransport:
    """Transport backed by a ``requests.Session``"""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        """Initialize transport

        Args:
            session: Session to send requests with (a new one if None)
            timeout: Per-request timeout in seconds (None = no limit besides
                the operation deadline)
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def _effective_timeout(self, token: CancellationToken) -> Optional[float]:
        remaining = token.remaining()
        if remaining is None:
            return self.timeout
        if self.timeout is None:
            return remaining
        return min(self.timeout, remaining)

    def send(self, request: requests.PreparedRequest, token: CancellationToken) -> requests.Response:
        """Send request, honoring the token's cancellation and deadline

        Raises:
            OperationCancelled: If the token is cancelled before or during the send
            FetchTimeout: If the operation deadline passes
            requests.RequestException: On network errors
        """
        token.raise_if_cancelled()
        timeout = self._effective_timeout(token)
        logger.debug(f"HTTP {request.method} {request.url}")
        try:
            response = self.session.send(request, timeout=timeout)
        except requests.exceptions.Timeout as e:
            if token.expired:
                raise FetchTimeout(f"Operation timed out during {request.method} {request.url}") from e
            raise
        token.raise_if_cancelled()
        return response
