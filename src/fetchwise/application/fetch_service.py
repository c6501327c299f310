"""Fetch service - entry point combining retry and pagination"""

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from fetchwise.application.pagination_service import PaginationEngine
from fetchwise.domain.config.app import FetchConfig
from fetchwise.domain.config.paginate import PaginateConfig
from fetchwise.domain.models.events import PageHandler, RetryHandler
from fetchwise.infrastructure.cancellation import CancellationToken
from fetchwise.infrastructure.http_client import RequestsTransport, Transport
from fetchwise.infrastructure.retry import RetryEngine

logger = logging.getLogger(__name__)


class FetchClient:
    """HTTP client wrapper with retry and Link header pagination

    Configuration is validated once at construction and never changes. Each
    call keeps its own attempt counters and responses, so one client can be
    shared between threads.
    """

    def __init__(
        self,
        config: Optional[Union[FetchConfig, Dict[str, Any]]] = None,
        *,
        session: Optional[requests.Session] = None,
        transport: Optional[Transport] = None,
        on_retry: Optional[RetryHandler] = None,
        on_page: Optional[PageHandler] = None,
    ):
        """Initialize client

        Args:
            config: FetchConfig or dict with the same structure (defaults if None)
            session: Session used to prepare (and, by default, send) requests
            transport: Custom transport (defaults to RequestsTransport over ``session``)
            on_retry: Optional callback receiving a RetryEvent before each retry
            on_page: Optional callback receiving a PageEvent after each page

        Raises:
            pydantic.ValidationError: If configuration is invalid
        """
        if config is None:
            config = FetchConfig()
        elif isinstance(config, dict):
            config = FetchConfig(**config)
        self.config: FetchConfig = config
        self.session = session or requests.Session()
        self.transport: Transport = transport or RequestsTransport(self.session)
        self.on_retry = on_retry
        self.on_page = on_page
        self._retry_engine = RetryEngine(self.config.retry, self.transport, on_retry=on_retry)

        logger.debug(
            f"FetchClient initialized: max_attempts={self.config.retry.max_attempts}, "
            f"max_pages={self.config.paginate.max_pages}, timeout={self.config.timeout}"
        )

    def _token(self, token: Optional[CancellationToken]) -> CancellationToken:
        # A caller token always wins over the configured timeout
        if token is not None:
            return token
        return CancellationToken.with_timeout(self.config.timeout)

    def _build_request(self, method: str, url: str, request_kwargs: Dict[str, Any]) -> requests.Request:
        headers = dict(request_kwargs.pop("headers", None) or {})
        if self.config.user_agent and not any(k.lower() == "user-agent" for k in headers):
            headers["User-Agent"] = self.config.user_agent
        return requests.Request(method=method.upper(), url=url, headers=headers, **request_kwargs)

    def _paginate_config(
        self, override: Optional[Union[PaginateConfig, Dict[str, Any]]]
    ) -> PaginateConfig:
        if override is None:
            return self.config.paginate
        if isinstance(override, PaginateConfig):
            override = override.model_dump(exclude_unset=True)
        merged = {**self.config.paginate.model_dump(), **override}
        return PaginateConfig(**merged)

    def fetch(
        self,
        url: str,
        method: str = "GET",
        *,
        token: Optional[CancellationToken] = None,
        **request_kwargs: Any,
    ) -> requests.Response:
        """Fetch a resource with retry

        Args:
            url: URL of the resource
            method: HTTP method
            token: Cancellation token (configured timeout is ignored if given)
            **request_kwargs: Passed to ``requests.Request`` (headers, params,
                data, json, auth, ...)

        Returns:
            Last response received (error statuses are not raised)

        Raises:
            OperationCancelled: If cancelled or timed out
            requests.RequestException: On transport errors
        """
        token = self._token(token)
        request = self._build_request(method, url, request_kwargs)
        prepared = self.session.prepare_request(request)
        return self._retry_engine.execute(prepared, token)

    def fetch_paginate(
        self,
        url: str,
        method: str = "GET",
        *,
        paginate: Optional[Union[PaginateConfig, Dict[str, Any]]] = None,
        token: Optional[CancellationToken] = None,
        **request_kwargs: Any,
    ) -> List[requests.Response]:
        """Fetch paginated resources with retry; GraphQL is not supported

        Args:
            url: URL of the first page
            method: HTTP method used for every page
            paginate: Pagination overrides for this call only
            token: Cancellation token (configured timeout is ignored if given)
            **request_kwargs: Passed to ``requests.Request`` for every page

        Returns:
            Responses in page order

        Raises:
            PaginationError: On a malformed Link header with ``fail_on_bad_link_header``
            OperationCancelled: If cancelled or timed out
            requests.RequestException: On transport errors
        """
        paginate_config = self._paginate_config(paginate)
        token = self._token(token)
        request = self._build_request(method, url, request_kwargs)
        engine = PaginationEngine(self._retry_engine, paginate_config, on_page=self.on_page)
        return engine.execute(request, token, self.session)


def fetch(
    url: str,
    method: str = "GET",
    *,
    config: Optional[Union[FetchConfig, Dict[str, Any]]] = None,
    on_retry: Optional[RetryHandler] = None,
    token: Optional[CancellationToken] = None,
    **request_kwargs: Any,
) -> requests.Response:
    """Fetch a resource with retry using a one-off client"""
    client = FetchClient(config, on_retry=on_retry)
    return client.fetch(url, method, token=token, **request_kwargs)


def fetch_paginate(
    url: str,
    method: str = "GET",
    *,
    config: Optional[Union[FetchConfig, Dict[str, Any]]] = None,
    on_retry: Optional[RetryHandler] = None,
    on_page: Optional[PageHandler] = None,
    token: Optional[CancellationToken] = None,
    **request_kwargs: Any,
) -> List[requests.Response]:
    """Fetch paginated resources with retry using a one-off client"""
    client = FetchClient(config, on_retry=on_retry, on_page=on_page)
    return client.fetch_paginate(url, method, token=token, **request_kwargs)
