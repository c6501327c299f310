"""fetchwise - HTTP requests with retry and Link header pagination"""

__version__ = "0.1.0"

from fetchwise.application.fetch_service import FetchClient, fetch, fetch_paginate
from fetchwise.application.pagination_service import PaginationEngine, PaginationError
from fetchwise.domain.config import FetchConfig, PaginateConfig, RetryConfig
from fetchwise.domain.models.events import PageEvent, RetryEvent
from fetchwise.infrastructure.cancellation import CancellationToken, FetchTimeout, OperationCancelled
from fetchwise.infrastructure.link_header import LinkEntry, LinkHeader, LinkHeaderError
from fetchwise.infrastructure.retry import RETRYABLE_STATUS_CODES, RetryEngine

__all__ = [
    "__version__",
    "CancellationToken",
    "FetchClient",
    "FetchConfig",
    "FetchTimeout",
    "LinkEntry",
    "LinkHeader",
    "LinkHeaderError",
    "OperationCancelled",
    "PageEvent",
    "PaginateConfig",
    "PaginationEngine",
    "PaginationError",
    "RETRYABLE_STATUS_CODES",
    "RetryConfig",
    "RetryEngine",
    "RetryEvent",
    "fetch",
    "fetch_paginate",
]
