"""Events emitted while retrying and paginating"""

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class RetryEvent:
    """A retry is about to happen

    Attributes:
        attempt: Current attempt, starting from 1
        max_attempts: Configured maximum amount of retries
        retry_after: Delay before the next attempt, in seconds
        status_code: Status code of the response that triggered the retry
        status_text: Reason phrase of that response
    """

    attempt: int
    max_attempts: int
    retry_after: float
    status_code: int
    status_text: str


@dataclass(frozen=True)
class PageEvent:
    """A page was fetched and the next page URL resolved

    Attributes:
        page: Number of the page just fetched, starting from 1
        max_pages: Configured page limit (None = unlimited)
        current_url: URL of the page just fetched
        next_url: URL of the page that will be fetched next
    """

    page: int
    max_pages: Optional[int]
    current_url: str
    next_url: str


RetryHandler = Callable[[RetryEvent], None]
PageHandler = Callable[[PageEvent], None]
