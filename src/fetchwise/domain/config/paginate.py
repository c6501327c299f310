"""Pagination configuration model."""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaginateConfig(BaseModel):
    """Configuration for Link header pagination.

    Attributes:
        max_pages: Maximum number of pages to fetch (None = unlimited)
        pause: Pause between page requests, in seconds
        next_page_resolver: Optional ``(current_url, link_header) -> next_url``
            for endpoints that do not return a usable ``rel="next"`` link
        fail_on_bad_link_header: Raise when a page has a malformed Link header
            instead of stopping quietly
    """

    max_pages: Optional[int] = Field(None, gt=0)
    pause: float = Field(0.0, ge=0.0)
    next_page_resolver: Optional[Callable[..., Optional[str]]] = None
    fail_on_bad_link_header: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")
