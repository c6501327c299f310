"""Main client configuration model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fetchwise import __version__
from fetchwise.domain.config.paginate import PaginateConfig
from fetchwise.domain.config.retry import RetryConfig

DEFAULT_USER_AGENT = f"fetchwise/{__version__}"


class FetchConfig(BaseModel):
    """Client configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at construction time to fail fast on configuration errors.

    Attributes:
        retry: Retry logic configuration
        paginate: Pagination configuration
        timeout: Overall timeout of an operation (retries and pages included),
            in seconds. Ignored when the caller passes its own cancellation token.
        user_agent: Default User-Agent header (None = leave to transport)
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)
    paginate: PaginateConfig = Field(default_factory=PaginateConfig)
    timeout: Optional[float] = Field(None, gt=0.0)
    user_agent: Optional[str] = DEFAULT_USER_AGENT

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "retry": {
                    "max_attempts": 4,
                    "backoff_multiplier": 2.0,
                    "delay_min": 1.0,
                    "delay_max": 60.0,
                    "jitter": 1.0,
                },
                "paginate": {
                    "max_pages": None,
                    "pause": 0.0,
                    "fail_on_bad_link_header": True,
                },
                "timeout": 300.0,
                "user_agent": DEFAULT_USER_AGENT,
            }
        },
    )
