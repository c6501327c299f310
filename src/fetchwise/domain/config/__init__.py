"""Configuration models with Pydantic validation."""

from fetchwise.domain.config.app import DEFAULT_USER_AGENT, FetchConfig
from fetchwise.domain.config.paginate import PaginateConfig
from fetchwise.domain.config.retry import RetryConfig

__all__ = [
    "DEFAULT_USER_AGENT",
    "FetchConfig",
    "PaginateConfig",
    "RetryConfig",
]
