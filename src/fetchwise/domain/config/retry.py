"""Retry configuration model."""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RetryCondition = Callable[[int, bool], bool]


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    Backoff settings only apply when the server gives no retry hint
    (``Retry-After`` / ``X-RateLimit-Reset``) in the response.

    Attributes:
        max_attempts: Maximum number of retries after the first request
        backoff_multiplier: Exponential backoff multiplier
        delay_min: Initial and minimum delay between attempts, in seconds
        delay_max: Maximum delay between attempts, in seconds
        jitter: Amount of jitter (0.0 = none, 1.0 = full jitter)
        condition: Optional ``(status_code, retryable) -> bool`` that replaces
            the standard retryable status classification
    """

    max_attempts: int = Field(4, ge=0)
    backoff_multiplier: float = Field(2.0, ge=1.0)
    delay_min: float = Field(1.0, gt=0.0)
    delay_max: float = Field(60.0, gt=0.0)
    jitter: float = Field(1.0, ge=0.0, le=1.0)
    condition: Optional[RetryCondition] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("condition")
    @classmethod
    def _check_condition(cls, value: Optional[RetryCondition]) -> Optional[RetryCondition]:
        if value is None:
            return value
        probe = value(500, True)
        if not isinstance(probe, bool):
            raise ValueError(f"condition must return bool, got {type(probe).__name__}")
        return value

    @model_validator(mode="after")
    def _check_delay_range(self) -> "RetryConfig":
        if self.delay_min >= self.delay_max:
            raise ValueError(
                f"delay_min ({self.delay_min}) must be less than delay_max ({self.delay_max})"
            )
        return self
