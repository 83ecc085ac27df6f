"""Type definitions for HTTP responses and retry behaviour."""

from pydantic import BaseModel, ConfigDict, Field

from src.helpers.constants import MAX_RETRIES, RETRY_BASE_DELAY, RETRY_MAX_DELAY


class RetryPolicy(BaseModel):
    """Retry schedule applied to transient network failures."""

    max_retries: int | None = Field(
        default=MAX_RETRIES,
        ge=1,
        description="Maximum attempts, None retries until cancelled",
    )
    base_delay: float = Field(
        default=RETRY_BASE_DELAY, ge=0, description="First backoff delay in seconds"
    )
    max_delay: float = Field(
        default=RETRY_MAX_DELAY, ge=0, description="Upper bound for a single delay"
    )
    deadline: float | None = Field(
        default=None,
        gt=0,
        description="Give up once this many seconds have elapsed since the first attempt",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def fixed(cls, delay: float) -> "RetryPolicy":
        """Retry forever with a constant delay between attempts."""
        return cls(max_retries=None, base_delay=delay, max_delay=delay)


__all__ = ["RetryPolicy"]
