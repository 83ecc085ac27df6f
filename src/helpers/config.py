"""Configuration management and environment variable utilities."""

import os

from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.helpers.constants import (
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_RPC_URL,
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
)
from src.helpers.http_models import RetryPolicy
from src.relays.constants import RELAY_ENDPOINTS
from src.relays.models import MultiPayloadPolicy


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ValueError: If the environment variable is not set

    Example:
        ```python
        from src.helpers.config import get_required_env

        rpc_url = get_required_env("ETH_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ValueError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Empty values count as unset.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key) or default


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL, falling back to a local execution node

    Example:
        ```python
        from src.helpers.config import get_eth_rpc_url

        # Get from environment
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://eth.llamarpc.com")
        ```
    """
    if rpc_url:
        return rpc_url
    return os.getenv("ETH_RPC_URL") or DEFAULT_RPC_URL


class RewardsConfig(BaseModel):
    """Settings for one reward computation run."""

    execution_endpoint: str = Field(default=DEFAULT_RPC_URL, min_length=1)
    relay_endpoints: list[str] = Field(default_factory=lambda: list(RELAY_ENDPOINTS))
    concurrency_limit: int = Field(default=DEFAULT_CONCURRENCY_LIMIT, ge=1)
    max_relay_requests: int | None = Field(
        default=None,
        ge=1,
        description="Cap on simultaneous relay requests, defaults to blocks x relays",
    )
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    multi_payload_policy: MultiPayloadPolicy = MultiPayloadPolicy.DISCARD
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("relay_endpoints")
    @classmethod
    def _dedupe_endpoints(cls, endpoints: list[str]) -> list[str]:
        cleaned = [endpoint.strip().rstrip("/") for endpoint in endpoints]
        return list(dict.fromkeys(endpoint for endpoint in cleaned if endpoint))

    @property
    def relay_request_limit(self) -> int:
        """Maximum number of relay requests in flight across all blocks."""
        if self.max_relay_requests is not None:
            return self.max_relay_requests
        return max(1, self.concurrency_limit * len(self.relay_endpoints))


def _parse_max_retries(value: str) -> int | None:
    if value.strip().lower() in {"none", "inf", "infinite"}:
        return None
    return int(value)


def load_config(**overrides: Any) -> RewardsConfig:
    """Build the run configuration from the environment.

    Recognised variables: ETH_RPC_URL, RELAY_ENDPOINTS (comma separated),
    CONCURRENCY_LIMIT, MAX_RELAY_REQUESTS, RELAY_MAX_RETRIES ("none" retries
    forever), RELAY_RETRY_BASE_DELAY, RELAY_RETRY_MAX_DELAY,
    RELAY_RETRY_DEADLINE, MULTI_PAYLOAD_POLICY and REQUEST_TIMEOUT.

    Args:
        **overrides: Field values taking precedence over the environment,
            None values are ignored

    Returns:
        Validated RewardsConfig

    Raises:
        pydantic.ValidationError: If a setting is out of range
        ValueError: If a numeric variable cannot be parsed

    Example:
        ```python
        from src.helpers.config import load_config

        config = load_config(concurrency_limit=10)
        ```
    """
    settings: dict[str, Any] = {"execution_endpoint": get_eth_rpc_url()}

    if relays := get_optional_env("RELAY_ENDPOINTS"):
        settings["relay_endpoints"] = relays.split(",")
    if concurrency := get_optional_env("CONCURRENCY_LIMIT"):
        settings["concurrency_limit"] = int(concurrency)
    if max_requests := get_optional_env("MAX_RELAY_REQUESTS"):
        settings["max_relay_requests"] = int(max_requests)
    if policy := get_optional_env("MULTI_PAYLOAD_POLICY"):
        settings["multi_payload_policy"] = policy.strip().lower()
    if timeout := get_optional_env("REQUEST_TIMEOUT"):
        settings["request_timeout"] = float(timeout)

    retry: dict[str, Any] = {}
    if max_retries := get_optional_env("RELAY_MAX_RETRIES"):
        retry["max_retries"] = _parse_max_retries(max_retries)
    if base_delay := get_optional_env("RELAY_RETRY_BASE_DELAY"):
        retry["base_delay"] = float(base_delay)
    if max_delay := get_optional_env("RELAY_RETRY_MAX_DELAY"):
        retry["max_delay"] = float(max_delay)
    if deadline := get_optional_env("RELAY_RETRY_DEADLINE"):
        retry["deadline"] = float(deadline)
    if retry.get("max_retries", MAX_RETRIES) is None and "max_delay" not in retry:
        # Retrying forever keeps a constant delay between attempts
        fixed = RetryPolicy.fixed(retry.get("base_delay", RETRY_BASE_DELAY))
        retry = {**fixed.model_dump(), "deadline": retry.get("deadline")}
    if retry:
        settings["retry_policy"] = retry

    settings.update({key: value for key, value in overrides.items() if value is not None})
    return RewardsConfig.model_validate(settings)


__all__ = [
    "RewardsConfig",
    "get_eth_rpc_url",
    "get_optional_env",
    "get_required_env",
    "load_config",
]
