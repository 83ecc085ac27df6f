"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

DEFAULT_RPC_URL = "http://localhost:8545"
"""Execution node JSON-RPC endpoint used when ETH_RPC_URL is not set"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of attempts per relay request"""

RETRY_BASE_DELAY = 15.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 120.0
"""Maximum delay between retries in seconds"""

RPC_MAX_RETRIES = 3
"""Maximum number of attempts per execution node request"""

RPC_RETRY_BASE_DELAY = 1.0
"""Base delay between execution node retries in seconds"""

# Concurrency Limits
DEFAULT_CONCURRENCY_LIMIT = 5
"""Default number of blocks processed at the same time"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 20
"""Maximum number of keepalive connections in pool"""

# Arithmetic
U256_MAX = 2**256 - 1
"""Largest value representable by an EVM word"""


__all__ = [
    "DEFAULT_CONCURRENCY_LIMIT",
    "DEFAULT_RPC_URL",
    "DEFAULT_TIMEOUT",
    "MAX_KEEPALIVE_CONNECTIONS",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "RPC_MAX_RETRIES",
    "RPC_RETRY_BASE_DELAY",
    "U256_MAX",
]
