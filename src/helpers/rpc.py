"""Ethereum JSON-RPC client utilities."""

from typing import Any

import httpx

from src.helpers.constants import DEFAULT_TIMEOUT, RPC_MAX_RETRIES, RPC_RETRY_BASE_DELAY
from src.helpers.http import retry_with_backoff
from src.helpers.parsers import parse_hex_int
from src.helpers.rpc_models import (
    EthBlockNumberRequest,
    JsonRpcRequest,
    JsonRpcResponse,
)


class RPCError(ValueError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, method: str, error: dict[str, Any]) -> None:
        self.method = method
        self.code = error.get("code")
        super().__init__(f"RPC error from {method}: {error}")


class RPCClient:
    """Ethereum JSON-RPC client."""

    def __init__(self, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout

    @retry_with_backoff(RPC_MAX_RETRIES, RPC_RETRY_BASE_DELAY)
    async def send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a JSON-RPC request and return its result.

        Transport failures are retried; an error object in the response is not.

        Args:
            client: HTTP client instance
            request: Request model to post
            timeout: Optional timeout override

        Returns:
            RPC result value

        Raises:
            RetriesExhaustedError: If the HTTP request keeps failing
            RPCError: If the RPC response contains an error
        """
        response = await client.post(
            self.rpc_url,
            json=request.model_dump(),
            timeout=timeout or self.timeout,
        )
        response.raise_for_status()
        result = JsonRpcResponse.model_validate(response.json())

        if result.error is not None:
            raise RPCError(request.method, result.error)

        return result.result

    async def call(
        self,
        client: httpx.AsyncClient,
        method: str,
        params: list[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            method: RPC method name (e.g., "eth_blockNumber")
            params: Method parameters list
            timeout: Optional timeout override

        Returns:
            RPC result value
        """
        request = JsonRpcRequest(method=method, params=params or [], id=1)
        return await self.send(client, request, timeout=timeout)

    async def get_block_number(self, client: httpx.AsyncClient) -> int:
        """Get the latest block number.

        Args:
            client: HTTP client instance

        Returns:
            Latest block number
        """
        result = await self.send(client, EthBlockNumberRequest(id=1))
        return parse_hex_int(result)


__all__ = [
    "RPCClient",
    "RPCError",
]
