"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(..., description="Request ID")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response model."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: dict[str, Any] | None = None


class EthBlockNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_blockNumber."""

    method: str = Field(default="eth_blockNumber", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockByNumber with full transactions."""

    method: str = Field(default="eth_getBlockByNumber", frozen=True)

    @classmethod
    def for_block(cls, block_number: int, request_id: int = 1) -> "EthGetBlockByNumberRequest":
        return cls(params=[hex(block_number), True], id=request_id)


class EthGetBlockReceiptsRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockReceipts."""

    method: str = Field(default="eth_getBlockReceipts", frozen=True)

    @classmethod
    def for_block(cls, block_number: int, request_id: int = 1) -> "EthGetBlockReceiptsRequest":
        return cls(params=[hex(block_number)], id=request_id)


__all__ = [
    "EthBlockNumberRequest",
    "EthGetBlockByNumberRequest",
    "EthGetBlockReceiptsRequest",
    "JsonRpcRequest",
    "JsonRpcResponse",
]
