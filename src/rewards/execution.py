"""Execution layer data access for reward computation."""

import httpx
from pydantic import TypeAdapter

from src.helpers.rpc import RPCClient
from src.helpers.rpc_models import EthGetBlockByNumberRequest, EthGetBlockReceiptsRequest
from src.rewards.errors import BlockRewardError
from src.rewards.models import ExecutionBlock, TransactionReceipt


_receipts_adapter = TypeAdapter(list[TransactionReceipt])


class ExecutionDataClient:
    """Fetches blocks and receipts from an execution node.

    The HTTP client is shared across concurrent block computations; every
    call only reads from the node.
    """

    def __init__(self, rpc: RPCClient, client: httpx.AsyncClient) -> None:
        self.rpc = rpc
        self.client = client

    async def get_block_with_transactions(self, block_number: int) -> ExecutionBlock:
        """Fetch a block with full transaction objects.

        Raises:
            BlockRewardError: If the node does not know the block
        """
        result = await self.rpc.send(
            self.client, EthGetBlockByNumberRequest.for_block(block_number)
        )
        if result is None:
            raise BlockRewardError(block_number, "block not found on execution node")
        return ExecutionBlock.model_validate(result)

    async def get_block_receipts(self, block_number: int) -> list[TransactionReceipt]:
        """Fetch the receipts of every transaction in a block, in block order.

        Raises:
            BlockRewardError: If the node returns no receipts for the block
        """
        result = await self.rpc.send(
            self.client, EthGetBlockReceiptsRequest.for_block(block_number)
        )
        if result is None:
            raise BlockRewardError(block_number, "receipts not found on execution node")
        return _receipts_adapter.validate_python(result)


__all__ = ["ExecutionDataClient"]
