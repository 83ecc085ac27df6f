"""Drive the assembler over a range of blocks with bounded parallelism."""

import asyncio
from collections.abc import AsyncIterator

from src.helpers.constants import DEFAULT_CONCURRENCY_LIMIT
from src.helpers.logging import get_logger
from src.rewards.assembler import BlockRewardAssembler
from src.rewards.errors import BlockRewardError
from src.rewards.models import BlockReward, BlockRewardFailure


logger = get_logger(__name__)


def _failure(block_number: int, error: Exception) -> BlockRewardFailure:
    reason = error.reason if isinstance(error, BlockRewardError) else str(error)
    return BlockRewardFailure(
        block_number=block_number,
        error_type=type(error).__name__,
        reason=reason,
    )


class RangeScheduler:
    """Processes block ranges in chunks of ``concurrency_limit`` blocks.

    Each block fans out to every relay, so at most
    ``concurrency_limit * relay count`` relay requests are issued at once.
    """

    def __init__(
        self,
        assembler: BlockRewardAssembler,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    ) -> None:
        if concurrency_limit < 1:
            msg = "concurrency_limit must be at least 1"
            raise ValueError(msg)
        self.assembler = assembler
        self.concurrency_limit = concurrency_limit

    async def _process(self, block_number: int) -> BlockReward | BlockRewardFailure:
        try:
            return await self.assembler.assemble(block_number)
        except Exception as e:
            logger.error("Failed to compute reward for block %d: %s", block_number, e)
            return _failure(block_number, e)

    async def run(
        self, from_block: int, to_block: int
    ) -> AsyncIterator[BlockReward | BlockRewardFailure]:
        """Yield one result per block of ``[from_block, to_block]``, ascending.

        A failing block yields a BlockRewardFailure and never affects the
        other blocks of its chunk.

        Args:
            from_block: First block height (inclusive)
            to_block: Last block height (inclusive)

        Yields:
            BlockReward or BlockRewardFailure, ordered by block number

        Raises:
            ValueError: If the range is empty or negative
        """
        if from_block < 0 or to_block < from_block:
            msg = f"Invalid block range {from_block}..{to_block}"
            raise ValueError(msg)

        for chunk_start in range(from_block, to_block + 1, self.concurrency_limit):
            chunk_end = min(chunk_start + self.concurrency_limit, to_block + 1)
            results = await asyncio.gather(*[
                self._process(block_number)
                for block_number in range(chunk_start, chunk_end)
            ])
            for result in sorted(results, key=lambda r: r.block_number):
                yield result


__all__ = ["RangeScheduler"]
