"""Combine relay data and execution data into one record per block."""

import asyncio

from src.relays.aggregator import RelayAggregator
from src.rewards.calculator import RewardCalculator
from src.rewards.models import BlockReward


class BlockRewardAssembler:
    """Builds the BlockReward of a single block."""

    def __init__(self, aggregator: RelayAggregator, calculator: RewardCalculator) -> None:
        self.aggregator = aggregator
        self.calculator = calculator

    async def assemble(self, block_number: int) -> BlockReward:
        """Query relays and the execution node for a block and merge the results.

        The MEV reward is the value of the first relay to answer; the full
        list of responses and their consistency are kept on the record.

        Args:
            block_number: Execution block height

        Returns:
            BlockReward for the block

        Raises:
            BlockRewardError: If the vanilla reward cannot be computed
        """
        relays_task = asyncio.create_task(self.aggregator.aggregate(block_number))
        try:
            vanilla = await self.calculator.compute_vanilla_reward(block_number)
        except BaseException:
            # Relay retries must not outlive a block that already failed
            relays_task.cancel()
            raise
        aggregation = await relays_task

        responses = aggregation.responses
        return BlockReward(
            block_number=block_number,
            proposer_reward=str(vanilla.proposer_reward),
            fee_recipient=vanilla.fee_recipient,
            mev_reward=responses[0].value if responses else "",
            relay_responses=responses,
            consistency=aggregation.consistency,
            failed_relays=aggregation.failed_relays,
        )


__all__ = ["BlockRewardAssembler"]
