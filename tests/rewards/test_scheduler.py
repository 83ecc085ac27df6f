"""Tests for the block range scheduler."""

import asyncio

import pytest

from src.rewards.errors import ReceiptMismatchError
from src.rewards.models import BlockReward, BlockRewardFailure
from src.rewards.scheduler import RangeScheduler


class FakeAssembler:
    """Finishes higher blocks first and records how many run at once."""

    def __init__(self, failing: dict[int, Exception] | None = None) -> None:
        self.failing = failing or {}
        self.running = 0
        self.max_running = 0
        self.completed: list[int] = []

    async def assemble(self, block_number: int) -> BlockReward:
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep((200 - block_number) * 0.002)
            if block_number in self.failing:
                raise self.failing[block_number]
            self.completed.append(block_number)
            return BlockReward(
                block_number=block_number,
                proposer_reward=str(block_number * 10),
                fee_recipient="0xfee",
            )
        finally:
            self.running -= 1


async def _collect(
    scheduler: RangeScheduler, from_block: int, to_block: int
) -> list[BlockReward | BlockRewardFailure]:
    return [result async for result in scheduler.run(from_block, to_block)]


class TestRangeScheduler:
    """Tests for RangeScheduler.run."""

    @pytest.mark.asyncio
    async def test_ordered_output_with_bounded_concurrency(self) -> None:
        """Test [100, 104] with limit 2 yields 5 ascending records."""
        assembler = FakeAssembler()
        scheduler = RangeScheduler(assembler, concurrency_limit=2)  # type: ignore[arg-type]

        results = await _collect(scheduler, 100, 104)

        assert [r.block_number for r in results] == [100, 101, 102, 103, 104]
        assert all(isinstance(r, BlockReward) for r in results)
        assert assembler.max_running <= 2
        # Within a chunk the higher block finishes first
        assert assembler.completed[:2] == [101, 100]

    @pytest.mark.asyncio
    async def test_single_block(self) -> None:
        results = await _collect(RangeScheduler(FakeAssembler()), 7, 7)  # type: ignore[arg-type]
        assert [r.block_number for r in results] == [7]

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self) -> None:
        """Test a failing block yields a failure entry and siblings still complete."""
        assembler = FakeAssembler(
            failing={
                102: ReceiptMismatchError(102, "receipt 3 is for 0xb, expected 0xa"),
                103: RuntimeError("node went away"),
            }
        )
        scheduler = RangeScheduler(assembler, concurrency_limit=5)  # type: ignore[arg-type]

        results = await _collect(scheduler, 100, 104)

        assert [r.block_number for r in results] == [100, 101, 102, 103, 104]
        failure = results[2]
        assert isinstance(failure, BlockRewardFailure)
        assert failure.error_type == "ReceiptMismatchError"
        assert failure.reason == "receipt 3 is for 0xb, expected 0xa"
        assert isinstance(results[3], BlockRewardFailure)
        assert results[3].error_type == "RuntimeError"
        assert isinstance(results[4], BlockReward)

    @pytest.mark.asyncio
    async def test_invalid_range(self) -> None:
        scheduler = RangeScheduler(FakeAssembler())  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="Invalid block range"):
            await _collect(scheduler, 10, 5)

    def test_invalid_concurrency(self) -> None:
        with pytest.raises(ValueError, match="concurrency_limit"):
            RangeScheduler(FakeAssembler(), concurrency_limit=0)  # type: ignore[arg-type]
