"""Vanilla proposer reward: priority fees collected minus base fee burnt."""

import asyncio

from src.helpers.constants import U256_MAX
from src.helpers.logging import get_logger
from src.rewards.errors import (
    ArithmeticOverflowError,
    BlockNumberMismatchError,
    MissingFieldError,
    NegativeRewardError,
    ReceiptMismatchError,
)
from src.rewards.execution import ExecutionDataClient
from src.rewards.models import (
    ExecutionBlock,
    FeeScheme,
    Transaction,
    TransactionReceipt,
    VanillaReward,
)


logger = get_logger(__name__)


def saturating_add(a: int, b: int, ceiling: int) -> int:
    """Add two amounts, never exceeding ``ceiling``.

    Example:
        >>> saturating_add(2, 10, 11)
        11
    """
    return min(a + b, ceiling)


def checked_u256(block_number: int, value: int, what: str) -> int:
    """Return ``value`` if it fits an unsigned 256-bit word.

    Raises:
        ArithmeticOverflowError: If the value is negative or too large
    """
    if not 0 <= value <= U256_MAX:
        msg = f"{what} out of uint256 range: {value}"
        raise ArithmeticOverflowError(block_number, msg)
    return value


def _require(block_number: int, value: int | None, field: str, tx_hash: str) -> int:
    if value is None:
        raise MissingFieldError(block_number, f"transaction {tx_hash} has no {field}")
    return value


def transaction_tip(
    block_number: int,
    tx: Transaction,
    receipt: TransactionReceipt,
    base_fee_per_gas: int,
) -> int:
    """Fees paid by one transaction, before the base fee is burnt.

    Legacy, access list and unknown envelopes pay ``gasPrice`` per gas.
    Dynamic fee transactions pay the priority fee on top of the base fee,
    capped at ``maxFeePerGas``.

    Raises:
        MissingFieldError: If a pricing field or the receipt's gas is absent
        ArithmeticOverflowError: If the fee leaves the uint256 range
    """
    gas_used = _require(block_number, receipt.gas_used, "receipt gasUsed", tx.hash)

    if tx.fee_scheme is FeeScheme.DYNAMIC_FEE:
        fee_cap = _require(block_number, tx.max_fee_per_gas, "maxFeePerGas", tx.hash)
        tip_cap = _require(
            block_number, tx.max_priority_fee_per_gas, "maxPriorityFeePerGas", tx.hash
        )
        gas_price = saturating_add(tip_cap, base_fee_per_gas, fee_cap)
    else:
        gas_price = _require(block_number, tx.gas_price, "gasPrice", tx.hash)

    return checked_u256(block_number, gas_price * gas_used, f"fee of {tx.hash}")


def proposer_reward_from(block_number: int, total_tips: int, burnt: int) -> int:
    """Subtract the burnt base fee from the collected fees.

    Raises:
        NegativeRewardError: If more was burnt than collected
    """
    if burnt > total_tips:
        raise NegativeRewardError(block_number, total_tips, burnt)
    return total_tips - burnt


def verify_receipts(
    block: ExecutionBlock, receipts: list[TransactionReceipt]
) -> None:
    """Check receipt i belongs to transaction i for every index.

    Raises:
        ReceiptMismatchError: On a length or hash mismatch
    """
    if len(receipts) != len(block.transactions):
        msg = (
            f"{len(receipts)} receipts for {len(block.transactions)} transactions"
        )
        raise ReceiptMismatchError(block.number, msg)

    for idx, (tx, receipt) in enumerate(zip(block.transactions, receipts, strict=True)):
        if receipt.transaction_hash.lower() != tx.hash.lower():
            msg = (
                f"receipt {idx} is for {receipt.transaction_hash}, "
                f"expected {tx.hash}"
            )
            raise ReceiptMismatchError(block.number, msg)


def compute_reward(
    block: ExecutionBlock, receipts: list[TransactionReceipt]
) -> VanillaReward:
    """Compute the vanilla proposer reward of a fetched block.

    Args:
        block: Block with full transactions
        receipts: Receipts in the block's transaction order

    Returns:
        VanillaReward with the net reward and the block's fee recipient

    Raises:
        BlockRewardError: If the data is inconsistent or the arithmetic fails
    """
    if block.base_fee_per_gas is None:
        raise MissingFieldError(block.number, "block has no baseFeePerGas")
    base_fee = block.base_fee_per_gas

    verify_receipts(block, receipts)

    total_tips = 0
    for tx, receipt in zip(block.transactions, receipts, strict=True):
        total_tips = checked_u256(
            block.number,
            total_tips + transaction_tip(block.number, tx, receipt, base_fee),
            "total tips",
        )

    burnt = checked_u256(block.number, base_fee * block.gas_used, "burnt base fee")
    reward = proposer_reward_from(block.number, total_tips, burnt)

    return VanillaReward(
        proposer_reward=reward,
        fee_recipient=block.fee_recipient,
        total_tips=total_tips,
        burnt=burnt,
    )


class RewardCalculator:
    """Computes the priority fee income of a block's proposer."""

    def __init__(self, execution: ExecutionDataClient) -> None:
        self.execution = execution

    async def compute_vanilla_reward(self, block_number: int) -> VanillaReward:
        """Fetch a block with its receipts and compute its vanilla reward.

        Args:
            block_number: Height of the block

        Returns:
            VanillaReward for the block

        Raises:
            BlockRewardError: If the block's data fails an integrity check
        """
        block_task = asyncio.create_task(
            self.execution.get_block_with_transactions(block_number)
        )
        receipts_task = asyncio.create_task(self.execution.get_block_receipts(block_number))
        try:
            block = await block_task
            receipts = await receipts_task
        except BaseException:
            # A failed fetch must not leave the other request running unowned
            block_task.cancel()
            receipts_task.cancel()
            await asyncio.gather(block_task, receipts_task, return_exceptions=True)
            raise

        if block.number != block_number:
            msg = f"execution node returned block {block.number}"
            raise BlockNumberMismatchError(block_number, msg)

        reward = compute_reward(block, receipts)
        logger.debug(
            "Block %d: tips=%d burnt=%d reward=%d",
            block_number,
            reward.total_tips,
            reward.burnt,
            reward.proposer_reward,
        )
        return reward


__all__ = [
    "RewardCalculator",
    "checked_u256",
    "compute_reward",
    "proposer_reward_from",
    "saturating_add",
    "transaction_tip",
    "verify_receipts",
]
