"""Per-block failures raised while computing proposer rewards."""


class BlockRewardError(Exception):
    """A block's reward could not be computed.

    Every subclass carries the block height so the range scheduler can report
    the failure in place of the block's record.
    """

    def __init__(self, block_number: int, reason: str) -> None:
        self.block_number = block_number
        self.reason = reason
        super().__init__(f"block {block_number}: {reason}")


class BlockNumberMismatchError(BlockRewardError):
    """The execution node returned a different block than requested."""


class ReceiptMismatchError(BlockRewardError):
    """Receipts are not positionally aligned with the block's transactions."""


class MissingFieldError(BlockRewardError):
    """A field required by the fee computation is absent."""


class ArithmeticOverflowError(BlockRewardError):
    """An amount left the unsigned 256-bit range."""


class NegativeRewardError(BlockRewardError):
    """More base fee was burnt than the transactions paid in total."""

    def __init__(self, block_number: int, total_tips: int, burnt: int) -> None:
        self.total_tips = total_tips
        self.burnt = burnt
        super().__init__(
            block_number,
            f"burnt base fee {burnt} exceeds total tips {total_tips}",
        )


__all__ = [
    "ArithmeticOverflowError",
    "BlockNumberMismatchError",
    "BlockRewardError",
    "MissingFieldError",
    "NegativeRewardError",
    "ReceiptMismatchError",
]
