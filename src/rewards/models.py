"""Pydantic models for execution data and per-block reward records."""

from enum import Enum

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from src.helpers.parsers import normalize_address, parse_quantity
from src.relays.models import RelayConsistency, RelayResponse


Quantity = Annotated[int, BeforeValidator(parse_quantity)]
OptionalQuantity = Annotated[int | None, BeforeValidator(parse_quantity)]
Address = Annotated[str, BeforeValidator(normalize_address)]


class FeeScheme(Enum):
    """Gas pricing model of a transaction."""

    LEGACY = "legacy"
    ACCESS_LIST = "access_list"  # EIP-2930
    DYNAMIC_FEE = "dynamic_fee"  # EIP-1559
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, transaction_type: int | None) -> "FeeScheme":
        """Map an envelope type byte to its fee scheme."""
        return _FEE_SCHEMES.get(transaction_type, cls.UNKNOWN)


_FEE_SCHEMES = {
    0: FeeScheme.LEGACY,
    1: FeeScheme.ACCESS_LIST,
    2: FeeScheme.DYNAMIC_FEE,
}


class Transaction(BaseModel):
    """Transaction as returned by eth_getBlockByNumber with full objects."""

    hash: str
    transaction_type: OptionalQuantity = Field(default=None, alias="type")
    gas_price: OptionalQuantity = Field(default=None, alias="gasPrice")
    max_fee_per_gas: OptionalQuantity = Field(default=None, alias="maxFeePerGas")
    max_priority_fee_per_gas: OptionalQuantity = Field(
        default=None, alias="maxPriorityFeePerGas"
    )

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @property
    def fee_scheme(self) -> FeeScheme:
        return FeeScheme.from_type(self.transaction_type)


class ExecutionBlock(BaseModel):
    """Read-only snapshot of an execution block and its transactions."""

    number: Quantity
    base_fee_per_gas: OptionalQuantity = Field(default=None, alias="baseFeePerGas")
    gas_used: Quantity = Field(..., alias="gasUsed")
    fee_recipient: Address = Field(..., alias="miner")
    transactions: list[Transaction] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class TransactionReceipt(BaseModel):
    """Subset of a transaction receipt needed for fee accounting."""

    transaction_hash: str = Field(..., alias="transactionHash")
    gas_used: OptionalQuantity = Field(default=None, alias="gasUsed")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class VanillaReward(BaseModel):
    """Priority fee income of a block's fee recipient."""

    proposer_reward: int = Field(..., ge=0)
    fee_recipient: str
    total_tips: int = Field(..., ge=0)
    burnt: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class BlockReward(BaseModel):
    """Reward record emitted once per block."""

    block_number: int
    proposer_reward: str = Field(..., description="Vanilla reward in wei")
    fee_recipient: str
    mev_reward: str = Field(
        default="", description="First relay's reported value in wei, empty if none"
    )
    relay_responses: list[RelayResponse] = Field(default_factory=list)
    consistency: RelayConsistency = Field(default_factory=RelayConsistency)
    failed_relays: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def mev_fee_recipient(self) -> str:
        """Fee recipient reported by the first relay, empty if none."""
        if not self.relay_responses:
            return ""
        return self.relay_responses[0].payload.proposer_fee_recipient

    @property
    def relays(self) -> list[str]:
        return [response.relay for response in self.relay_responses]


class BlockRewardFailure(BaseModel):
    """Placeholder emitted for a block whose reward could not be computed."""

    block_number: int
    error_type: str
    reason: str

    model_config = ConfigDict(frozen=True)


__all__ = [
    "BlockReward",
    "BlockRewardFailure",
    "ExecutionBlock",
    "FeeScheme",
    "Transaction",
    "TransactionReceipt",
    "VanillaReward",
]
