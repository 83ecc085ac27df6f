"""Models for relay data API responses."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DeliveredPayload(BaseModel):
    """Bid trace of a payload a relay delivered to a proposer.

    Relays send every numeric field as a decimal string; pydantic parses them
    into arbitrary precision ints.
    """

    slot: int
    parent_hash: str
    block_hash: str
    builder_pubkey: str
    proposer_pubkey: str
    proposer_fee_recipient: str
    gas_limit: int
    gas_used: int
    value: int = Field(..., ge=0)
    block_number: int
    num_tx: int

    model_config = ConfigDict(extra="ignore", frozen=True)


class RelayResponse(BaseModel):
    """A delivered payload tagged with the relay that reported it."""

    relay: str
    payload: DeliveredPayload

    model_config = ConfigDict(frozen=True)

    @property
    def value(self) -> str:
        return str(self.payload.value)


class RelayConsistency(BaseModel):
    """Whether every responding relay reported the same payment."""

    agree: bool = True
    values: list[str] = Field(
        default_factory=list, description="Distinct values in first-seen order"
    )

    model_config = ConfigDict(frozen=True)


class RelayAggregation(BaseModel):
    """Everything the relays said about one block."""

    block_number: int
    responses: list[RelayResponse] = Field(
        default_factory=list, description="Responses in completion order"
    )
    consistency: RelayConsistency = Field(default_factory=RelayConsistency)
    failed_relays: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MultiPayloadPolicy(Enum):
    """What to do when a relay reports several payloads for one block."""

    DISCARD = "discard"
    HIGHEST_VALUE = "highest_value"


__all__ = [
    "DeliveredPayload",
    "MultiPayloadPolicy",
    "RelayAggregation",
    "RelayConsistency",
    "RelayResponse",
]
