"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from src.relays.models import DeliveredPayload, RelayResponse


RELAY_PATH = "/relay/v1/data/bidtraces/proposer_payload_delivered"

ENV_KEYS = (
    "ETH_RPC_URL",
    "RELAY_ENDPOINTS",
    "CONCURRENCY_LIMIT",
    "MAX_RELAY_REQUESTS",
    "MULTI_PAYLOAD_POLICY",
    "REQUEST_TIMEOUT",
    "RELAY_MAX_RETRIES",
    "RELAY_RETRY_BASE_DELAY",
    "RELAY_RETRY_MAX_DELAY",
    "RELAY_RETRY_DEADLINE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every configuration variable for the duration of a test."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def payload_json() -> Callable[..., dict[str, Any]]:
    """Factory for delivered payload records as relays serve them."""

    def _make(
        block_number: int = 100,
        value: str = "1000",
        fee_recipient: str = "0xfee0000000000000000000000000000000000001",
        slot: int = 5000,
    ) -> dict[str, Any]:
        return {
            "slot": str(slot),
            "parent_hash": "0xparent",
            "block_hash": f"0xblock{block_number}",
            "builder_pubkey": "0xbuilder",
            "proposer_pubkey": "0xproposer",
            "proposer_fee_recipient": fee_recipient,
            "gas_limit": "30000000",
            "gas_used": "12000000",
            "value": value,
            "block_number": str(block_number),
            "num_tx": "150",
        }

    return _make


@pytest.fixture
def relay_response(
    payload_json: Callable[..., dict[str, Any]],
) -> Callable[..., RelayResponse]:
    """Factory for parsed relay responses."""

    def _make(relay: str, value: str = "1000", block_number: int = 100) -> RelayResponse:
        payload = DeliveredPayload.model_validate(
            payload_json(block_number=block_number, value=value)
        )
        return RelayResponse(relay=relay, payload=payload)

    return _make


@pytest.fixture
def relay_url() -> Callable[[str, int], str]:
    """Build the delivered payloads URL a relay client requests."""

    def _make(host: str, block_number: int) -> str:
        return f"https://{host}{RELAY_PATH}?block_number={block_number}"

    return _make
