"""Fan a block out to every relay and reconcile their answers."""

import asyncio

from src.helpers.http import RetriesExhaustedError
from src.helpers.logging import get_logger
from src.relays.client import RelayClient, RelayPayloadError, relay_host
from src.relays.models import RelayAggregation, RelayConsistency, RelayResponse


logger = get_logger(__name__)


def check_consistency(
    block_number: int, responses: list[RelayResponse]
) -> RelayConsistency:
    """Compare the values reported by every responding relay.

    Disagreement is logged as a warning and returned, never dropped.

    Args:
        block_number: Block the responses are about
        responses: Relay responses in completion order

    Returns:
        RelayConsistency with the distinct values in first-seen order
    """
    values = list(dict.fromkeys(response.value for response in responses))
    agree = len(values) <= 1

    if not agree:
        logger.warning(
            "Relays disagree on MEV reward for block %d: %s",
            block_number,
            ", ".join(f"{r.relay}={r.value}" for r in responses),
        )

    return RelayConsistency(agree=agree, values=values)


class RelayAggregator:
    """Queries every configured relay concurrently for a block."""

    def __init__(self, relay_client: RelayClient, relay_endpoints: list[str]) -> None:
        """Initialize the aggregator.

        Args:
            relay_client: Client used for every relay request
            relay_endpoints: Relay base URLs, duplicates are queried once
        """
        self.relay_client = relay_client
        self.relay_endpoints = list(dict.fromkeys(relay_endpoints))

    async def aggregate(self, block_number: int) -> RelayAggregation:
        """Collect what every relay delivered for a block.

        Relays that exhaust their retries or return unusable data are listed
        in ``failed_relays`` and do not stop the others.

        Args:
            block_number: Execution block height

        Returns:
            RelayAggregation with responses in completion order
        """
        responses: list[RelayResponse] = []
        failed_relays: list[str] = []

        async def collect(endpoint: str) -> None:
            try:
                response = await self.relay_client.fetch(endpoint, block_number)
            except (RetriesExhaustedError, RelayPayloadError) as e:
                logger.error(
                    "Relay %s unusable for block %d: %s",
                    relay_host(endpoint),
                    block_number,
                    e,
                )
                failed_relays.append(relay_host(endpoint))
                return
            if response is not None:
                responses.append(response)

        await asyncio.gather(*(collect(endpoint) for endpoint in self.relay_endpoints))

        return RelayAggregation(
            block_number=block_number,
            responses=responses,
            consistency=check_consistency(block_number, responses),
            failed_relays=failed_relays,
        )


__all__ = ["RelayAggregator", "check_consistency"]
