"""Client for a single relay's proposer_payload_delivered data API."""

import asyncio

import httpx
from pydantic import TypeAdapter, ValidationError

from src.helpers.http import retry_with_policy
from src.helpers.http_models import RetryPolicy
from src.helpers.logging import get_logger
from src.relays.constants import ENDPOINTS
from src.relays.models import DeliveredPayload, MultiPayloadPolicy, RelayResponse


logger = get_logger(__name__)

_payloads_adapter = TypeAdapter(list[DeliveredPayload])


class RelayPayloadError(Exception):
    """A relay answered with data that cannot be used."""

    def __init__(self, relay: str, block_number: int, reason: str) -> None:
        self.relay = relay
        self.block_number = block_number
        self.reason = reason
        super().__init__(f"{relay} block {block_number}: {reason}")


def relay_host(endpoint: str) -> str:
    """Relay identity: the endpoint's host without any embedded public key.

    Example:
        >>> relay_host("https://0xabc@boost-relay.flashbots.net")
        'boost-relay.flashbots.net'
    """
    return httpx.URL(endpoint).host


def relay_base_url(endpoint: str) -> str:
    """Endpoint with the public key prefix removed, so it is not sent as credentials."""
    url = httpx.URL(endpoint)
    port = f":{url.port}" if url.port else ""
    return f"{url.scheme}://{url.host}{port}{url.path.rstrip('/')}"


class RelayClient:
    """Fetches delivered payloads for a block from one relay at a time."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        retry_policy: RetryPolicy | None = None,
        multi_payload_policy: MultiPayloadPolicy = MultiPayloadPolicy.DISCARD,
        max_concurrent_requests: int | None = None,
    ) -> None:
        """Initialize the relay client.

        Args:
            client: Shared HTTP client
            retry_policy: Retry schedule for transport errors and non-2xx answers
            multi_payload_policy: How to resolve several payloads for one block
            max_concurrent_requests: Requests in flight across every relay and
                block using this client, None for no limit
        """
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self.multi_payload_policy = multi_payload_policy
        self.endpoint = ENDPOINTS["proposer_payload_delivered"]
        self._semaphore = (
            asyncio.Semaphore(max_concurrent_requests)
            if max_concurrent_requests
            else None
        )
        self._get_with_retry = retry_with_policy(self.retry_policy)(self._get)

    async def _get(self, url: str, block_number: int) -> httpx.Response:
        params = {"block_number": block_number}
        if self._semaphore is None:
            response = await self.client.get(url, params=params)
        else:
            async with self._semaphore:
                response = await self.client.get(url, params=params)
        response.raise_for_status()
        return response

    def _parse(self, relay: str, block_number: int, text: str) -> list[DeliveredPayload]:
        try:
            payloads = _payloads_adapter.validate_json(text)
        except ValidationError as e:
            msg = f"invalid delivered payloads: {e.error_count()} validation errors"
            raise RelayPayloadError(relay, block_number, msg) from e

        matching = [p for p in payloads if p.block_number == block_number]
        if len(matching) != len(payloads):
            logger.warning(
                "%s returned %d payloads for other blocks when asked for block %d",
                relay,
                len(payloads) - len(matching),
                block_number,
            )
        return matching

    def _resolve_multiple(
        self, relay: str, block_number: int, payloads: list[DeliveredPayload]
    ) -> DeliveredPayload | None:
        values = [str(p.value) for p in payloads]
        if self.multi_payload_policy is MultiPayloadPolicy.HIGHEST_VALUE:
            chosen = max(payloads, key=lambda p: p.value)
            logger.warning(
                "More than one entry from %s for block %d (values %s), using %d",
                relay,
                block_number,
                values,
                chosen.value,
            )
            return chosen

        logger.warning(
            "More than one entry from %s for block %d (values %s), discarding",
            relay,
            block_number,
            values,
        )
        return None

    async def fetch(self, relay_endpoint: str, block_number: int) -> RelayResponse | None:
        """Get the payload a relay delivered for a block.

        Args:
            relay_endpoint: Relay base URL, optionally with a public key prefix
            block_number: Execution block height

        Returns:
            RelayResponse, or None if the relay delivered nothing for the block
            or its answer is ambiguous under the configured policy

        Raises:
            RetriesExhaustedError: If the relay stays unreachable
            RelayPayloadError: If the relay's answer cannot be parsed
        """
        relay = relay_host(relay_endpoint)
        url = f"{relay_base_url(relay_endpoint)}{self.endpoint}"

        response = await self._get_with_retry(url, block_number)
        payloads = self._parse(relay, block_number, response.text)

        match len(payloads):
            case 0:
                logger.debug("No data from %s for block %d", relay, block_number)
                return None
            case 1:
                payload = payloads[0]
            case _:
                payload = self._resolve_multiple(relay, block_number, payloads)
                if payload is None:
                    return None

        logger.debug(
            "Block %d MEV reward from %s: %d", block_number, relay, payload.value
        )
        return RelayResponse(relay=relay, payload=payload)


__all__ = [
    "RelayClient",
    "RelayPayloadError",
    "relay_base_url",
    "relay_host",
]
