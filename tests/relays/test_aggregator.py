"""Tests for the relay aggregator and its consistency check."""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from src.helpers.http import RetriesExhaustedError
from src.helpers.http_models import RetryPolicy
from src.relays.aggregator import RelayAggregator, check_consistency
from src.relays.client import RelayClient, RelayPayloadError, relay_host
from src.relays.models import RelayResponse


if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock


class FakeRelayClient:
    """Answers per endpoint after a delay, to control completion order."""

    def __init__(self, answers: dict[str, tuple[float, Any]]) -> None:
        self.answers = answers
        self.calls: list[tuple[str, int]] = []

    async def fetch(self, relay_endpoint: str, block_number: int) -> RelayResponse | None:
        self.calls.append((relay_endpoint, block_number))
        delay, answer = self.answers[relay_endpoint]
        await asyncio.sleep(delay)
        if isinstance(answer, Exception):
            raise answer
        return answer


class TestCheckConsistency:
    """Tests for check_consistency."""

    def test_empty_agrees(self) -> None:
        """Test no responses count as agreement."""
        consistency = check_consistency(100, [])
        assert consistency.agree
        assert consistency.values == []

    def test_same_values_agree(
        self, relay_response: Callable[..., RelayResponse]
    ) -> None:
        """Test identical values agree."""
        responses = [relay_response("a.relay", "100"), relay_response("b.relay", "100")]
        consistency = check_consistency(100, responses)
        assert consistency.agree
        assert consistency.values == ["100"]

    def test_disagreement_flagged_and_logged(
        self,
        relay_response: Callable[..., RelayResponse],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test differing values are returned and logged as a warning."""
        responses = [
            relay_response("a.relay", "100"),
            relay_response("b.relay", "200"),
            relay_response("c.relay", "100"),
        ]

        consistency = check_consistency(100, responses)

        assert not consistency.agree
        assert consistency.values == ["100", "200"]
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert any("b.relay=200" in r.getMessage() for r in warnings)


class TestRelayAggregator:
    """Tests for RelayAggregator.aggregate."""

    @pytest.mark.asyncio
    async def test_completion_order_and_disagreement(
        self, relay_response: Callable[..., RelayResponse]
    ) -> None:
        """Test two relays at 100 and one at 200 are flagged, ordered by completion."""
        fake = FakeRelayClient({
            "https://slow.relay": (0.06, relay_response("slow.relay", "100")),
            "https://fast.relay": (0.0, relay_response("fast.relay", "200")),
            "https://mid.relay": (0.03, relay_response("mid.relay", "100")),
        })
        aggregator = RelayAggregator(fake, list(fake.answers))  # type: ignore[arg-type]

        aggregation = await aggregator.aggregate(100)

        assert [r.relay for r in aggregation.responses] == [
            "fast.relay",
            "mid.relay",
            "slow.relay",
        ]
        assert not aggregation.consistency.agree
        assert aggregation.consistency.values == ["200", "100"]
        assert aggregation.failed_relays == []

    @pytest.mark.asyncio
    async def test_relays_queried_concurrently(
        self, relay_response: Callable[..., RelayResponse]
    ) -> None:
        """Test total time is bounded by the slowest relay, not the sum."""
        fake = FakeRelayClient({
            f"https://r{i}.relay": (0.1, relay_response(f"r{i}.relay")) for i in range(10)
        })
        aggregator = RelayAggregator(fake, list(fake.answers))  # type: ignore[arg-type]

        loop = asyncio.get_running_loop()
        started = loop.time()
        aggregation = await aggregator.aggregate(100)

        assert loop.time() - started < 0.5
        assert len(aggregation.responses) == 10

    @pytest.mark.asyncio
    async def test_no_data_is_empty(self) -> None:
        """Test blocks without auctions produce no responses."""
        fake = FakeRelayClient({
            "https://a.relay": (0.0, None),
            "https://b.relay": (0.0, None),
        })
        aggregator = RelayAggregator(fake, list(fake.answers))  # type: ignore[arg-type]

        aggregation = await aggregator.aggregate(100)

        assert aggregation.responses == []
        assert aggregation.consistency.agree

    @pytest.mark.asyncio
    async def test_failed_relays_isolated(
        self, relay_response: Callable[..., RelayResponse]
    ) -> None:
        """Test exhausted or broken relays are listed and the others still count."""
        fake = FakeRelayClient({
            "https://down.relay": (
                0.0,
                RetriesExhaustedError("_get", 5, httpx.ConnectError("down")),
            ),
            "https://0xkey@broken.relay": (
                0.0,
                RelayPayloadError("broken.relay", 100, "invalid"),
            ),
            "https://ok.relay": (0.01, relay_response("ok.relay", "777")),
        })
        aggregator = RelayAggregator(fake, list(fake.answers))  # type: ignore[arg-type]

        aggregation = await aggregator.aggregate(100)

        assert [r.relay for r in aggregation.responses] == ["ok.relay"]
        assert sorted(aggregation.failed_relays) == ["broken.relay", "down.relay"]

    @pytest.mark.asyncio
    async def test_duplicate_endpoints_queried_once(self) -> None:
        """Test a relay listed twice is only asked once."""
        fake = FakeRelayClient({"https://a.relay": (0.0, None)})
        aggregator = RelayAggregator(
            fake,  # type: ignore[arg-type]
            ["https://a.relay", "https://a.relay"],
        )

        await aggregator.aggregate(100)

        assert fake.calls == [("https://a.relay", 100)]

    @pytest.mark.asyncio
    async def test_relay_with_two_records_contributes_nothing(
        self,
        httpx_mock: "HTTPXMock",
        payload_json: Callable[..., dict[str, Any]],
        relay_url: Callable[[str, int], str],
    ) -> None:
        """Test an ambiguous relay is dropped while the others complete."""
        httpx_mock.add_response(
            url=relay_url("double.relay", 100),
            json=[payload_json(value="1", slot=1), payload_json(value="2", slot=2)],
        )
        httpx_mock.add_response(
            url=relay_url("single.relay", 100), json=[payload_json(value="5")]
        )
        httpx_mock.add_response(url=relay_url("empty.relay", 100), json=[])

        endpoints = [
            "https://double.relay",
            "https://single.relay",
            "https://empty.relay",
        ]
        async with httpx.AsyncClient() as client:
            relay_client = RelayClient(
                client, RetryPolicy(max_retries=2, base_delay=0.0, max_delay=0.0)
            )
            aggregation = await RelayAggregator(relay_client, endpoints).aggregate(100)

        assert [r.relay for r in aggregation.responses] == ["single.relay"]
        assert aggregation.responses[0].value == "5"
        assert aggregation.failed_relays == []


def test_relay_host_used_for_failures() -> None:
    """Test failure identities match response identities."""
    assert relay_host("https://0xkey@broken.relay") == "broken.relay"
