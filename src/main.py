"""Compute proposer rewards (priority fees and MEV) for a range of blocks.

Usage:
    python -m src.main --from-block 16308189 --to-block 16308199
    python -m src.main --from-block 16308189 --concurrency 10 --json
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace

from rich.console import Console

from src.helpers.config import load_config
from src.helpers.http import create_http_client
from src.helpers.logging import get_logger, set_log_level
from src.helpers.progress import create_standard_progress
from src.helpers.rpc import RPCClient
from src.relays.aggregator import RelayAggregator
from src.relays.client import RelayClient
from src.relays.models import MultiPayloadPolicy
from src.rewards.assembler import BlockRewardAssembler
from src.rewards.calculator import RewardCalculator
from src.rewards.execution import ExecutionDataClient
from src.rewards.report import RewardReport
from src.rewards.scheduler import RangeScheduler


logger = get_logger(__name__)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="Compute proposer rewards (priority fees and relay MEV) per block"
    )
    parser.add_argument(
        "--from-block", type=int, required=True, help="First block (inclusive)"
    )
    parser.add_argument(
        "--to-block",
        type=int,
        default=None,
        help="Last block (inclusive, default: latest block of the execution node)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Blocks processed at the same time (env: CONCURRENCY_LIMIT, default: 5)",
    )
    parser.add_argument(
        "--max-relay-requests",
        type=int,
        default=None,
        help="Relay requests in flight at once (default: concurrency x relays)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="Execution node JSON-RPC URL (env: ETH_RPC_URL)",
    )
    parser.add_argument(
        "--multi-payload-policy",
        choices=[policy.value for policy in MultiPayloadPolicy],
        default=None,
        help="What to do when a relay reports several payloads for one block",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print one JSON record per line"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING, ERROR or CRITICAL (env: LOG_LEVEL)",
    )
    return parser


async def main(args: Namespace) -> int:
    """Run the reward computation for the requested range.

    Args:
        args: Parsed command line arguments

    Returns:
        Process exit code, 1 if any block failed
    """
    config = load_config(
        execution_endpoint=args.rpc_url,
        concurrency_limit=args.concurrency,
        max_relay_requests=args.max_relay_requests,
        multi_payload_policy=args.multi_payload_policy,
    )
    stderr = Console(stderr=True)

    async with create_http_client(
        timeout=config.request_timeout,
        max_connections=config.relay_request_limit + 2 * config.concurrency_limit,
        follow_redirects=True,
    ) as client:
        rpc = RPCClient(config.execution_endpoint, timeout=config.request_timeout)
        to_block = args.to_block
        if to_block is None:
            to_block = await rpc.get_block_number(client)

        relay_client = RelayClient(
            client,
            retry_policy=config.retry_policy,
            multi_payload_policy=config.multi_payload_policy,
            max_concurrent_requests=config.relay_request_limit,
        )
        assembler = BlockRewardAssembler(
            RelayAggregator(relay_client, config.relay_endpoints),
            RewardCalculator(ExecutionDataClient(rpc, client)),
        )
        scheduler = RangeScheduler(assembler, config.concurrency_limit)
        report = RewardReport(as_json=args.json)

        total = to_block - args.from_block + 1
        logger.info(
            "Processing blocks from %d to %d total: %d (%d relays, %d blocks at a time)",
            args.from_block,
            to_block,
            total,
            len(config.relay_endpoints),
            config.concurrency_limit,
        )

        progress = create_standard_progress(stderr, transient=True)
        with progress:
            task_id = progress.add_task("Computing rewards", total=total)
            async for result in scheduler.run(args.from_block, to_block):
                report.add(result)
                progress.update(task_id, advance=1)

    report.print_summary(stderr if args.json else None)
    return 1 if report.failures else 0


def cli() -> None:
    """Console script entry point."""
    args = build_parser().parse_args()
    if args.log_level:
        set_log_level(args.log_level)

    try:
        exit_code = asyncio.run(main(args))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, exiting...")
        exit_code = 130
    except Exception:
        logger.exception("Fatal error")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
