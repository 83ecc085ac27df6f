"""Console reporting of per-block rewards."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.helpers.parsers import wei_to_eth
from src.rewards.models import BlockReward, BlockRewardFailure


def format_reward_line(reward: BlockReward) -> str:
    """One line per block with the same fields as the JSON record.

    Example:
        block=100 tip=42 fee_recipient=0xabc mev=1000 mev_fee_recipient=0xdef relays=['a.relay']
    """
    line = (
        f"block={reward.block_number} "
        f"tip={reward.proposer_reward} "
        f"fee_recipient={reward.fee_recipient} "
        f"mev={reward.mev_reward or '-'} "
        f"mev_fee_recipient={reward.mev_fee_recipient or '-'} "
        f"relays={reward.relays}"
    )
    if not reward.consistency.agree:
        line += f" relay_values={reward.consistency.values}"
    if reward.failed_relays:
        line += f" failed_relays={reward.failed_relays}"
    return line


def _eth(wei: int) -> str:
    return format(wei_to_eth(wei).normalize(), "f")  # type: ignore[union-attr]


def format_failure_line(failure: BlockRewardFailure) -> str:
    return f"block={failure.block_number} error={failure.error_type} reason={failure.reason}"


class RewardReport:
    """Prints records as they arrive and totals at the end of a run."""

    def __init__(self, console: Console | None = None, *, as_json: bool = False) -> None:
        self.console = console or Console(soft_wrap=True)
        self.as_json = as_json
        self.blocks = 0
        self.failures = 0
        self.mev_blocks = 0
        self.disagreements = 0
        self.total_proposer_reward = 0
        self.total_mev_reward = 0

    def add(self, result: BlockReward | BlockRewardFailure) -> None:
        """Print a result and account for it in the summary."""
        self.blocks += 1

        if isinstance(result, BlockRewardFailure):
            self.failures += 1
            if self.as_json:
                self._print_plain(result.model_dump_json())
            else:
                self.console.print(f"[red]{escape(format_failure_line(result))}[/red]")
            return

        self.total_proposer_reward += int(result.proposer_reward)
        if result.mev_reward:
            self.mev_blocks += 1
            self.total_mev_reward += int(result.mev_reward)
        if not result.consistency.agree:
            self.disagreements += 1

        if self.as_json:
            self._print_plain(result.model_dump_json())
        elif result.consistency.agree:
            self._print_plain(format_reward_line(result))
        else:
            self.console.print(f"[yellow]{escape(format_reward_line(result))}[/yellow]")

    def _print_plain(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def summary_table(self) -> Table:
        """Totals of everything added so far."""
        table = Table(title="Proposer rewards")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Blocks", f"{self.blocks:,}")
        table.add_row("Failed blocks", f"{self.failures:,}")
        table.add_row("Blocks with MEV", f"{self.mev_blocks:,}")
        table.add_row("Relay disagreements", f"{self.disagreements:,}")
        table.add_row("Proposer reward (ETH)", _eth(self.total_proposer_reward))
        table.add_row("MEV reward (ETH)", _eth(self.total_mev_reward))
        return table

    def print_summary(self, console: Console | None = None) -> None:
        (console or self.console).print(self.summary_table())


__all__ = [
    "RewardReport",
    "format_failure_line",
    "format_reward_line",
]
