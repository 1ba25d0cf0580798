"""Token budget progress bar for the context window."""

from __future__ import annotations

from textual.widgets import Static

from ...core.usage import UsageLevel
from ...types import UsageAggregate

LEVEL_COLORS = {
    "ok": "green",
    "warn": "yellow",
    "danger": "red",
    "over": "bold red",
}


class BudgetBar(Static):
    """Shows tokens used against capacity as a visual bar.

    The bar fills up to the capacity; past it the bar stays full and the
    overflow is called out, but nothing is removed from the sequence.
    """

    DEFAULT_CSS = """
    BudgetBar {
        padding: 0 1;
    }
    """

    BAR_WIDTH = 20

    def __init__(self, capacity: int = 4096, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._capacity = capacity
        self._total = 0
        self._ratio = 0.0
        self._level: UsageLevel = "ok"

    @property
    def total(self) -> int:
        return self._total

    @property
    def level(self) -> UsageLevel:
        return self._level

    def on_mount(self) -> None:
        self._refresh_display()

    def update_usage(self, usage: UsageAggregate, level: UsageLevel = "ok") -> None:
        self._capacity = usage.capacity
        self._total = usage.total_tokens
        self._ratio = usage.usage_ratio
        self._level = level
        self._refresh_display()

    def _refresh_display(self) -> None:
        fraction = min(self._ratio, 1.0)
        filled = int(fraction * self.BAR_WIDTH)
        if self._total > 0:
            filled = max(filled, 1)

        color = LEVEL_COLORS.get(self._level, "green")
        bar = f"[{color}]{'█' * filled}{'░' * (self.BAR_WIDTH - filled)}[/{color}]"

        lines = [
            "[bold]CONTEXT USAGE[/bold]",
            f"  Tokens used: {self._total:,} / {self._capacity:,}",
            f"  {bar} {self._ratio * 100:.1f}%",
        ]
        if self._ratio > 1.0:
            over = self._total - self._capacity
            lines.append(f"  [bold red]Over capacity by {over:,} tokens[/bold red]")
        lines.append("")
        lines.append(
            "[dim]As you add more blocks, older messages might get "
            '"pushed out" if the context limit is reached.[/dim]'
        )

        self.update("\n".join(lines))
