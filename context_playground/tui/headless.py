"""Headless replay runner: no TUI, same state machine."""

from __future__ import annotations

import logging
import sys
from typing import Callable, TextIO

from ..core.usage import usage_level
from ..types import PlaygroundConfig, PlaygroundSnapshot, TokenCostSource
from .state import GestureStep, PlaygroundState, StepResult

logger = logging.getLogger(__name__)


class HeadlessRunner:
    """Replay gesture steps without a terminal UI.

    Drives the same ``PlaygroundState`` the interactive app uses, but prints
    one progress line per step to ``stream`` (stderr by default) instead of
    rendering widgets.
    """

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        token_source: TokenCostSource | None = None,
        id_factory: Callable[[], str] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.config = config or PlaygroundConfig()
        self.state = PlaygroundState.from_config(
            self.config, token_source=token_source, id_factory=id_factory
        )
        self._stream = stream
        self._results: list[StepResult] = []

    @property
    def results(self) -> list[StepResult]:
        return list(self._results)

    def run(self, steps: list[GestureStep]) -> list[StepResult]:
        """Apply steps in order and return one StepResult per step of this run.

        ``results`` keeps the history across runs.
        """
        total = len(steps)
        run_results: list[StepResult] = []
        for i, step in enumerate(steps, 1):
            result = self.state.apply_step(step)
            run_results.append(result)
            self._print_step(i, total, result)
        self._results.extend(run_results)

        final = self.state.snapshot()
        self._print(self.describe(final))
        logger.info("Replayed %d gesture steps, %d blocks", total, len(final.blocks))
        return run_results

    def _print_step(self, index: int, total: int, result: StepResult) -> None:
        usage = result.snapshot.usage
        detail = ""
        if result.block is not None:
            detail = f" {result.block.kind}:{result.block.id} ({result.block.token_cost}t)"
        self._print(
            f"Step {index}/{total}: {result.step} -> {result.action}"
            f"{'' if result.changed else ' (unchanged)'}{detail} "
            f"[{usage.total_tokens:,}/{usage.capacity:,}t, "
            f"{usage.block_count} blocks]"
        )

    def describe(self, snapshot: PlaygroundSnapshot) -> str:
        """Multi-line summary of a snapshot, read order top to bottom."""
        usage = snapshot.usage
        level = usage_level(usage, self.config.usage)
        lines = [
            f"Context window: {usage.total_tokens:,}/{usage.capacity:,} tokens "
            f"({usage.usage_percent:.1f}%, {level})",
        ]
        if not snapshot.blocks:
            lines.append("  (empty)")
        for i, block in enumerate(snapshot.blocks):
            lines.append(
                f"  {i:>2}. {block.kind:<9} {block.token_cost:>4}t  "
                f"{block.id}  {block.content}"
            )
        return "\n".join(lines)

    def _print(self, text: str) -> None:
        print(text, file=self._stream or sys.stderr)
