"""Usage aggregate computation and budget level classification."""

from __future__ import annotations

from typing import Iterable, Literal

from ..types import MessageBlock, UsageAggregate, UsageConfig

UsageLevel = Literal["ok", "warn", "danger", "over"]


def compute_usage(blocks: Iterable[MessageBlock], capacity: int) -> UsageAggregate:
    """Recompute the aggregate from scratch over ``blocks``."""
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    costs = [b.token_cost for b in blocks]
    total = sum(costs)
    return UsageAggregate(
        total_tokens=total,
        capacity=capacity,
        usage_ratio=total / capacity,
        block_count=len(costs),
    )


def usage_level(usage: UsageAggregate, config: UsageConfig | None = None) -> UsageLevel:
    """Classify usage for display.

    - ``warn`` from the warn threshold (default 70%)
    - ``danger`` from the danger threshold (default 85%)
    - ``over`` once the capacity is exceeded

    Levels only drive colouring; nothing is evicted at any level.
    """
    config = config or UsageConfig()
    ratio = usage.usage_ratio
    if ratio > 1.0:
        return "over"
    if ratio >= config.danger_threshold:
        return "danger"
    if ratio >= config.warn_threshold:
        return "warn"
    return "ok"
