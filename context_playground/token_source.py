"""Synthetic token costs for newly inserted blocks."""

from __future__ import annotations

import random
import uuid

from .types import TokenCostSource


class RandomTokenCost:
    """Uniform integer cost in ``[minimum, maximum]`` inclusive."""

    def __init__(self, minimum: int = 5, maximum: int = 24, seed: int | None = None) -> None:
        if minimum < 0 or minimum > maximum:
            raise ValueError(f"Invalid token cost range: [{minimum}, {maximum}]")
        self.minimum = minimum
        self.maximum = maximum
        self._rng = random.Random(seed)

    def __call__(self, kind: str) -> int:
        return self._rng.randint(self.minimum, self.maximum)


class FixedTokenCost:
    """Always returns the same cost. Useful for asserting exact totals."""

    def __init__(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"Token cost must be >= 0, got {value}")
        self.value = value

    def __call__(self, kind: str) -> int:
        return self.value


def create_token_source(
    mode: str = "random",
    token_cost_range: tuple[int, int] = (5, 24),
    seed: int | None = None,
) -> TokenCostSource:
    """Factory for token cost sources.

    Modes:
        "random" - uniform in token_cost_range (seeded if seed is given)
        "fixed:N" - constant N
        "callable:module.path:func" - custom callable taking the block kind
    """
    if mode == "random":
        low, high = token_cost_range
        return RandomTokenCost(low, high, seed=seed)

    if mode.startswith("fixed:"):
        raw = mode[len("fixed:"):]
        try:
            return FixedTokenCost(int(raw))
        except ValueError:
            raise ValueError(f"Invalid fixed token cost: {mode}. Expected fixed:<int>")

    if mode.startswith("callable:"):
        # Format: callable:module.path:func_name
        parts = mode[len("callable:"):].rsplit(":", 1)
        if len(parts) != 2:
            raise ValueError(f"Invalid callable spec: {mode}. Expected callable:module:func")
        module_path, func_name = parts
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, func_name)

    raise ValueError(f"Unknown token source mode: {mode}")


def new_block_id() -> str:
    """Default id factory for inserted blocks."""
    return uuid.uuid4().hex[:12]
