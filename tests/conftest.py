"""Shared fixtures for context-playground tests."""

from __future__ import annotations

import itertools

import pytest

from context_playground.config import load_config
from context_playground.core.gesture_resolver import GestureResolver
from context_playground.core.sequence_store import SequenceStore
from context_playground.token_source import FixedTokenCost
from context_playground.tui.state import PlaygroundState
from context_playground.types import PlaygroundConfig


class SequenceIds:
    """Deterministic id factory: b1, b2, b3, ..."""

    def __init__(self, prefix: str = "b") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"


class ScriptedTokenCost:
    """Token source returning queued costs in order, repeating the last one."""

    def __init__(self, costs: list[int]) -> None:
        self._costs = list(costs)
        self.calls: list[str] = []

    def __call__(self, kind: str) -> int:
        self.calls.append(kind)
        idx = min(len(self.calls) - 1, len(self._costs) - 1)
        return self._costs[idx]


def make_store(cost: int = 10, capacity: int = 4096, **kwargs) -> SequenceStore:
    kwargs.setdefault("id_factory", SequenceIds())
    return SequenceStore(
        capacity=capacity,
        token_source=kwargs.pop("token_source", FixedTokenCost(cost)),
        **kwargs,
    )


@pytest.fixture
def store() -> SequenceStore:
    return make_store()


@pytest.fixture
def resolver(store) -> GestureResolver:
    return GestureResolver(store)


@pytest.fixture
def sample_config() -> PlaygroundConfig:
    return load_config(config_dict={
        "capacity": 100,
        "token_cost_range": [5, 24],
        "seed": 42,
        "usage": {"warn_threshold": 0.5, "danger_threshold": 0.8},
    })


@pytest.fixture
def playground(sample_config) -> PlaygroundState:
    return PlaygroundState.from_config(
        sample_config, token_source=FixedTokenCost(10), id_factory=SequenceIds()
    )
