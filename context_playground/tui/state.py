"""Owned playground state shared by the TUI and the headless runner."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

from ..config import validate_config
from ..core.gesture_resolver import GestureResolver
from ..core.sequence_store import SequenceStore
from ..token_source import create_token_source
from ..types import (
    BLOCK_KINDS,
    DROP_ZONE_ID,
    MessageBlock,
    PlaygroundConfig,
    PlaygroundSnapshot,
    TokenCostSource,
    template_id,
)

STEP_ARITY = {"add": 1, "move": 2, "drop": 1, "remove": 1, "reset": 0}


@dataclass(frozen=True)
class GestureStep:
    """One scripted interaction.

    ``args`` hold block references: a position in the current sequence
    (``"0"``, ``"-1"``) or a literal block id. ``add`` takes a kind.
    """
    op: str
    args: tuple[str, ...] = ()

    def __str__(self) -> str:
        return " ".join((self.op, *self.args))


@dataclass(frozen=True)
class StepResult:
    step: GestureStep
    action: str  # "insert", "move", "noop", "cancel", "remove", "reset"
    changed: bool
    snapshot: PlaygroundSnapshot
    block: MessageBlock | None = None


class PlaygroundState:
    """Store + resolver pair owned by one renderer.

    Renderers read ``snapshot()`` after every mutation and route every
    gesture through ``resolver``; they never mutate the store directly
    except for delete and reset.
    """

    def __init__(
        self,
        store: SequenceStore,
        config: PlaygroundConfig | None = None,
    ) -> None:
        self.store = store
        self.resolver = GestureResolver(store)
        self.config = config or PlaygroundConfig(capacity=store.capacity)

    @classmethod
    def from_config(
        cls,
        config: PlaygroundConfig,
        token_source: TokenCostSource | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> PlaygroundState:
        errors = validate_config(config)
        if errors:
            raise ValueError("Invalid config: " + "; ".join(errors))
        if token_source is None:
            token_source = create_token_source(
                config.token_source, config.token_cost_range, seed=config.seed
            )
        store = SequenceStore(
            capacity=config.capacity,
            token_source=token_source,
            initial_block=config.initial_block,
            templates=config.templates,
            id_factory=id_factory,
        )
        return cls(store, config=config)

    def snapshot(self) -> PlaygroundSnapshot:
        return PlaygroundSnapshot(
            blocks=self.store.blocks,
            usage=self.store.current_usage(),
            gesture=self.resolver.state,
        )

    def resolve_ref(self, ref: str) -> str:
        """Map a positional reference to a block id; other refs pass through."""
        try:
            index = int(ref)
        except ValueError:
            return ref
        ids = self.store.ids()
        if -len(ids) <= index < len(ids):
            return ids[index]
        return ref

    def apply_step(self, step: GestureStep) -> StepResult:
        """Run one scripted step through the resolver (or store, for remove/reset)."""
        block = None
        if step.op == "add":
            kind = step.args[0]
            source = template_id(kind)
            self.resolver.drag_start(source, is_template=True, kind=kind)
            outcome = self.resolver.drag_end(source, DROP_ZONE_ID)
            action, changed, block = outcome.action, outcome.changed, outcome.block
        elif step.op in ("move", "drop"):
            source = self.resolve_ref(step.args[0])
            target = self.resolve_ref(step.args[1]) if step.op == "move" else None
            self.resolver.drag_start(source, is_template=False)
            outcome = self.resolver.drag_end(source, target)
            action, changed = outcome.action, outcome.changed
        elif step.op == "remove":
            block = self.resolver.remove(self.resolve_ref(step.args[0]))
            action, changed = "remove", block is not None
        elif step.op == "reset":
            self.store.reset()
            action, changed = "reset", True
        else:
            raise ValueError(f"Unknown gesture step: {step.op}")
        return StepResult(
            step=step,
            action=action,
            changed=changed,
            snapshot=self.snapshot(),
            block=block,
        )


def parse_step(raw: Any, where: str = "") -> GestureStep:
    """Parse ``"move 2 0"`` or ``{"move": [2, 0]}`` into a GestureStep."""
    label = f" at {where}" if where else ""
    if isinstance(raw, dict):
        if len(raw) != 1:
            raise ValueError(f"Invalid gesture step{label}: {raw!r}")
        op, value = next(iter(raw.items()))
        if value is None or value is True:
            args: list[Any] = []
        elif isinstance(value, (list, tuple)):
            args = list(value)
        else:
            args = [value]
        tokens = [str(op), *(str(a) for a in args)]
    elif isinstance(raw, str):
        tokens = raw.split()
    else:
        raise ValueError(f"Invalid gesture step{label}: {raw!r}")

    if not tokens:
        raise ValueError(f"Empty gesture step{label}")
    op, args = tokens[0].lower(), tuple(tokens[1:])
    if op not in STEP_ARITY:
        raise ValueError(f"Unknown gesture step{label}: {op!r}")
    if len(args) != STEP_ARITY[op]:
        raise ValueError(
            f"Gesture step '{op}'{label} takes {STEP_ARITY[op]} argument(s), got {len(args)}"
        )
    if op == "add" and args[0] not in BLOCK_KINDS:
        raise ValueError(
            f"Unknown block kind{label}: {args[0]!r} (expected one of {', '.join(BLOCK_KINDS)})"
        )
    return GestureStep(op=op, args=args)


def load_gesture_script(path: str | Path) -> list[GestureStep]:
    """Load gesture steps from a YAML/JSON list or a plain-text file.

    Supports two formats:
    - **YAML / JSON**: a list of steps, each a string (``"add user"``) or a
      single-key mapping (``{move: [2, 0]}``)
    - **Plain text**: one step per line (blank lines and ``#`` comments ignored)
    """
    p = Path(path)
    text = p.read_text()

    # Structured list first
    try:
        data = json.loads(text) if p.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError):
        data = None
    if isinstance(data, list):
        return [parse_step(item, where=f"item {i}") for i, item in enumerate(data, 1)]

    # Fall back to plain text, one step per line
    steps = []
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.split("#", 1)[0].strip()
        if line:
            steps.append(parse_step(line, where=f"line {lineno}"))
    return steps
