"""All dataclasses and type aliases for context-playground."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Blocks & templates
# ---------------------------------------------------------------------------

BlockKind = Literal["user", "assistant", "system"]

BLOCK_KINDS: tuple[str, ...] = ("user", "assistant", "system")

TEMPLATE_ID_PREFIX = "palette:"
DROP_ZONE_ID = "context-window"


def is_block_kind(value: object) -> bool:
    return isinstance(value, str) and value in BLOCK_KINDS


def template_id(kind: str) -> str:
    """Drag-source id of the palette entry for ``kind``."""
    return f"{TEMPLATE_ID_PREFIX}{kind}"


def kind_from_template_id(source_id: str) -> str | None:
    """Inverse of :func:`template_id`; None for non-palette ids."""
    if not source_id.startswith(TEMPLATE_ID_PREFIX):
        return None
    kind = source_id[len(TEMPLATE_ID_PREFIX):]
    return kind if is_block_kind(kind) else None


@dataclass(frozen=True)
class MessageBlock:
    """One block placed in the context window."""
    id: str
    kind: BlockKind
    content: str
    token_cost: int

    def to_export_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "content": self.content,
            "token_cost": self.token_cost,
        }


@dataclass(frozen=True)
class SourceTemplate:
    """Palette entry used to synthesize new blocks of one kind."""
    kind: BlockKind
    label: str
    content: str

    @property
    def source_id(self) -> str:
        return template_id(self.kind)


# ---------------------------------------------------------------------------
# Derived state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UsageAggregate:
    """Token usage of the current sequence against the fixed capacity.

    ``usage_ratio`` is not clamped: values above 1.0 mean the sequence
    overflows the capacity, which is only ever displayed.
    """
    total_tokens: int
    capacity: int
    usage_ratio: float
    block_count: int = 0

    @property
    def usage_percent(self) -> float:
        return self.usage_ratio * 100

    @property
    def overflow(self) -> bool:
        return self.usage_ratio > 1.0

    def to_export_dict(self) -> dict:
        return {
            "total_tokens": self.total_tokens,
            "capacity": self.capacity,
            "usage_ratio": self.usage_ratio,
            "block_count": self.block_count,
        }


@dataclass(frozen=True)
class GestureState:
    """In-flight drag: what is being dragged and, for palette drags, which kind."""
    active_id: str | None = None
    dragged_kind: BlockKind | None = None

    @property
    def is_dragging(self) -> bool:
        return self.active_id is not None

    @property
    def from_palette(self) -> bool:
        return self.dragged_kind is not None


IDLE = GestureState()


GestureAction = Literal["insert", "move", "noop", "cancel"]


@dataclass(frozen=True)
class GestureOutcome:
    """What a finished gesture did to the sequence."""
    action: GestureAction
    source_id: str | None = None
    target_id: str | None = None
    block: MessageBlock | None = None  # set for "insert"
    changed: bool = False


@dataclass(frozen=True)
class PlaygroundSnapshot:
    """Read-only view handed to renderers after every mutation."""
    blocks: tuple[MessageBlock, ...]
    usage: UsageAggregate
    gesture: GestureState = IDLE

    def to_export_dict(self) -> dict:
        """Serializable dict for JSON display."""
        return {
            "blocks": [b.to_export_dict() for b in self.blocks],
            "usage": self.usage.to_export_dict(),
            "gesture": {
                "active_id": self.gesture.active_id,
                "dragged_kind": self.gesture.dragged_kind,
            },
        }


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

@runtime_checkable
class TokenCostSource(Protocol):
    """Assigns the synthetic token cost of a newly inserted block."""

    def __call__(self, kind: str) -> int: ...


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATES: dict[str, SourceTemplate] = {
    "user": SourceTemplate(
        kind="user",
        label="User Input",
        content="Can you explain quantum computing simply?",
    ),
    "assistant": SourceTemplate(
        kind="assistant",
        label="AI Response",
        content="Quantum computing uses quantum bits or qubits...",
    ),
    "system": SourceTemplate(
        kind="system",
        label="System Prompt",
        content="You are an expert in physics.",
    ),
}


@dataclass
class InitialBlockConfig:
    """The single block the sequence starts with and resets to."""
    id: str = "system-1"
    kind: str = "system"
    content: str = "You are a helpful AI assistant."
    token_cost: int = 7

    def to_block(self) -> MessageBlock:
        return MessageBlock(
            id=self.id,
            kind=self.kind,  # type: ignore[arg-type]
            content=self.content,
            token_cost=self.token_cost,
        )


@dataclass
class UsageConfig:
    """Budget bar colour thresholds (fractions of capacity)."""
    warn_threshold: float = 0.70
    danger_threshold: float = 0.85


@dataclass
class PlaygroundConfig:
    version: str = "1.0"
    capacity: int = 4096
    token_cost_range: tuple[int, int] = (5, 24)
    token_source: str = "random"  # "random", "fixed:<n>", "callable:module:func"
    seed: int | None = None
    initial_block: InitialBlockConfig = field(default_factory=InitialBlockConfig)
    templates: dict[str, SourceTemplate] = field(
        default_factory=lambda: dict(DEFAULT_TEMPLATES)
    )
    usage: UsageConfig = field(default_factory=UsageConfig)
