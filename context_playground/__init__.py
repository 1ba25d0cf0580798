"""context-playground: drag-and-drop context window builder with a token budget."""

from .config import load_config
from .core.gesture_resolver import GestureResolver
from .core.sequence_store import SequenceStore
from .types import (
    GestureOutcome,
    GestureState,
    MessageBlock,
    PlaygroundConfig,
    PlaygroundSnapshot,
    SourceTemplate,
    UsageAggregate,
)

__version__ = "0.1.0"

__all__ = [
    "SequenceStore",
    "GestureResolver",
    "load_config",
    "GestureOutcome",
    "GestureState",
    "MessageBlock",
    "PlaygroundConfig",
    "PlaygroundSnapshot",
    "SourceTemplate",
    "UsageAggregate",
]
