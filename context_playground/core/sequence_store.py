"""SequenceStore: ordered message blocks plus their derived token usage."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from ..token_source import RandomTokenCost, new_block_id
from ..types import (
    BLOCK_KINDS,
    DEFAULT_TEMPLATES,
    InitialBlockConfig,
    MessageBlock,
    SourceTemplate,
    TokenCostSource,
    UsageAggregate,
)
from .usage import compute_usage

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 100


class SequenceStore:
    """Ordered list of message blocks in conversational read order.

    Every mutation recomputes the usage aggregate before returning, so
    ``blocks`` and ``current_usage()`` always agree. Unknown ids passed to
    ``move`` / ``remove`` are no-ops. Capacity is never enforced: the
    aggregate may report a ratio above 1.0 and nothing is evicted.

    Purely in-memory. Not persisted.
    """

    def __init__(
        self,
        capacity: int = 4096,
        token_source: TokenCostSource | None = None,
        initial_block: MessageBlock | InitialBlockConfig | None = None,
        templates: dict[str, SourceTemplate] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.token_source = token_source or RandomTokenCost()
        self.id_factory = id_factory or new_block_id

        if initial_block is None:
            initial_block = InitialBlockConfig()
        if isinstance(initial_block, InitialBlockConfig):
            initial_block = initial_block.to_block()
        if initial_block.kind not in BLOCK_KINDS:
            raise ValueError(f"Unknown block kind: {initial_block.kind!r}")
        self._initial_block = initial_block

        templates = templates if templates is not None else DEFAULT_TEMPLATES
        missing = [k for k in BLOCK_KINDS if k not in templates]
        if missing:
            raise ValueError(f"Missing templates for kinds: {', '.join(missing)}")
        self._templates = {k: templates[k] for k in BLOCK_KINDS}

        self._blocks: list[MessageBlock] = [self._initial_block]
        self._usage = compute_usage(self._blocks, self.capacity)

    # -- reads ---------------------------------------------------------------

    @property
    def blocks(self) -> tuple[MessageBlock, ...]:
        return tuple(self._blocks)

    @property
    def templates(self) -> tuple[SourceTemplate, ...]:
        """Palette entries in display order (user, assistant, system)."""
        return tuple(self._templates.values())

    @property
    def initial_block(self) -> MessageBlock:
        return self._initial_block

    def template_for(self, kind: str) -> SourceTemplate:
        try:
            return self._templates[kind]
        except KeyError:
            raise ValueError(f"Unknown block kind: {kind!r}") from None

    def current_usage(self) -> UsageAggregate:
        return self._usage

    def index_of(self, block_id: str) -> int | None:
        for i, block in enumerate(self._blocks):
            if block.id == block_id:
                return i
        return None

    def get(self, block_id: str) -> MessageBlock | None:
        idx = self.index_of(block_id)
        return self._blocks[idx] if idx is not None else None

    def ids(self) -> list[str]:
        return [b.id for b in self._blocks]

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[MessageBlock]:
        return iter(tuple(self._blocks))

    def __contains__(self, block_id: object) -> bool:
        return any(b.id == block_id for b in self._blocks)

    # -- mutations -----------------------------------------------------------

    def insert_new(self, kind: str) -> MessageBlock:
        """Synthesize a block of ``kind`` and append it to the end."""
        template = self.template_for(kind)
        cost = self.token_source(kind)
        if cost < 0:
            raise ValueError(f"Token source returned negative cost {cost} for {kind}")
        block = MessageBlock(
            id=self._fresh_id(),
            kind=template.kind,
            content=template.content,
            token_cost=int(cost),
        )
        self._blocks.append(block)
        self._recompute()
        logger.debug("Inserted %s block %s (%d tokens)", kind, block.id, block.token_cost)
        return block

    def move(self, source_id: str, target_id: str) -> bool:
        """Move ``source_id`` to the index ``target_id`` occupies now.

        Stable array move, not a swap: the target's index before removal is
        the destination index. Returns True if the order changed.
        """
        if source_id == target_id:
            return False
        old_index = self.index_of(source_id)
        new_index = self.index_of(target_id)
        if old_index is None or new_index is None:
            logger.debug("Ignoring move %s -> %s: id not in sequence", source_id, target_id)
            return False
        block = self._blocks.pop(old_index)
        self._blocks.insert(new_index, block)
        self._recompute()
        logger.debug("Moved %s from %d to %d", source_id, old_index, new_index)
        return True

    def remove(self, block_id: str) -> MessageBlock | None:
        """Delete ``block_id``. Returns the removed block, None if absent."""
        idx = self.index_of(block_id)
        if idx is None:
            logger.debug("Ignoring remove of unknown id %s", block_id)
            return None
        block = self._blocks.pop(idx)
        self._recompute()
        logger.debug("Removed %s block %s", block.kind, block.id)
        return block

    def reset(self) -> None:
        """Restore the single initial block."""
        self._blocks = [self._initial_block]
        self._recompute()
        logger.info("Sequence reset to initial block %s", self._initial_block.id)

    # -- internals -----------------------------------------------------------

    def _fresh_id(self) -> str:
        existing = set(self.ids())
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self.id_factory()
            if candidate not in existing:
                return candidate
        raise RuntimeError(
            f"id_factory produced no unused id after {_MAX_ID_ATTEMPTS} attempts"
        )

    def _recompute(self) -> None:
        self._usage = compute_usage(self._blocks, self.capacity)

    def check_consistency(self) -> list[str]:
        """Re-derive invariants. Returns problems found (empty = consistent)."""
        problems: list[str] = []
        ids = self.ids()
        if len(ids) != len(set(ids)):
            problems.append("duplicate block ids")
        expected = sum(b.token_cost for b in self._blocks)
        if self._usage.total_tokens != expected:
            problems.append(
                f"total_tokens {self._usage.total_tokens} != sum of costs {expected}"
            )
        if self._usage.block_count != len(self._blocks):
            problems.append("block_count out of date")
        return problems
