"""GestureResolver: turns drag-start / drag-end pairs into store operations."""

from __future__ import annotations

import logging

from ..types import (
    DROP_ZONE_ID,
    IDLE,
    GestureOutcome,
    GestureState,
    MessageBlock,
    is_block_kind,
    kind_from_template_id,
)
from .sequence_store import SequenceStore

logger = logging.getLogger(__name__)


class GestureResolver:
    """Two-state machine (idle / dragging) over one SequenceStore.

    - Palette drags dropped on any valid target append a new block at the
      end. The drop position never picks an insertion index.
    - Item drags dropped on another block move the item to that block's
      position. Dropping on itself is a no-op.
    - A drag that ends without a valid target is cancelled with no mutation.

    Only one gesture is in flight at a time; a drag-start while dragging is
    ignored. The resolver is back to idle before any drag-end returns.
    """

    def __init__(self, store: SequenceStore) -> None:
        self.store = store
        self._state: GestureState = IDLE

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state.is_dragging

    def is_valid_target(self, target_id: str | None) -> bool:
        """A block currently in the sequence, or the context-window drop zone."""
        if target_id is None:
            return False
        return target_id == DROP_ZONE_ID or target_id in self.store

    def drag_start(
        self, source_id: str, is_template: bool, kind: str | None = None
    ) -> bool:
        """Begin a gesture. Returns False if it was not accepted."""
        if self._state.is_dragging:
            logger.debug(
                "Ignoring drag-start of %s: %s already in flight",
                source_id, self._state.active_id,
            )
            return False

        if is_template:
            kind = kind or kind_from_template_id(source_id)
            if not is_block_kind(kind):
                logger.debug("Ignoring palette drag %s with kind %r", source_id, kind)
                return False
            self._state = GestureState(active_id=source_id, dragged_kind=kind)
        else:
            if source_id not in self.store:
                logger.debug("Ignoring drag-start of unknown block %s", source_id)
                return False
            self._state = GestureState(active_id=source_id)

        logger.debug("Drag started: %s (palette kind=%s)", source_id, self._state.dragged_kind)
        return True

    def drag_end(self, source_id: str, target_id: str | None = None) -> GestureOutcome:
        """Finish the in-flight gesture and apply at most one store operation."""
        gesture = self._state
        self._state = IDLE

        if not gesture.is_dragging:
            logger.debug("Drag-end for %s with no gesture in flight", source_id)
            return GestureOutcome(action="noop", source_id=source_id, target_id=target_id)

        active_id = gesture.active_id
        if source_id != active_id:
            logger.warning(
                "Drag-end source %s does not match active drag %s; cancelling",
                source_id, active_id,
            )
            return GestureOutcome(action="cancel", source_id=active_id, target_id=target_id)

        if not self.is_valid_target(target_id):
            logger.debug("Drag of %s cancelled (target=%s)", active_id, target_id)
            return GestureOutcome(action="cancel", source_id=active_id, target_id=target_id)

        if gesture.from_palette:
            block = self.store.insert_new(gesture.dragged_kind)
            return GestureOutcome(
                action="insert",
                source_id=active_id,
                target_id=target_id,
                block=block,
                changed=True,
            )

        if target_id == active_id:
            return GestureOutcome(action="noop", source_id=active_id, target_id=target_id)

        changed = self.store.move(active_id, target_id)
        return GestureOutcome(
            action="move", source_id=active_id, target_id=target_id, changed=changed
        )

    def cancel(self) -> GestureOutcome:
        """Abort the in-flight gesture, if any, without touching the store."""
        gesture = self._state
        self._state = IDLE
        if not gesture.is_dragging:
            return GestureOutcome(action="noop")
        logger.debug("Drag of %s cancelled explicitly", gesture.active_id)
        return GestureOutcome(action="cancel", source_id=gesture.active_id)

    def remove(self, block_id: str) -> MessageBlock | None:
        """Delete a block from the sequence (the renderer's delete button)."""
        return self.store.remove(block_id)
