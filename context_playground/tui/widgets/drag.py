"""Mouse drag plumbing shared by palette items and the block list."""

from __future__ import annotations

from textual import events
from textual.geometry import Offset
from textual.message import Message
from textual.widget import Widget


class DragStarted(Message):
    """Posted on mouse-down over something draggable."""

    def __init__(self, source_id: str, is_template: bool, kind: str | None = None) -> None:
        super().__init__()
        self.source_id = source_id
        self.is_template = is_template
        self.kind = kind


class DragEnded(Message):
    """Posted on mouse-up; ``screen_offset`` is where the pointer was released."""

    def __init__(self, source_id: str, screen_offset: Offset) -> None:
        super().__init__()
        self.source_id = source_id
        self.screen_offset = screen_offset


class DragSource(Widget):
    """Widget that starts a drag on mouse-down and captures the mouse until release.

    Subclasses return ``(source_id, is_template, kind)`` from
    ``drag_source_at`` or None where nothing is draggable.
    """

    _dragging_id: str | None = None

    def drag_source_at(self, event: events.MouseDown) -> tuple[str, bool, str | None] | None:
        raise NotImplementedError

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.button != 1:
            return
        source = self.drag_source_at(event)
        if source is None:
            return
        source_id, is_template, kind = source
        self._dragging_id = source_id
        self.capture_mouse()
        self.post_message(DragStarted(source_id, is_template, kind))

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self._dragging_id is None:
            return
        source_id = self._dragging_id
        self._dragging_id = None
        self.release_mouse()
        self.post_message(DragEnded(source_id, event.screen_offset))
