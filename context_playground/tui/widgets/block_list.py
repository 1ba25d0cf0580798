"""Context window: the ordered block sequence, top to bottom in read order."""

from __future__ import annotations

from textual import events
from textual.widgets import Static

from ...types import MessageBlock
from .drag import DragSource
from .palette import KIND_COLORS

LINES_PER_BLOCK = 3  # header, content, spacer


class BlockList(DragSource, Static):
    """Renders one card per block. Mouse-down on a card starts a reorder drag.

    Cards are fixed height so a content line maps straight to a block index.
    """

    DEFAULT_CSS = """
    BlockList {
        padding: 0 1;
        height: auto;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._blocks: tuple[MessageBlock, ...] = ()
        self._selected: int = -1
        self._held_id: str | None = None

    @property
    def blocks(self) -> tuple[MessageBlock, ...]:
        return self._blocks

    @property
    def selected_index(self) -> int:
        return self._selected

    @property
    def selected_block(self) -> MessageBlock | None:
        if 0 <= self._selected < len(self._blocks):
            return self._blocks[self._selected]
        return None

    def set_blocks(
        self,
        blocks: tuple[MessageBlock, ...],
        held_id: str | None = None,
        select_id: str | None = None,
    ) -> None:
        """Replace the displayed sequence, keeping the selection on a sensible block."""
        previous = self.selected_block
        self._blocks = blocks
        self._held_id = held_id
        ids = [b.id for b in blocks]
        if select_id in ids:
            self._selected = ids.index(select_id)
        elif previous is not None and previous.id in ids:
            self._selected = ids.index(previous.id)
        elif blocks:
            self._selected = min(max(self._selected, 0), len(blocks) - 1)
        else:
            self._selected = -1
        self.refresh(layout=True)

    def select_prev(self) -> None:
        if self._blocks and self._selected > 0:
            self._selected -= 1
            self.refresh()

    def select_next(self) -> None:
        if self._blocks and self._selected < len(self._blocks) - 1:
            self._selected += 1
            self.refresh()

    def block_at_line(self, line: int) -> MessageBlock | None:
        if line < 0:
            return None
        index = line // LINES_PER_BLOCK
        if index < len(self._blocks):
            return self._blocks[index]
        return None

    def block_at_screen_y(self, screen_y: int) -> MessageBlock | None:
        return self.block_at_line(screen_y - self.content_region.y)

    def drag_source_at(self, event: events.MouseDown) -> tuple[str, bool, str | None] | None:
        offset = event.get_content_offset(self)
        if offset is None:
            return None
        block = self.block_at_line(offset.y)
        if block is None:
            return None
        self._selected = self._blocks.index(block)
        return block.id, False, None

    def render(self) -> str:
        if not self._blocks:
            return "\n[dim]  Drag blocks here to start[/dim]\n"

        width = max(self.size.width, 20)
        lines: list[str] = []
        for i, block in enumerate(self._blocks):
            color = KIND_COLORS.get(block.kind, "white")
            marker = ">" if i == self._selected else " "
            held = " [bold yellow](moving)[/bold yellow]" if block.id == self._held_id else ""
            header = (
                f"{marker} [bold {color}]{block.kind.upper()}[/bold {color}]"
                f"  [dim]{block.token_cost} tokens[/dim]{held}"
            )
            content = _truncate(block.content, width - 4)
            if i == self._selected:
                header = f"[reverse]{header}[/reverse]"
            lines.append(header)
            lines.append(f"    {_escape(content)}")
            lines.append("")
        return "\n".join(lines)


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


def _escape(text: str) -> str:
    return text.replace("[", r"\[")
