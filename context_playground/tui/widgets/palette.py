"""Palette of source templates to drag into the context window."""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ...types import SourceTemplate
from .drag import DragSource

KIND_COLORS = {
    "user": "blue",
    "assistant": "cyan",
    "system": "magenta",
}

KIND_KEYS = {"user": "1", "assistant": "2", "system": "3"}


class PaletteItem(DragSource, Static):
    """One draggable template. Dims while it is being dragged."""

    DEFAULT_CSS = """
    PaletteItem {
        border: round $primary;
        padding: 0 1;
        margin-bottom: 1;
    }
    PaletteItem.-dragging {
        opacity: 50%;
    }
    """

    def __init__(self, template: SourceTemplate, **kwargs) -> None:
        super().__init__("", **kwargs)
        self.template = template

    def render(self) -> str:
        color = KIND_COLORS.get(self.template.kind, "white")
        key = KIND_KEYS.get(self.template.kind, "")
        return f"[bold {color}]{self.template.label}[/bold {color}]  [dim]{key}[/dim]"

    def drag_source_at(self, event: events.MouseDown) -> tuple[str, bool, str | None]:
        return self.template.source_id, True, self.template.kind


class Palette(Vertical):
    """Left column: title, one item per template, how-it-works note."""

    DEFAULT_CSS = """
    Palette {
        padding: 0 1;
    }
    """

    def __init__(self, templates: tuple[SourceTemplate, ...], **kwargs) -> None:
        super().__init__(**kwargs)
        self._templates = templates

    def compose(self) -> ComposeResult:
        yield Static("[bold]ADD BLOCKS[/bold]", classes="panel-title")
        for template in self._templates:
            yield PaletteItem(template, id=f"palette-{template.kind}")
        yield Static(
            "[dim][b]How it works:[/b] the model reads the entire stack from "
            "top to bottom every time it generates a new response.[/dim]",
            id="palette-note",
        )

    def set_dragging(self, kind: str | None) -> None:
        for item in self.query(PaletteItem):
            item.set_class(item.template.kind == kind, "-dragging")
