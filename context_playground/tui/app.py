"""PlaygroundApp: Textual application wiring the playground state to its widgets."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.errors import NoWidget
from textual.geometry import Offset
from textual.widgets import Footer, Static

from ..config import load_config
from ..core.usage import usage_level
from ..types import DROP_ZONE_ID, GestureOutcome, PlaygroundConfig, template_id
from .state import GestureStep, PlaygroundState
from .widgets.block_list import BlockList
from .widgets.budget_bar import BudgetBar
from .widgets.drag import DragEnded, DragStarted
from .widgets.palette import Palette

IDLE_STATUS = "[dim]Waiting for next input...[/dim]"


class PlaygroundApp(App):
    """Drag blocks from the palette to build a conversation context."""

    CSS_PATH = "playground.tcss"
    TITLE = "Context Visualizer"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("1", "add_block('user')", "User", priority=True),
        Binding("2", "add_block('assistant')", "Assistant", priority=True),
        Binding("3", "add_block('system')", "System", priority=True),
        Binding("up,k", "select_prev", "Prev", show=False, priority=True),
        Binding("down,j", "select_next", "Next", show=False, priority=True),
        Binding("space", "pick_or_drop", "Move", priority=True),
        Binding("enter", "drop", "Drop", show=False, priority=True),
        Binding("escape", "cancel_drag", "Cancel", priority=True),
        Binding("d,delete", "remove_selected", "Delete", priority=True),
        Binding("r", "reset", "Reset", priority=True),
    ]

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        config_path: str | None = None,
        state: PlaygroundState | None = None,
        replay_steps: list[GestureStep] | None = None,
        replay_interval: float = 0.5,
    ) -> None:
        super().__init__()
        if state is None:
            if config is None:
                config = load_config(config_path)
            state = PlaygroundState.from_config(config)
        self.state = state
        self._replay_steps: list[GestureStep] = list(replay_steps or [])
        self._replay_interval = replay_interval
        self._replay_timer = None
        self._status = IDLE_STATUS

    def on_mount(self) -> None:
        self._refresh_panels()
        if self._replay_steps:
            n = len(self._replay_steps)
            self._set_status(f"Replay mode: {n} step{'s' if n != 1 else ''} queued.")
            self._replay_timer = self.set_interval(self._replay_interval, self._replay_next)

    @property
    def _block_list(self) -> BlockList:
        return self.query_one("#block-list", BlockList)

    @property
    def _budget_bar(self) -> BudgetBar:
        return self.query_one("#budget-bar", BudgetBar)

    @property
    def _palette(self) -> Palette:
        return self.query_one("#palette", Palette)

    # -- mouse gestures ------------------------------------------------------

    def on_drag_started(self, event: DragStarted) -> None:
        if self.state.resolver.drag_start(event.source_id, event.is_template, event.kind):
            self._refresh_panels()
            self._set_status(self._dragging_status())

    def on_drag_ended(self, event: DragEnded) -> None:
        if self.state.resolver.state.active_id != event.source_id:
            # Mouse-down was rejected; leave any keyboard gesture alone
            return
        target = self.drop_target_at(event.screen_offset)
        outcome = self.state.resolver.drag_end(event.source_id, target)
        self._after_gesture(outcome)

    def drop_target_at(self, offset: Offset) -> str | None:
        """Block id under ``offset``, the window drop zone, or None outside it."""
        try:
            widget, _ = self.get_widget_at(offset.x, offset.y)
        except NoWidget:
            return None
        for node in widget.ancestors_with_self:
            if isinstance(node, BlockList):
                block = node.block_at_screen_y(offset.y)
                return block.id if block is not None else DROP_ZONE_ID
            if node.id == DROP_ZONE_ID:
                return DROP_ZONE_ID
        return None

    # -- keyboard gestures ---------------------------------------------------

    def action_add_block(self, kind: str) -> None:
        """Drag the palette template for ``kind`` onto the context window."""
        source = template_id(kind)
        if not self.state.resolver.drag_start(source, is_template=True, kind=kind):
            return
        self._after_gesture(self.state.resolver.drag_end(source, DROP_ZONE_ID))

    def action_select_prev(self) -> None:
        self._block_list.select_prev()

    def action_select_next(self) -> None:
        self._block_list.select_next()

    def action_pick_or_drop(self) -> None:
        """Pick up the selected block, or drop the held one onto the selection."""
        if self.state.resolver.is_dragging:
            self.action_drop()
            return
        block = self._block_list.selected_block
        if block is None:
            return
        if self.state.resolver.drag_start(block.id, is_template=False):
            self._refresh_panels()
            self._set_status(self._dragging_status())

    def action_drop(self) -> None:
        gesture = self.state.resolver.state
        if not gesture.is_dragging:
            return
        selected = self._block_list.selected_block
        target = selected.id if selected is not None else None
        self._after_gesture(self.state.resolver.drag_end(gesture.active_id, target))

    def action_cancel_drag(self) -> None:
        outcome = self.state.resolver.cancel()
        if outcome.action == "cancel":
            self._after_gesture(outcome)

    def action_remove_selected(self) -> None:
        block = self._block_list.selected_block
        if block is None:
            return
        if self.state.resolver.state.active_id == block.id:
            self.state.resolver.cancel()
        removed = self.state.resolver.remove(block.id)
        self._refresh_panels()
        if removed is not None:
            self._set_status(f"Removed {removed.kind} block ({removed.token_cost} tokens).")

    def action_reset(self) -> None:
        """Reset the conversation to the initial system block."""
        self.state.resolver.cancel()
        self.state.store.reset()
        self._refresh_panels()
        self._set_status("Conversation reset.")

    # -- replay --------------------------------------------------------------

    def _replay_next(self) -> None:
        if not self._replay_steps:
            if self._replay_timer is not None:
                self._replay_timer.stop()
                self._replay_timer = None
            self._set_status("Replay complete.")
            return
        step = self._replay_steps.pop(0)
        result = self.state.apply_step(step)
        select_id = result.block.id if result.action == "insert" and result.block else None
        self._refresh_panels(select_id=select_id)
        self._set_status(f"Replay: {step} -> {result.action}")

    # -- rendering -----------------------------------------------------------

    def _after_gesture(self, outcome: GestureOutcome) -> None:
        select_id = None
        if outcome.action == "insert" and outcome.block is not None:
            select_id = outcome.block.id
            self._set_status(
                f"Added {outcome.block.kind} block ({outcome.block.token_cost} tokens)."
            )
        elif outcome.action == "move" and outcome.changed:
            select_id = outcome.source_id
            self._set_status("Block moved.")
        else:
            self._set_status(IDLE_STATUS)
        self._refresh_panels(select_id=select_id)

    def _dragging_status(self) -> str:
        gesture = self.state.resolver.state
        if gesture.from_palette:
            template = self.state.store.template_for(gesture.dragged_kind)
            return f"Dragging [b]{template.label}[/b]: drop it on the context window."
        return "Moving block: up/down choose a target, enter drops, escape cancels."

    def _set_status(self, text: str) -> None:
        self._status = text
        self.query_one("#status-line", Static).update(text)

    def _refresh_panels(self, select_id: str | None = None) -> None:
        """Re-read the snapshot into every widget."""
        snapshot = self.state.snapshot()
        gesture = snapshot.gesture
        held = gesture.active_id if gesture.is_dragging and not gesture.from_palette else None
        self._block_list.set_blocks(snapshot.blocks, held_id=held, select_id=select_id)
        self._budget_bar.update_usage(
            snapshot.usage, usage_level(snapshot.usage, self.state.config.usage)
        )
        self._palette.set_dragging(gesture.dragged_kind)

    def compose(self) -> ComposeResult:
        yield Static(
            "[bold]Context Visualizer[/bold]\n"
            "[dim]Drag blocks from the left to build the conversation context. "
            "See how the model's memory grows with each interaction.[/dim]",
            id="page-header",
        )
        with Horizontal(id="main-layout"):
            yield Palette(self.state.store.templates, id="palette")
            with Vertical(id=DROP_ZONE_ID):
                yield Static(
                    "[bold]CONTEXT WINDOW[/bold]  [dim]context_window.json, "
                    "read direction top to bottom[/dim]",
                    id="window-header",
                )
                with VerticalScroll(id="window-scroll"):
                    yield BlockList(id="block-list")
                yield Static(self._status, id="status-line")
            with Vertical(id="usage-panel"):
                yield BudgetBar(capacity=self.state.store.capacity, id="budget-bar")
                yield Static(
                    "[bold]WHAT IS CONTEXT?[/bold]\n"
                    "[dim]LLMs don't have a real memory. They see the entire "
                    "conversation history sent to them every time you press "
                    'send. This history is called "context".[/dim]',
                    id="context-note",
                )
        yield Footer()


def run_playground(
    config: PlaygroundConfig | None = None,
    config_path: str | None = None,
    replay_steps: list[GestureStep] | None = None,
) -> None:
    """Entry point for the TUI playground."""
    app = PlaygroundApp(
        config=config,
        config_path=config_path,
        replay_steps=replay_steps,
    )
    app.run()
