"""Tests for GestureResolver."""

from __future__ import annotations

from conftest import make_store
from context_playground.core.gesture_resolver import GestureResolver
from context_playground.types import DROP_ZONE_ID, IDLE, template_id


def _with_blocks(*kinds: str) -> GestureResolver:
    store = make_store()
    for kind in kinds:
        store.insert_new(kind)
    return GestureResolver(store)


class TestDragStart:
    def test_palette_drag_captures_kind(self, resolver):
        assert resolver.drag_start(template_id("user"), is_template=True, kind="user")
        assert resolver.state.active_id == "palette:user"
        assert resolver.state.dragged_kind == "user"
        assert resolver.is_dragging

    def test_palette_kind_inferred_from_source_id(self, resolver):
        assert resolver.drag_start("palette:assistant", is_template=True)
        assert resolver.state.dragged_kind == "assistant"

    def test_palette_drag_with_bad_kind_ignored(self, resolver):
        assert not resolver.drag_start("palette:tool", is_template=True)
        assert resolver.state == IDLE

    def test_item_drag_has_no_kind(self, resolver):
        assert resolver.drag_start("system-1", is_template=False)
        assert resolver.state.active_id == "system-1"
        assert resolver.state.dragged_kind is None

    def test_item_drag_of_unknown_block_ignored(self, resolver):
        assert not resolver.drag_start("missing", is_template=False)
        assert not resolver.is_dragging

    def test_second_drag_start_ignored(self, resolver):
        resolver.drag_start("system-1", is_template=False)
        assert not resolver.drag_start("palette:user", is_template=True, kind="user")
        assert resolver.state.active_id == "system-1"
        assert resolver.state.dragged_kind is None


class TestPaletteDrop:
    def test_drop_on_window_appends(self):
        r = _with_blocks("user", "assistant")
        r.drag_start("palette:system", is_template=True, kind="system")
        outcome = r.drag_end("palette:system", DROP_ZONE_ID)
        assert outcome.action == "insert"
        assert outcome.changed
        assert r.store.blocks[-1] == outcome.block
        assert outcome.block.kind == "system"
        assert r.state == IDLE

    def test_drop_on_first_block_still_appends(self):
        r = _with_blocks("user", "assistant")
        r.drag_start("palette:user", is_template=True, kind="user")
        outcome = r.drag_end("palette:user", "system-1")
        assert outcome.action == "insert"
        assert r.store.ids()[-1] == outcome.block.id
        assert r.store.ids()[0] == "system-1"

    def test_drop_outside_cancels(self):
        r = _with_blocks("user")
        before = r.store.blocks
        usage = r.store.current_usage()
        r.drag_start("palette:user", is_template=True, kind="user")
        outcome = r.drag_end("palette:user", None)
        assert outcome.action == "cancel"
        assert not outcome.changed
        assert r.store.blocks == before
        assert r.store.current_usage() == usage
        assert r.state == IDLE

    def test_drop_on_stale_block_cancels(self):
        r = _with_blocks("user")
        r.drag_start("palette:user", is_template=True, kind="user")
        outcome = r.drag_end("palette:user", "gone")
        assert outcome.action == "cancel"
        assert len(r.store) == 2


class TestReorderDrop:
    def test_drop_on_other_block_moves(self):
        r = _with_blocks("user", "assistant")  # [system-1, b1, b2]
        r.drag_start("b2", is_template=False)
        outcome = r.drag_end("b2", "system-1")
        assert outcome.action == "move"
        assert outcome.changed
        assert r.store.ids() == ["b2", "system-1", "b1"]
        assert r.state == IDLE

    def test_drop_on_self_is_noop(self):
        r = _with_blocks("user")
        before = r.store.blocks
        r.drag_start("b1", is_template=False)
        outcome = r.drag_end("b1", "b1")
        assert outcome.action == "noop"
        assert r.store.blocks == before
        assert r.state == IDLE

    def test_drop_on_window_zone_keeps_order(self):
        r = _with_blocks("user")
        before = r.store.blocks
        r.drag_start("b1", is_template=False)
        outcome = r.drag_end("b1", DROP_ZONE_ID)
        assert outcome.action == "move"
        assert not outcome.changed
        assert r.store.blocks == before

    def test_drop_without_target_cancels(self):
        r = _with_blocks("user")
        before = r.store.blocks
        r.drag_start("b1", is_template=False)
        assert r.drag_end("b1").action == "cancel"
        assert r.store.blocks == before

    def test_source_removed_mid_drag(self):
        r = _with_blocks("user", "assistant")
        r.drag_start("b1", is_template=False)
        r.remove("b1")
        outcome = r.drag_end("b1", "system-1")
        assert not outcome.changed
        assert r.store.ids() == ["system-1", "b2"]
        assert r.state == IDLE

    def test_target_removed_mid_drag(self):
        r = _with_blocks("user", "assistant")
        r.drag_start("b1", is_template=False)
        r.remove("b2")
        outcome = r.drag_end("b1", "b2")
        assert outcome.action == "cancel"
        assert r.store.ids() == ["system-1", "b1"]


class TestIdleTransitions:
    def test_drag_end_without_start_is_noop(self, resolver):
        outcome = resolver.drag_end("system-1", "system-1")
        assert outcome.action == "noop"
        assert len(resolver.store) == 1

    def test_mismatched_drag_end_cancels(self):
        r = _with_blocks("user")
        r.drag_start("b1", is_template=False)
        outcome = r.drag_end("system-1", "b1")
        assert outcome.action == "cancel"
        assert r.store.ids() == ["system-1", "b1"]
        assert r.state == IDLE

    def test_cancel(self, resolver):
        resolver.drag_start("palette:user", is_template=True, kind="user")
        assert resolver.cancel().action == "cancel"
        assert resolver.state == IDLE
        assert len(resolver.store) == 1

    def test_cancel_when_idle(self, resolver):
        assert resolver.cancel().action == "noop"

    def test_new_gesture_after_finish(self, resolver):
        resolver.drag_start("palette:user", is_template=True, kind="user")
        resolver.drag_end("palette:user", DROP_ZONE_ID)
        assert resolver.drag_start("palette:assistant", is_template=True, kind="assistant")
        outcome = resolver.drag_end("palette:assistant", DROP_ZONE_ID)
        assert [b.kind for b in resolver.store.blocks] == ["system", "user", "assistant"]
        assert outcome.block.kind == "assistant"
