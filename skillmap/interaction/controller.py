"""
Edit/remove modes, row drag-to-reparent, node offset drag and the context menu.
One controller per map view; renderers read its state and feed it pointer events.
Timestamps are milliseconds supplied by the caller; tick(now) fires the long-press timer.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from ..tree.document import SkillMap
from ..tree.model import CENTER_ID

logger = logging.getLogger(__name__)

DRAG_THRESHOLD = 5
LONGPRESS_MS = 450


class Mode(str, Enum):
    EDIT = "edit"
    REMOVE = "remove"


class GesturePhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DRAGGING = "dragging"


class DropResult(str, Enum):
    NONE = "none"  # no gesture owned by that pointer
    CLICK = "click"
    REPARENTED = "reparented"
    TO_ROOT = "to_root"


_TRANSITIONS = {
    (GesturePhase.IDLE, GesturePhase.PENDING),
    (GesturePhase.PENDING, GesturePhase.DRAGGING),
    (GesturePhase.PENDING, GesturePhase.IDLE),
    (GesturePhase.DRAGGING, GesturePhase.IDLE),
}


@dataclass
class ReparentGesture:
    pointer_id: int
    node_id: str
    start_x: float
    start_y: float
    start_t: float


@dataclass
class OffsetDrag:
    pointer_id: int
    node_id: str
    start_x: float
    start_y: float
    base_x: float
    base_y: float
    had_offset: bool = True


@dataclass
class ContextMenu:
    node_id: str
    x: float
    y: float


class InteractionController:
    """Gesture state machine over a SkillMap; the only writer of drag-related state."""

    def __init__(self, doc: SkillMap, drag_threshold: float = DRAG_THRESHOLD, longpress_ms: float = LONGPRESS_MS) -> None:
        self.doc = doc
        self.drag_threshold = drag_threshold
        self.longpress_ms = longpress_ms
        self.mode = Mode.EDIT
        self.phase = GesturePhase.IDLE
        self.gesture: ReparentGesture | None = None
        self.hover_target: str | None = None
        self.offset_drag: OffsetDrag | None = None
        self.menu: ContextMenu | None = None
        self.remove_selection: set[str] = set()
        self.focus_request: str | None = None
        self.click_suppressed = False
        self.captured_pointers: set[int] = set()

    # ---- state ----

    def _set_phase(self, phase: GesturePhase) -> None:
        if (self.phase, phase) not in _TRANSITIONS:
            raise RuntimeError(f"Illegal gesture transition {self.phase.value} -> {phase.value}")
        self.phase = phase

    @property
    def dragging_id(self) -> str | None:
        if self.phase is GesturePhase.DRAGGING and self.gesture:
            return self.gesture.node_id
        return None

    @property
    def busy(self) -> bool:
        return self.phase is not GesturePhase.IDLE or self.offset_drag is not None

    def _reset_gesture(self) -> None:
        if self.gesture:
            self.captured_pointers.discard(self.gesture.pointer_id)
        self.gesture = None
        self.hover_target = None
        if self.phase is not GesturePhase.IDLE:
            self._set_phase(GesturePhase.IDLE)

    def can_drop(self, source_id: str, target_id: str | None) -> bool:
        """Target exists (a task, or the Center meaning root), differs from source and is outside its subtree."""
        tree = self.doc.tree
        if target_id is None or source_id not in tree or source_id == CENTER_ID:
            return False
        if target_id not in tree or target_id == source_id:
            return False
        if target_id == CENTER_ID:
            return True
        return not tree.is_descendant(source_id, target_id)

    # ---- row drag: reparent ----

    def row_pointer_down(
        self,
        pointer_id: int,
        node_id: str,
        x: float,
        y: float,
        t: float,
        *,
        in_text_input: bool = False,
        button: int = 0,
    ) -> bool:
        """Arm a pending reparent gesture; False when the press is not a drag candidate."""
        self.click_suppressed = False
        if button != 0 or in_text_input or self.mode is Mode.REMOVE:
            return False
        if self.gesture is not None or self.offset_drag is not None:
            return False
        if node_id == CENTER_ID or self.doc.tree.get(node_id) is None:
            return False
        self.gesture = ReparentGesture(pointer_id, node_id, x, y, t)
        self._set_phase(GesturePhase.PENDING)
        self.captured_pointers.add(pointer_id)
        return True

    def _promote(self) -> None:
        self._set_phase(GesturePhase.DRAGGING)
        self.click_suppressed = True
        self.menu = None
        logger.debug("Dragging %s", self.gesture.node_id if self.gesture else None)

    def tick(self, t: float) -> bool:
        """Long-press timer; True when it promoted the pending gesture."""
        g = self.gesture
        if g is None or self.phase is not GesturePhase.PENDING:
            return False
        if t - g.start_t >= self.longpress_ms:
            self._promote()
            return True
        return False

    def row_pointer_move(self, pointer_id: int, x: float, y: float, t: float, target_id: str | None = None) -> None:
        g = self.gesture
        if g is None or g.pointer_id != pointer_id:
            return
        if self.phase is GesturePhase.PENDING:
            moved = math.hypot(x - g.start_x, y - g.start_y)
            if moved > self.drag_threshold or t - g.start_t >= self.longpress_ms:
                self._promote()
        if self.phase is GesturePhase.DRAGGING:
            self.hover_target = target_id if self.can_drop(g.node_id, target_id) else None

    def row_pointer_up(self, pointer_id: int, t: float, target_id: str | None = None) -> DropResult:
        g = self.gesture
        if g is None or g.pointer_id != pointer_id:
            return DropResult.NONE
        if self.phase is GesturePhase.PENDING:
            self.tick(t)
        if self.phase is GesturePhase.PENDING:
            self.focus_request = g.node_id
            self._reset_gesture()
            return DropResult.CLICK
        source = g.node_id
        self._reset_gesture()
        if not self.can_drop(source, target_id):
            if target_id is not None:
                logger.debug("No valid drop target under %s (%s)", source, target_id)
            self.doc.tree.set_parent(source, None)
            logger.info("Moved %s to root", source)
            return DropResult.TO_ROOT
        self.doc.tree.set_parent(source, target_id)
        logger.info("Reparented %s under %s", source, target_id)
        return DropResult.REPARENTED

    def pointer_cancel(self, pointer_id: int) -> None:
        """Abort whatever gesture this pointer owns; the tree is untouched and a dragged offset is restored."""
        if self.gesture is not None and self.gesture.pointer_id == pointer_id:
            self._reset_gesture()
        if self.offset_drag is not None and self.offset_drag.pointer_id == pointer_id:
            d = self.offset_drag
            if d.had_offset:
                self.doc.set_offset(d.node_id, d.base_x, d.base_y)
            else:
                self.doc.node_offsets.pop(d.node_id, None)
            self.offset_drag = None
            self.captured_pointers.discard(pointer_id)

    # ---- node body drag: manual offset ----

    def node_pointer_down(self, pointer_id: int, node_id: str, x: float, y: float, *, button: int = 0) -> bool:
        if button != 0 or self.mode is Mode.REMOVE or self.offset_drag is not None or self.gesture is not None:
            return False
        if node_id == CENTER_ID or self.doc.tree.get(node_id) is None:
            return False
        bx, by = self.doc.offset(node_id)
        self.offset_drag = OffsetDrag(pointer_id, node_id, x, y, bx, by, node_id in self.doc.node_offsets)
        self.captured_pointers.add(pointer_id)
        return True

    def node_pointer_move(self, pointer_id: int, x: float, y: float) -> None:
        d = self.offset_drag
        if d is None or d.pointer_id != pointer_id:
            return
        self.doc.set_offset(d.node_id, d.base_x + (x - d.start_x), d.base_y + (y - d.start_y))

    def node_pointer_up(self, pointer_id: int) -> None:
        d = self.offset_drag
        if d is None or d.pointer_id != pointer_id:
            return
        self.offset_drag = None
        self.captured_pointers.discard(pointer_id)

    # ---- remove mode ----

    def enter_remove_mode(self) -> None:
        if self.gesture is not None:
            self._reset_gesture()
        if self.offset_drag is not None:
            self.pointer_cancel(self.offset_drag.pointer_id)
        self.menu = None
        self.remove_selection = set()
        self.mode = Mode.REMOVE

    def toggle_remove_target(self, node_id: str) -> bool:
        """Flip membership; returns whether the node is now selected. The Center cannot be selected."""
        if self.mode is not Mode.REMOVE or node_id == CENTER_ID or self.doc.tree.get(node_id) is None:
            return False
        if node_id in self.remove_selection:
            self.remove_selection.discard(node_id)
            return False
        self.remove_selection.add(node_id)
        return True

    def exit_remove_mode(self) -> set[str]:
        """Leave remove mode, deleting the union of the selected subtrees in one batch."""
        if self.mode is not Mode.REMOVE:
            return set()
        selected = self.remove_selection
        self.remove_selection = set()
        self.mode = Mode.EDIT
        if not selected:
            return set()
        removed = self.doc.tree.delete_subtrees(sorted(selected))
        for tid in removed:
            self.doc.node_offsets.pop(tid, None)
            self.doc.branch_color_override.pop(tid, None)
            self.doc.branch_edge_color_override.pop(tid, None)
        logger.info("Removed %d task(s)", len(removed))
        return removed

    def toggle_mode(self) -> set[str]:
        if self.mode is Mode.REMOVE:
            return self.exit_remove_mode()
        self.enter_remove_mode()
        return set()

    # ---- context menu ----

    def open_context_menu(self, node_id: str, x: float, y: float) -> bool:
        if self.mode is Mode.REMOVE or self.busy or node_id not in self.doc.tree:
            return False
        self.menu = ContextMenu(node_id, x, y)
        return True

    def close_context_menu(self) -> None:
        self.menu = None

    def apply_color(self, color: str) -> bool:
        m = self.menu
        if m is None:
            return False
        tree = self.doc.tree
        task = tree.get(m.node_id)
        if m.node_id == CENTER_ID:
            tree.set_color(CENTER_ID, color)
        elif task is not None and task.parent_id is None:
            self.doc.branch_color_override[m.node_id] = color
        else:
            tree.set_color(m.node_id, color)
        self.menu = None
        return True

    def toggle_done(self) -> bool:
        """Flip done on the menu's node; an unset flag becomes the opposite of the inherited value."""
        m = self.menu
        if m is None:
            return False
        tree = self.doc.tree
        if m.node_id == CENTER_ID:
            tree.set_done(CENTER_ID, not tree.center.done)
        else:
            task = tree.get(m.node_id)
            if task is None:
                return False
            current = task.done if task.done is not None else tree.effective_done(m.node_id)
            tree.set_done(m.node_id, not current)
        self.menu = None
        return True

    def take_focus_request(self) -> str | None:
        node_id, self.focus_request = self.focus_request, None
        return node_id
