from .controller import (
    DRAG_THRESHOLD,
    LONGPRESS_MS,
    ContextMenu,
    DropResult,
    GesturePhase,
    InteractionController,
    Mode,
    OffsetDrag,
    ReparentGesture,
)

__all__ = [
    "DRAG_THRESHOLD",
    "LONGPRESS_MS",
    "ContextMenu",
    "DropResult",
    "GesturePhase",
    "InteractionController",
    "Mode",
    "OffsetDrag",
    "ReparentGesture",
]
