"""
Pan / zoom for the map canvas: one-pointer pan, two-pointer pinch, wheel zoom.
Screen = pan + world * z. Zoom gestures keep the world point under the cursor or pinch
midpoint fixed by recomputing pan.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_Z = 0.35
MAX_Z = 4.0
WHEEL_FACTOR = 1.12
CLICK_SLOP = 3.0


@dataclass
class _Pan:
    x0: float
    y0: float
    pan_x0: float
    pan_y0: float


@dataclass
class _Pinch:
    dist0: float
    z0: float
    world_x: float
    world_y: float
    mid_x0: float
    mid_y0: float


class ViewportController:
    def __init__(
        self,
        min_z: float = MIN_Z,
        max_z: float = MAX_Z,
        wheel_factor: float = WHEEL_FACTOR,
        click_slop: float = CLICK_SLOP,
    ) -> None:
        self.min_z = min_z
        self.max_z = max_z
        self.wheel_factor = wheel_factor
        self.click_slop = click_slop
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.z = 1.0
        self.active = True
        self.pointers: dict[int, tuple[float, float]] = {}
        self.captured_pointers: set[int] = set()
        self._pan: _Pan | None = None
        self._pinch: _Pinch | None = None
        self._suppress_click = False

    # ---- transforms ----

    def clamp(self, z: float) -> float:
        return max(self.min_z, min(self.max_z, z))

    def screen_to_world(self, x: float, y: float) -> tuple[float, float]:
        return (x - self.pan_x) / self.z, (y - self.pan_y) / self.z

    def world_to_screen(self, wx: float, wy: float) -> tuple[float, float]:
        return self.pan_x + wx * self.z, self.pan_y + wy * self.z

    def zoom_at(self, x: float, y: float, z: float) -> None:
        """Set zoom (clamped) keeping the world point under (x, y) in place."""
        wx, wy = self.screen_to_world(x, y)
        self.z = self.clamp(z)
        self.pan_x = x - wx * self.z
        self.pan_y = y - wy * self.z

    def reset(self) -> None:
        self.z = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def fit(self, width: float, height: float, bounds: tuple[float, float, float, float]) -> None:
        """Scale bounds (min_x, min_y, max_x, max_y) into a width x height view and center them."""
        min_x, min_y, max_x, max_y = bounds
        bw = max(max_x - min_x, 1.0)
        bh = max(max_y - min_y, 1.0)
        self.z = self.clamp(min(width / bw, height / bh, 1.0))
        self.pan_x = width / 2 - (min_x + bw / 2) * self.z
        self.pan_y = height / 2 - (min_y + bh / 2) * self.z

    # ---- pointers ----

    def _start_pinch(self) -> None:
        (ax, ay), (bx, by) = list(self.pointers.values())[:2]
        mx, my = (ax + bx) / 2, (ay + by) / 2
        wx, wy = self.screen_to_world(mx, my)
        self._pinch = _Pinch(max(1.0, math.hypot(bx - ax, by - ay)), self.z, wx, wy, mx, my)
        self._pan = None

    def _anchor_pan(self, x: float, y: float) -> None:
        self._pan = _Pan(x, y, self.pan_x, self.pan_y)

    def pointer_down(self, pointer_id: int, x: float, y: float, on_node: bool = False) -> bool:
        """Track a pointer; False when ignored (inactive view or a third pointer)."""
        if not self.active or pointer_id in self.pointers or len(self.pointers) >= 2:
            return False
        self.pointers[pointer_id] = (x, y)
        self.captured_pointers.add(pointer_id)
        if len(self.pointers) == 2:
            self._start_pinch()
            logger.debug("Pinch start z=%.3f", self.z)
        elif not on_node:
            self._anchor_pan(x, y)
        return True

    def pointer_move(self, pointer_id: int, x: float, y: float) -> None:
        if not self.active or pointer_id not in self.pointers:
            return
        self.pointers[pointer_id] = (x, y)
        if self._pinch is not None and len(self.pointers) == 2:
            (ax, ay), (bx, by) = list(self.pointers.values())
            dist = max(1.0, math.hypot(bx - ax, by - ay))
            mx, my = (ax + bx) / 2, (ay + by) / 2
            p = self._pinch
            self.z = self.clamp(p.z0 * dist / p.dist0)
            self.pan_x = mx - p.world_x * self.z
            self.pan_y = my - p.world_y * self.z
            if math.hypot(mx - p.mid_x0, my - p.mid_y0) > self.click_slop or abs(dist - p.dist0) > self.click_slop:
                self._suppress_click = True
        elif self._pan is not None:
            dx = x - self._pan.x0
            dy = y - self._pan.y0
            self.pan_x = self._pan.pan_x0 + dx
            self.pan_y = self._pan.pan_y0 + dy
            if math.hypot(dx, dy) > self.click_slop:
                self._suppress_click = True

    def pointer_up(self, pointer_id: int) -> None:
        if pointer_id not in self.pointers:
            return
        del self.pointers[pointer_id]
        self.captured_pointers.discard(pointer_id)
        self._pinch = None
        if len(self.pointers) == 1:
            # remaining pointer continues as a pan from where it is now
            (x, y), = self.pointers.values()
            self._anchor_pan(x, y)
        else:
            self._pan = None

    def pointer_cancel(self, pointer_id: int) -> None:
        self.pointer_up(pointer_id)

    def wheel(self, x: float, y: float, delta_y: float) -> None:
        if not self.active:
            return
        factor = self.wheel_factor if delta_y < 0 else 1 / self.wheel_factor
        self.zoom_at(x, y, self.z * factor)
        self._suppress_click = True

    def take_click(self) -> bool:
        """Consume the pending click; False when a pan, pinch or wheel gesture swallowed it."""
        allowed = not self._suppress_click
        self._suppress_click = False
        return allowed

    @property
    def transform(self) -> str:
        return f"translate({self.pan_x}px, {self.pan_y}px) scale({self.z})"
