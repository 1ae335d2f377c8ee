"""Tests for pan / pinch / wheel zoom."""
from __future__ import annotations

import pytest

from skillmap.viewport import MAX_Z, MIN_Z, ViewportController


def test_wheel_zoom_is_clamped() -> None:
    vp = ViewportController()
    for _ in range(100):
        vp.wheel(50, 50, -120)
        assert MIN_Z <= vp.z <= MAX_Z
    assert vp.z == pytest.approx(MAX_Z)
    for _ in range(100):
        vp.wheel(50, 50, 120)
        assert MIN_Z <= vp.z <= MAX_Z
    assert vp.z == pytest.approx(MIN_Z)


def test_wheel_keeps_cursor_point_fixed() -> None:
    vp = ViewportController()
    vp.pan_x, vp.pan_y = 30.0, -15.0
    before = vp.screen_to_world(220, 140)
    vp.wheel(220, 140, -1)
    assert vp.z == pytest.approx(1.12)
    assert vp.screen_to_world(220, 140) == pytest.approx(before)
    assert vp.take_click() is False


def test_pinch_keeps_midpoint_stationary() -> None:
    vp = ViewportController()
    vp.pan_x, vp.pan_y = 10.0, 20.0
    assert vp.pointer_down(1, 100, 100)
    assert vp.pointer_down(2, 200, 100)
    anchor = vp.screen_to_world(150, 100)
    for step in range(1, 8):
        vp.pointer_move(1, 100 - step * 10, 100)
        vp.pointer_move(2, 200 + step * 10, 100)
        sx, sy = vp.world_to_screen(*anchor)
        assert abs(sx - 150) < 1
        assert abs(sy - 100) < 1
    assert vp.z == pytest.approx(2.4)
    assert vp.take_click() is False


def test_pinch_jitter_keeps_click() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 100, 100)
    vp.pointer_down(2, 200, 100)
    vp.pointer_move(1, 101, 101)
    vp.pointer_move(2, 201, 99)
    vp.pointer_up(1)
    vp.pointer_up(2)
    assert vp.take_click() is True


def test_two_finger_pan_suppresses_click() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 100, 100)
    vp.pointer_down(2, 200, 100)
    vp.pointer_move(1, 100, 104)
    vp.pointer_move(2, 200, 104)
    assert vp.z == pytest.approx(1.0)
    assert vp.take_click() is False


def test_pinch_zoom_is_clamped() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 0, 0)
    vp.pointer_down(2, 100, 0)
    vp.pointer_move(2, 2000, 0)
    assert vp.z == MAX_Z
    vp.pointer_move(2, 1, 0)
    assert vp.z == MIN_Z


def test_third_pointer_is_ignored() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 0, 0)
    vp.pointer_down(2, 100, 0)
    assert vp.pointer_down(3, 50, 50) is False
    z = vp.z
    vp.pointer_move(3, 500, 500)
    assert vp.z == z
    assert set(vp.pointers) == {1, 2}
    assert vp.captured_pointers == {1, 2}


def test_releasing_one_pinch_finger_continues_as_pan() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 100, 100)
    vp.pointer_down(2, 200, 100)
    vp.pointer_move(2, 300, 100)
    vp.pointer_up(2)
    pan = (vp.pan_x, vp.pan_y)
    z = vp.z
    vp.pointer_move(1, 110, 105)
    assert (vp.pan_x, vp.pan_y) == pytest.approx((pan[0] + 10, pan[1] + 5))
    assert vp.z == z
    vp.pointer_up(1)
    assert vp.pointers == {}
    assert vp.captured_pointers == set()


def test_background_drag_pans_and_suppresses_click() -> None:
    vp = ViewportController()
    vp.pointer_down(1, 10, 10)
    vp.pointer_move(1, 12, 11)
    vp.pointer_up(1)
    assert vp.take_click() is True

    vp = ViewportController()
    vp.pointer_down(1, 10, 10)
    vp.pointer_move(1, 40, 30)
    vp.pointer_up(1)
    assert (vp.pan_x, vp.pan_y) == (30.0, 20.0)
    assert vp.take_click() is False
    assert vp.take_click() is True


def test_press_on_node_does_not_pan() -> None:
    vp = ViewportController()
    assert vp.pointer_down(1, 10, 10, on_node=True)
    vp.pointer_move(1, 80, 80)
    assert (vp.pan_x, vp.pan_y) == (0.0, 0.0)
    vp.pointer_cancel(1)
    assert vp.pointers == {}


def test_inactive_view_ignores_input() -> None:
    vp = ViewportController()
    vp.active = False
    assert vp.pointer_down(1, 0, 0) is False
    vp.wheel(0, 0, -1)
    assert vp.z == 1.0


def test_fit_and_reset() -> None:
    vp = ViewportController()
    vp.fit(400, 200, (-100, -50, 100, 50))
    assert vp.z == pytest.approx(1.0)
    assert (vp.pan_x, vp.pan_y) == pytest.approx((200, 100))

    vp.fit(400, 400, (-1000, -1000, 1000, 1000))
    assert vp.z == pytest.approx(MIN_Z)
    assert (vp.pan_x, vp.pan_y) == pytest.approx((200, 200))

    vp.reset()
    assert (vp.pan_x, vp.pan_y, vp.z) == (0.0, 0.0, 1.0)
    assert vp.transform == "translate(0.0px, 0.0px) scale(1.0)"
