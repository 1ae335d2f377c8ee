"""Tests for the radial layout engine."""
from __future__ import annotations

import math

import pytest

from skillmap.layout import (
    R_CENTER,
    R_CHILD,
    R_ROOT,
    RING,
    ROOT_RADIUS,
    child_angles,
    child_spread,
    compute_layout,
    ordered_roots,
    segment_between_circles,
)
from skillmap.tree import CENTER_ID, SkillMap, Task, TaskTree


def _tree(*pairs: tuple[str, str | None]) -> TaskTree:
    return TaskTree([Task(id=i, title=i, parent_id=p) for i, p in pairs])


def test_layout_is_deterministic(sample_doc: SkillMap) -> None:
    a = compute_layout(sample_doc.tree, sample_doc.node_offsets)
    b = compute_layout(sample_doc.tree, sample_doc.node_offsets)
    assert a.nodes == b.nodes
    assert a.edges == b.edges


def test_empty_tree_places_only_center() -> None:
    layout = compute_layout(TaskTree())
    assert list(layout.nodes) == [CENTER_ID]
    c = layout.nodes[CENTER_ID]
    assert (c.x, c.y, c.r, c.kind) == (0.0, 0.0, R_CENTER, "center")
    assert layout.edges == []


def test_roots_evenly_spaced_on_orbit() -> None:
    layout = compute_layout(_tree(("A", None), ("B", None), ("C", None), ("D", None)))
    for i, rid in enumerate("ABCD"):
        n = layout.nodes[rid]
        ang = i / 4 * math.pi * 2
        assert n.x == pytest.approx(math.cos(ang) * ROOT_RADIUS)
        assert n.y == pytest.approx(math.sin(ang) * ROOT_RADIUS)
        assert n.r == R_ROOT
        assert n.depth == 1


def test_single_child_sits_straight_outward() -> None:
    layout = compute_layout(_tree(("A", None), ("A1", "A")))
    child = layout.nodes["A1"]
    assert child.x == pytest.approx(ROOT_RADIUS + RING)
    assert child.y == pytest.approx(0.0)
    assert child.r == R_CHILD
    assert child.root_id == "A"
    assert child.depth == 2


@pytest.mark.parametrize("count,spread", [
    (1, 0.0),
    (2, math.pi * 0.6),
    (3, math.pi * 0.6),
    (5, math.pi * 4 / 6),
    (7, math.pi),
    (12, math.pi),
])
def test_child_spread_clamped(count: int, spread: float) -> None:
    assert child_spread(count) == pytest.approx(spread)


def test_child_angles_centered_on_base() -> None:
    angles = child_angles(3, 1.0)
    assert angles[1] == pytest.approx(1.0)
    assert angles[0] == pytest.approx(1.0 - 0.3 * math.pi)
    assert angles[2] == pytest.approx(1.0 + 0.3 * math.pi)
    assert child_angles(1, 0.5) == [0.5]


def test_grandchildren_fan_away_from_grandparent() -> None:
    layout = compute_layout(_tree(("A", None), ("A1", "A"), ("G1", "A1"), ("G2", "A1")))
    a1 = layout.nodes["A1"]
    for gid in ("G1", "G2"):
        g = layout.nodes[gid]
        assert math.hypot(g.x - a1.x, g.y - a1.y) == pytest.approx(RING)
        assert g.x > a1.x
        assert g.depth == 3
    assert layout.nodes["G1"].y == pytest.approx(-layout.nodes["G2"].y)


def test_offsets_shift_node_and_its_children() -> None:
    tree = _tree(("A", None), ("A1", "A"))
    layout = compute_layout(tree, {"A": (10.0, 20.0)})
    a = layout.nodes["A"]
    assert (a.x, a.y) == pytest.approx((ROOT_RADIUS + 10.0, 20.0))
    a1 = layout.nodes["A1"]
    assert math.hypot(a1.x - a.x, a1.y - a.y) == pytest.approx(RING)
    # child direction follows the offset parent (outward from the Center)
    base = math.atan2(a.y, a.x)
    assert math.atan2(a1.y - a.y, a1.x - a.x) == pytest.approx(base)


def test_center_ignores_offsets() -> None:
    layout = compute_layout(_tree(("A", None)), {CENTER_ID: (50.0, 50.0)})
    assert layout.position(CENTER_ID) == (0.0, 0.0)


def test_edges_are_trimmed_at_circle_boundaries() -> None:
    layout = compute_layout(_tree(("A", None), ("A1", "A")))
    root_edge, child_edge = layout.edges
    assert (root_edge.parent_id, root_edge.child_id) == (CENTER_ID, "A")
    assert (root_edge.x1, root_edge.y1) == pytest.approx((R_CENTER, 0.0))
    assert (root_edge.x2, root_edge.y2) == pytest.approx((ROOT_RADIUS - R_ROOT, 0.0))
    assert (child_edge.x1, child_edge.x2) == pytest.approx((ROOT_RADIUS + R_ROOT, ROOT_RADIUS + RING - R_CHILD))


def test_segment_between_coincident_circles() -> None:
    assert segment_between_circles(5, 5, 10, 5, 5, 3) == (5, 5, 5, 5)


def test_root_order_and_edges_listing() -> None:
    tree = _tree(("A", None), ("B", None), ("B1", "B"), ("C", None))
    assert ordered_roots(tree, ["C", "ghost", "A"]) == ["C", "A", "B"]
    layout = compute_layout(tree, root_order=["C"])
    assert layout.nodes["C"].x == pytest.approx(ROOT_RADIUS)
    # all root edges come before child edges
    assert [e.parent_id for e in layout.edges] == [CENTER_ID, CENTER_ID, CENTER_ID, "B"]


def test_bounds_and_node_at() -> None:
    layout = compute_layout(_tree(("A", None)))
    min_x, min_y, max_x, max_y = layout.bounds(padding=10)
    assert min_x == pytest.approx(-R_CENTER - 10)
    assert max_x == pytest.approx(ROOT_RADIUS + R_ROOT + 10)
    assert min_y == pytest.approx(-R_CENTER - 10)
    assert layout.node_at(0, 0) == CENTER_ID
    assert layout.node_at(ROOT_RADIUS + 5, 5) == "A"
    assert layout.node_at(150, 150) is None
