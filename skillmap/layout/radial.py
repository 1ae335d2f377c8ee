"""
Radial layout: Center at the origin, roots on a fixed orbit, children fanned outward from
their parent relative to the grandparent. Pure and deterministic; re-run on every request.
The exported artifact re-implements this with the same constants (see export/runtime.py).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..tree.model import CENTER_ID, TaskTree

R_CENTER = 75
R_ROOT = 60
R_CHILD = 50

ROOT_RADIUS = 280
RING = 130

# Children fan: clamp((k - 1) * SPREAD_PER_CHILD, SPREAD_MIN, SPREAD_MAX); single child sits straight out
SPREAD_PER_CHILD = math.pi / 6
SPREAD_MIN = math.pi * 0.6
SPREAD_MAX = math.pi


@dataclass(frozen=True)
class NodePlacement:
    id: str
    kind: str  # "center" | "root" | "child"
    x: float
    y: float
    r: float
    root_id: str | None = None
    depth: int = 0


@dataclass(frozen=True)
class Edge:
    parent_id: str
    child_id: str
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass
class Layout:
    nodes: dict[str, NodePlacement] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)

    def position(self, node_id: str) -> tuple[float, float] | None:
        n = self.nodes.get(node_id)
        return (n.x, n.y) if n else None

    def bounds(self, padding: float = 0.0) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) over node circles, grown by padding."""
        if not self.nodes:
            return (-padding, -padding, padding, padding)
        min_x = min(n.x - n.r for n in self.nodes.values()) - padding
        min_y = min(n.y - n.r for n in self.nodes.values()) - padding
        max_x = max(n.x + n.r for n in self.nodes.values()) + padding
        max_y = max(n.y + n.r for n in self.nodes.values()) + padding
        return (min_x, min_y, max_x, max_y)

    def node_at(self, x: float, y: float) -> str | None:
        """Topmost node whose circle contains (x, y); later placements are drawn on top."""
        for n in reversed(list(self.nodes.values())):
            if math.hypot(x - n.x, y - n.y) <= n.r:
                return n.id
        return None


def segment_between_circles(
    c1x: float, c1y: float, r1: float,
    c2x: float, c2y: float, r2: float,
    overlap: float = 0.0,
) -> tuple[float, float, float, float]:
    """Chord from circle 1's boundary to circle 2's boundary along the center line."""
    dx = c2x - c1x
    dy = c2y - c1y
    length = math.hypot(dx, dy) or 1.0
    ux = dx / length
    uy = dy / length
    return (
        c1x + ux * (r1 - overlap),
        c1y + uy * (r1 - overlap),
        c2x - ux * (r2 - overlap),
        c2y - uy * (r2 - overlap),
    )


def child_spread(count: int) -> float:
    if count <= 1:
        return 0.0
    return min(SPREAD_MAX, max(SPREAD_MIN, (count - 1) * SPREAD_PER_CHILD))


def child_angles(count: int, base: float) -> list[float]:
    """Angles for count children centered on base."""
    spread = child_spread(count)
    step = 0.0 if count <= 1 else spread / (count - 1)
    start = base - spread / 2
    return [start + i * step for i in range(count)]


def ordered_roots(tree: TaskTree, root_order: Iterable[str] | None = None) -> list[str]:
    """Root ids: listed ones first (unknown ids ignored), then the rest in task order."""
    roots = [t.id for t in tree.roots()]
    if not root_order:
        return roots
    known = set(roots)
    head = []
    for rid in root_order:
        if rid in known and rid not in head:
            head.append(rid)
    return head + [rid for rid in roots if rid not in head]


def compute_layout(
    tree: TaskTree,
    offsets: Mapping[str, tuple[float, float]] | None = None,
    root_order: Iterable[str] | None = None,
) -> Layout:
    """Absolute positions and radii for every node plus trimmed edge segments."""
    offsets = offsets or {}

    def off(node_id: str) -> tuple[float, float]:
        return offsets.get(node_id, (0.0, 0.0))

    layout = Layout()
    # Center is pinned to the origin; offsets apply to tasks only
    cox, coy = 0.0, 0.0
    layout.nodes[CENTER_ID] = NodePlacement(CENTER_ID, "center", cox, coy, R_CENTER, None, 0)

    children_of: dict[str, list[str]] = {}
    for t in tree:
        if t.parent_id is not None:
            children_of.setdefault(t.parent_id, []).append(t.id)

    def place_children(parent_id: str, px: float, py: float, pr: float, gpx: float, gpy: float, root_id: str, depth: int) -> None:
        kids = children_of.get(parent_id, [])
        if not kids:
            return
        base = math.atan2(py - gpy, px - gpx)
        for kid_id, ang in zip(kids, child_angles(len(kids), base)):
            ox, oy = off(kid_id)
            cx = px + math.cos(ang) * RING + ox
            cy = py + math.sin(ang) * RING + oy
            layout.nodes[kid_id] = NodePlacement(kid_id, "child", cx, cy, R_CHILD, root_id, depth)
            layout.edges.append(Edge(parent_id, kid_id, *segment_between_circles(px, py, pr, cx, cy, R_CHILD)))
            place_children(kid_id, cx, cy, R_CHILD, px, py, root_id, depth + 1)

    roots = ordered_roots(tree, root_order)
    total = max(len(roots), 1)
    for i, root_id in enumerate(roots):
        ang = i / total * math.pi * 2
        ox, oy = off(root_id)
        rx = math.cos(ang) * ROOT_RADIUS + ox
        ry = math.sin(ang) * ROOT_RADIUS + oy
        layout.nodes[root_id] = NodePlacement(root_id, "root", rx, ry, R_ROOT, root_id, 1)
        layout.edges.append(Edge(CENTER_ID, root_id, *segment_between_circles(cox, coy, R_CENTER, rx, ry, R_ROOT)))

    # children after all roots so edges list roots first, like the drawn order
    for root_id in roots:
        root = layout.nodes[root_id]
        place_children(root_id, root.x, root.y, R_ROOT, cox, coy, root_id, 2)

    return layout
