"""Bubble and edge colors: palette per root, overrides per root/node/edge."""
from __future__ import annotations

from ..tree.document import SkillMap
from ..tree.model import CENTER_ID
from .radial import ordered_roots

BRANCH_COLORS = ["#f97316", "#6366f1", "#22c55e", "#eab308", "#0ea5e9", "#f43f5e"]

# Context-menu palette
COLOR_SWATCHES = [
    "#f97316", "#fb923c", "#f59e0b", "#eab308", "#22c55e",
    "#10b981", "#14b8a6", "#06b6d4", "#0ea5e9", "#3b82f6",
    "#6366f1", "#8b5cf6", "#a855f7", "#ef4444", "#f43f5e",
    "#ec4899", "#94a3b8", "#64748b", "#111827", "#020617",
]

UNKNOWN_NODE_COLOR = "#64748b"


def edge_key(parent_id: str, child_id: str) -> str:
    return f"{parent_id}__{child_id}"


def root_color(doc: SkillMap, root_id: str) -> str:
    override = doc.branch_color_override.get(root_id)
    if override:
        return override
    roots = ordered_roots(doc.tree)
    idx = roots.index(root_id) if root_id in roots else 0
    return BRANCH_COLORS[idx % len(BRANCH_COLORS)]


def node_color(doc: SkillMap, node_id: str) -> str:
    """Nearest explicit color below the root, else the branch color; Center keeps its own."""
    if node_id == CENTER_ID:
        return doc.tree.center.color
    task = doc.tree.get(node_id)
    if task is None:
        return UNKNOWN_NODE_COLOR
    rid = doc.tree.root_of(node_id) or node_id
    if task.parent_id is not None:
        if task.color:
            return task.color
        for aid in doc.tree.ancestors(node_id):
            if aid == rid:
                break
            a = doc.tree.get(aid)
            if a is not None and a.color:
                return a.color
    return root_color(doc, rid)


def edge_color(doc: SkillMap, parent_id: str, child_id: str) -> str:
    rid = doc.tree.root_of(child_id) or child_id
    base = doc.branch_edge_color_override.get(rid) or root_color(doc, rid)
    return doc.edge_color_override.get(edge_key(parent_id, child_id)) or base
