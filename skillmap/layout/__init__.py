"""Layout: radial node positions, edge segments, colors and title wrapping."""
from .radial import (
    R_CENTER,
    R_ROOT,
    R_CHILD,
    ROOT_RADIUS,
    RING,
    Edge,
    Layout,
    NodePlacement,
    child_angles,
    child_spread,
    compute_layout,
    ordered_roots,
    segment_between_circles,
)
from .style import BRANCH_COLORS, COLOR_SWATCHES, edge_color, edge_key, node_color, root_color
from .text import export_basename, slugify_title, split_title_lines

__all__ = [
    "R_CENTER",
    "R_ROOT",
    "R_CHILD",
    "ROOT_RADIUS",
    "RING",
    "Edge",
    "Layout",
    "NodePlacement",
    "child_angles",
    "child_spread",
    "compute_layout",
    "ordered_roots",
    "segment_between_circles",
    "BRANCH_COLORS",
    "COLOR_SWATCHES",
    "edge_color",
    "edge_key",
    "node_color",
    "root_color",
    "export_basename",
    "slugify_title",
    "split_title_lines",
]
