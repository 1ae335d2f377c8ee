"""
SkillMap document: project title, task tree, node offsets and color overrides.
Reads/writes the portable camelCase JSON shape shared with the export artifact.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .model import DEFAULT_CENTER_COLOR, Attachment, CenterNode, TaskTree, _attachments_from

Offset = tuple[float, float]


def _num(v: Any) -> float:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return 0.0
    return f if f == f else 0.0  # NaN -> 0


def _offsets_from(raw: Any) -> dict[str, Offset]:
    if not isinstance(raw, dict):
        return {}
    out: dict[str, Offset] = {}
    for k, v in raw.items():
        if isinstance(v, dict):
            out[str(k)] = (_num(v.get("x")), _num(v.get("y")))
        elif isinstance(v, (list, tuple)) and len(v) == 2:
            out[str(k)] = (_num(v[0]), _num(v[1]))
    return out


def _str_map(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): v for k, v in raw.items() if isinstance(v, str) and v}


@dataclass
class SkillMap:
    title: str = ""
    tree: TaskTree = field(default_factory=TaskTree)
    node_offsets: dict[str, Offset] = field(default_factory=dict)
    branch_color_override: dict[str, str] = field(default_factory=dict)
    branch_edge_color_override: dict[str, str] = field(default_factory=dict)
    edge_color_override: dict[str, str] = field(default_factory=dict)

    @property
    def display_title(self) -> str:
        return self.title.strip() or "Project"

    def offset(self, node_id: str) -> Offset:
        return self.node_offsets.get(node_id, (0.0, 0.0))

    def set_offset(self, node_id: str, x: float, y: float) -> None:
        self.node_offsets[node_id] = (float(x), float(y))

    def to_dict(self) -> dict[str, Any]:
        c = self.tree.center
        return {
            "projectTitle": self.title,
            "centerColor": c.color,
            "centerDone": bool(c.done),
            "centerAttachments": [a.to_dict() for a in c.attachments],
            "tasks": self.tree.to_dicts(),
            "nodeOffset": {k: {"x": x, "y": y} for k, (x, y) in self.node_offsets.items()},
            "branchColorOverride": dict(self.branch_color_override),
            "branchEdgeColorOverride": dict(self.branch_edge_color_override),
            "edgeColorOverride": dict(self.edge_color_override),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> SkillMap:
        data = raw if isinstance(raw, dict) else {}
        center = CenterNode(
            color=data.get("centerColor") if isinstance(data.get("centerColor"), str) and data.get("centerColor") else DEFAULT_CENTER_COLOR,
            done=bool(data.get("centerDone")),
            attachments=_attachments_from(data.get("centerAttachments")),
        )
        return cls(
            title=str(data.get("projectTitle") or ""),
            tree=TaskTree.from_dicts(data.get("tasks"), center),
            node_offsets=_offsets_from(data.get("nodeOffset")),
            branch_color_override=_str_map(data.get("branchColorOverride")),
            branch_edge_color_override=_str_map(data.get("branchEdgeColorOverride")),
            edge_color_override=_str_map(data.get("edgeColorOverride")),
        )


def load_map_file(path: Path | str) -> SkillMap:
    """Load a map JSON file (portable shape)."""
    p = Path(path)
    return SkillMap.from_dict(json.loads(p.read_text(encoding="utf-8")))


def save_map_file(doc: SkillMap, path: Path | str) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(doc.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return p


def attach_pdf(doc: SkillMap, node_id: str, name: str, data_url: str) -> bool:
    """Attach a PDF to a task or the Center (CENTER_ID)."""
    if node_id not in doc.tree:
        return False
    return doc.tree.add_attachment(node_id, Attachment(name=name, data_url=data_url))
