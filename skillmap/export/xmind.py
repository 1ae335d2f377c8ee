"""
Export a skill map to an XMind mind map: the Center is the root topic, the task forest hangs
beneath it in task order. Done tasks get a check marker in their title.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from ..tree.document import SkillMap
from ..tree.model import CENTER_ID

DONE_PREFIX = "✓ "


def _topic_title(doc: SkillMap, node_id: str) -> str:
    if node_id == CENTER_ID:
        title = doc.display_title
    else:
        task = doc.tree.get(node_id)
        title = (task.title if task else "").strip() or "Task"
    # hard newlines are not kept in topic titles
    title = " ".join(title.split())
    if node_id != CENTER_ID and doc.tree.effective_done(node_id):
        return DONE_PREFIX + title
    return title


def build_xmind(doc: SkillMap, out_path: Path | str, *, sheet_title: str | None = None) -> Path:
    """
    Build an XMind workbook with one sheet: root topic = project title, subtopics = roots,
    then children recursively. Saves to out_path (e.g. <slug>.xmind).
    """
    try:
        from py_xmind16 import Workbook
    except ImportError as e:
        raise ImportError("py-xmind16 is required for --xmind. Install with: pip install py-xmind16") from e

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    workbook = Workbook()
    sheet = workbook.create_sheet(sheet_title or doc.display_title)
    root = sheet.get_root_topic()
    root.title = _topic_title(doc, CENTER_ID)

    def add_children(parent_topic: Any, node_id: str) -> None:
        for kid in doc.tree.children(node_id):
            sub = parent_topic.add_subtopic(_topic_title(doc, kid.id))
            add_children(sub, kid.id)

    add_children(root, CENTER_ID)
    workbook.save(str(out_path))
    return out_path


def _iter_topic_edges(xmind_path: Path | str) -> Iterator[tuple[str | None, str]]:
    """Depth-first (parent title, title) over every sheet; root topics have parent None."""
    from py_xmind16 import Workbook

    workbook = Workbook.load(str(xmind_path))
    stack: list[tuple[str | None, Any]] = []
    for i in reversed(range(workbook.sheet_count)):
        sheet = workbook.get_sheet(i)
        if sheet.root_topic:
            stack.append((None, sheet.root_topic))
    while stack:
        parent_title, topic = stack.pop()
        title = str(getattr(topic, "title", None) or "").strip()
        if not title:
            continue
        yield parent_title, title
        subtopics = getattr(topic, "subtopics", None) or []
        stack.extend((title, sub) for sub in reversed(list(subtopics)))


def load_xmind_topic_titles(xmind_path: Path | str) -> list[str]:
    """All topic titles of an .xmind file in traversal order."""
    return [title for _, title in _iter_topic_edges(xmind_path)]


def load_xmind_parent_child_pairs(xmind_path: Path | str) -> list[tuple[str, str]]:
    """(parent_title, child_title) for every edge in the workbook."""
    return [(parent, title) for parent, title in _iter_topic_edges(xmind_path) if parent is not None]
