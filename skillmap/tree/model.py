"""
Task forest addressed by id: parent pointers are plain id lookups; acyclicity is enforced by
an ancestor walk before every parent mutation. The Center is a sentinel id, not a task.
"""
from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

CENTER_ID = "__CENTER__"
DEFAULT_CENTER_COLOR = "#020617"
DEFAULT_ATTACHMENT_NAME = "attachment.pdf"


@dataclass
class Attachment:
    """A named PDF carried as a data URL."""
    name: str
    data_url: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "dataUrl": self.data_url}

    @classmethod
    def from_dict(cls, raw: Any) -> Attachment | None:
        """Accept dataUrl, url or href; None when there is no URL at all."""
        if not isinstance(raw, dict):
            return None
        url = ""
        for key in ("dataUrl", "url", "href"):
            if isinstance(raw.get(key), str):
                url = raw[key]
                break
        if not url:
            return None
        return cls(name=str(raw.get("name") or DEFAULT_ATTACHMENT_NAME), data_url=url)


def _attachments_from(raw: Any) -> list[Attachment]:
    if not isinstance(raw, list):
        return []
    return [a for a in (Attachment.from_dict(r) for r in raw) if a is not None]


@dataclass
class Task:
    """Single task; parent_id None means root."""
    id: str
    title: str
    parent_id: str | None = None
    color: str | None = None
    done: bool | None = None  # tri-state: None = inherit
    attachments: list[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "title": self.title, "parentId": self.parent_id}
        if self.color:
            out["color"] = self.color
        if self.done is not None:
            out["done"] = self.done
        out["attachments"] = [a.to_dict() for a in self.attachments]
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task | None:
        tid = raw.get("id")
        if not isinstance(tid, (str, int)) or str(tid) == "" or str(tid) == CENTER_ID:
            return None
        parent = raw.get("parentId")
        color = raw.get("color")
        done = raw.get("done")
        return cls(
            id=str(tid),
            title=str(raw.get("title") or ""),
            parent_id=str(parent) if isinstance(parent, (str, int)) and str(parent) else None,
            color=color if isinstance(color, str) and color else None,
            done=done if isinstance(done, bool) else None,
            attachments=_attachments_from(raw.get("attachments")),
        )


@dataclass
class CenterNode:
    """Attribute bag of the implicit Center node."""
    color: str = DEFAULT_CENTER_COLOR
    done: bool = False
    attachments: list[Attachment] = field(default_factory=list)


class TaskTree:
    """Arena of tasks in list order plus the Center."""

    def __init__(self, tasks: Iterable[Task] = (), center: CenterNode | None = None) -> None:
        self._tasks: dict[str, Task] = {}
        for t in tasks:
            self._tasks.setdefault(t.id, t)
        self.center = center or CenterNode()

    # ---- import / export ----

    @classmethod
    def from_dicts(cls, raw_tasks: Any, center: CenterNode | None = None) -> TaskTree:
        """
        Shape-normalise a task list: drop entries without id, keep the first of duplicate ids,
        turn dangling parent references into roots and break any cycle found in the input.
        """
        items = raw_tasks if isinstance(raw_tasks, list) else []
        tasks = [t for t in (Task.from_dict(r) for r in items if isinstance(r, dict)) if t is not None]
        tree = cls(tasks, center)
        for t in tree._tasks.values():
            if t.parent_id is not None and t.parent_id not in tree._tasks:
                t.parent_id = None
        for t in tree._tasks.values():
            seen = {t.id}
            cur = t.parent_id
            while cur is not None:
                if cur in seen:
                    logger.debug("Breaking parent cycle at %s", t.id)
                    t.parent_id = None
                    break
                seen.add(cur)
                cur = tree._tasks[cur].parent_id
        return tree

    def to_dicts(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._tasks.values()]

    # ---- queries ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __contains__(self, node_id: object) -> bool:
        return node_id == CENTER_ID or node_id in self._tasks

    def get(self, node_id: str) -> Task | None:
        return self._tasks.get(node_id)

    def roots(self) -> list[Task]:
        return [t for t in self._tasks.values() if t.parent_id is None]

    def children(self, node_id: str) -> list[Task]:
        if node_id == CENTER_ID:
            return self.roots()
        return [t for t in self._tasks.values() if t.parent_id == node_id]

    def parent_of(self, node_id: str) -> str | None:
        """Parent id; roots report CENTER_ID, the Center and unknown ids report None."""
        t = self._tasks.get(node_id)
        if t is None:
            return None
        return t.parent_id if t.parent_id is not None else CENTER_ID

    def ancestors(self, node_id: str) -> list[str]:
        """Task ids from the parent up to the root (Center excluded)."""
        out: list[str] = []
        t = self._tasks.get(node_id)
        while t is not None and t.parent_id is not None and t.parent_id not in out:
            out.append(t.parent_id)
            t = self._tasks.get(t.parent_id)
        return out

    def root_of(self, node_id: str) -> str | None:
        if node_id not in self._tasks:
            return None
        chain = self.ancestors(node_id)
        return chain[-1] if chain else node_id

    def depth(self, node_id: str) -> int:
        """0 for the Center, 1 for roots, 2 for their children, ..."""
        if node_id == CENTER_ID:
            return 0
        if node_id not in self._tasks:
            return -1
        return len(self.ancestors(node_id)) + 1

    def is_descendant(self, ancestor_id: str, descendant_id: str) -> bool:
        """True iff walking descendant_id's parent chain reaches ancestor_id (never for equal ids)."""
        if ancestor_id == descendant_id or descendant_id not in self._tasks:
            return False
        if ancestor_id == CENTER_ID:
            return True
        return ancestor_id in self.ancestors(descendant_id)

    def subtree_ids(self, root_id: str) -> list[str]:
        """Breadth-first: root_id and all transitive children."""
        if root_id not in self._tasks:
            return []
        order = [root_id]
        queue = deque([root_id])
        while queue:
            cur = queue.popleft()
            for kid in self.children(cur):
                if kid.id not in order:
                    order.append(kid.id)
                    queue.append(kid.id)
        return order

    def attachments_of(self, node_id: str) -> list[Attachment]:
        if node_id == CENTER_ID:
            return self.center.attachments
        t = self._tasks.get(node_id)
        return t.attachments if t else []

    def effective_done(self, node_id: str) -> bool:
        """Last explicit done flag walking Center -> ... -> node; Center's flag by default."""
        if node_id == CENTER_ID:
            return bool(self.center.done)
        t = self._tasks.get(node_id)
        if t is None:
            return bool(self.center.done)
        if t.done is not None:
            return t.done
        for aid in self.ancestors(node_id):
            a = self._tasks[aid]
            if a.done is not None:
                return a.done
        return bool(self.center.done)

    def progress(self) -> tuple[int, int, int]:
        """(done count, total, rounded percent) over effective done-ness."""
        total = len(self._tasks)
        if not total:
            return 0, 0, 0
        done = sum(1 for tid in self._tasks if self.effective_done(tid))
        return done, total, int(round(done / total * 100))

    # ---- mutations ----

    def _new_id(self) -> str:
        while True:
            tid = "t-" + uuid.uuid4().hex[:7]
            if tid not in self._tasks:
                return tid

    def add_task(self, title: str | None = None, parent_id: str | None = None) -> Task:
        """Append a task; an unknown parent makes it a root."""
        if parent_id == CENTER_ID or parent_id not in self._tasks:
            parent_id = None
        task = Task(id=self._new_id(), title=title if title is not None else f"Task {len(self._tasks) + 1}", parent_id=parent_id)
        self._tasks[task.id] = task
        return task

    def rename_task(self, node_id: str, title: str) -> bool:
        t = self._tasks.get(node_id)
        if t is None:
            return False
        t.title = title
        return True

    def can_reparent(self, node_id: str, new_parent_id: str | None) -> bool:
        if node_id not in self._tasks:
            return False
        if new_parent_id is None or new_parent_id == CENTER_ID:
            return True
        if new_parent_id == node_id or new_parent_id not in self._tasks:
            return False
        return not self.is_descendant(node_id, new_parent_id)

    def set_parent(self, node_id: str, new_parent_id: str | None) -> bool:
        """Reparent; no-op returning False if it would create a cycle or references unknown ids."""
        if not self.can_reparent(node_id, new_parent_id):
            logger.debug("Rejected reparent %s -> %s", node_id, new_parent_id)
            return False
        self._tasks[node_id].parent_id = None if new_parent_id in (None, CENTER_ID) else new_parent_id
        return True

    def delete_subtree(self, root_id: str) -> set[str]:
        return self.delete_subtrees([root_id])

    def delete_subtrees(self, root_ids: Iterable[str]) -> set[str]:
        """Remove the union of the given subtrees in one mutation; return the removed ids."""
        doomed: set[str] = set()
        for rid in root_ids:
            doomed.update(self.subtree_ids(rid))
        if doomed:
            self._tasks = {tid: t for tid, t in self._tasks.items() if tid not in doomed}
        return doomed

    def set_color(self, node_id: str, color: str | None) -> bool:
        if node_id == CENTER_ID:
            if color:
                self.center.color = color
            return bool(color)
        t = self._tasks.get(node_id)
        if t is None:
            return False
        t.color = color or None
        return True

    def set_done(self, node_id: str, done: bool | None) -> bool:
        if node_id == CENTER_ID:
            self.center.done = bool(done)
            return True
        t = self._tasks.get(node_id)
        if t is None:
            return False
        t.done = done
        return True

    def add_attachment(self, node_id: str, attachment: Attachment) -> bool:
        if node_id == CENTER_ID:
            self.center.attachments.append(attachment)
            return True
        t = self._tasks.get(node_id)
        if t is None:
            return False
        t.attachments.append(attachment)
        return True
