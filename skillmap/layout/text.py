"""Title wrapping for node bubbles and file-name slugs."""
from __future__ import annotations

import re

MAXLEN_CENTER = 12
MAXLEN_ROOT_AND_CHILD = 12
MAX_TITLE_LINES = 3


def split_title_lines(title: str, max_len: int, max_lines: int = MAX_TITLE_LINES) -> list[str]:
    """
    Word-wrap at spaces within max_len; a word longer than the window is hyphenated
    (max_len - 1 chars + "-"). Hard newlines are respected; at most max_lines lines.
    """
    s = str(title or "").strip()
    if not s:
        return ["Project"]
    lines: list[str] = []
    for part in re.split(r"\r?\n", s):
        while part and len(lines) < max_lines:
            if len(part) <= max_len:
                lines.append(part)
                part = ""
                break
            # a space exactly at max_len still counts as a break point
            break_at = part.rfind(" ", 0, max_len + 1)
            if break_at > 0:
                lines.append(part[:break_at])
                part = part[break_at + 1:]
            else:
                slice_len = max(1, max_len - 1)
                lines.append(part[:slice_len] + "-")
                part = part[slice_len:]
        if len(lines) >= max_lines:
            break
    return lines[:max_lines]


def slugify_title(title: str) -> str:
    s = re.sub(r"[^\w\-]+", "-", str(title or "").strip())
    s = re.sub(r"-+", "-", s)
    s = re.sub(r"^[-_]+|[-_]+$", "", s)
    return s.lower()


def export_basename(title: str) -> str:
    return slugify_title(title) or "taskmap"
