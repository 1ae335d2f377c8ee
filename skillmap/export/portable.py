"""
Portable export: one self-contained HTML file with the map snapshot as JSON, the PDF
attachments as separate text blocks and an inline viewer script. No external references.
"""
from __future__ import annotations

import html
import json
import logging
import re
import time
from pathlib import Path
from typing import Any

from ..layout.text import export_basename
from ..tree.attachments import is_portable, scheme_of
from ..tree.document import SkillMap
from ..tree.model import CENTER_ID, DEFAULT_ATTACHMENT_NAME
from .runtime import ATTACHMENT_ID_PREFIX, BODY, DATA_ELEMENT_ID, STYLE, build_script

logger = logging.getLogger(__name__)

APP_NAME = "SkillMap"
SNAPSHOT_VERSION = 1
EXPORT_SUFFIX = ".taskmap.html"

_DATA_RE = re.compile(
    r'<script id="' + re.escape(DATA_ELEMENT_ID) + r'" type="application/json">(.*?)</script>',
    re.DOTALL,
)
_ATTACHMENT_RE = re.compile(
    r'<script id="(' + re.escape(ATTACHMENT_ID_PREFIX) + r'\d+__)" type="text/plain">(.*?)</script>',
    re.DOTALL,
)


def _esc(s: str) -> str:
    return html.escape(str(s))


def _escape_script_text(s: str) -> str:
    return re.sub(r"</script", r"<\\/script", s, flags=re.IGNORECASE)


def _unescape_script_text(s: str) -> str:
    return re.sub(r"<\\/script", "</script", s, flags=re.IGNORECASE)


def build_snapshot(doc: SkillMap, created_at: int | None = None) -> dict[str, Any]:
    """Versioned snapshot of the document; attachments still carry their data URLs."""
    data: dict[str, Any] = {
        "v": SNAPSHOT_VERSION,
        "app": APP_NAME,
        "createdAt": int(time.time() * 1000) if created_at is None else created_at,
    }
    body = doc.to_dict()
    body["projectTitle"] = doc.display_title
    data.update(body)
    return data


def find_non_portable(doc: SkillMap) -> list[tuple[str, str, str]]:
    """(node id, attachment name, scheme) for each attachment that cannot be embedded."""
    out: list[tuple[str, str, str]] = []
    node_ids = [CENTER_ID] + [t.id for t in doc.tree]
    for node_id in node_ids:
        for att in doc.tree.attachments_of(node_id):
            if not is_portable(att.data_url):
                out.append((node_id, att.name, scheme_of(att.data_url) or "unknown"))
    return out


def _hoist_attachments(snapshot: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Move data URLs into text blocks referenced by id; flag the rest as unavailable."""
    blocks: list[str] = []

    def hoist(att: dict[str, Any]) -> dict[str, Any]:
        name = str(att.get("name") or DEFAULT_ATTACHMENT_NAME)
        url = str(att.get("dataUrl") or "")
        if not is_portable(url):
            scheme = scheme_of(url) or "unknown"
            logger.warning("Attachment %s is not portable (%s:), exported without data", name, scheme)
            return {"name": name, "unavailable": scheme}
        ref = f"{ATTACHMENT_ID_PREFIX}{len(blocks) + 1}__"
        blocks.append(f'<script id="{ref}" type="text/plain">{_escape_script_text(url)}</script>')
        return {"name": name, "ref": ref}

    out = dict(snapshot)
    out["centerAttachments"] = [hoist(a) for a in snapshot.get("centerAttachments") or []]
    out["tasks"] = [
        {**t, "attachments": [hoist(a) for a in t.get("attachments") or []]}
        for t in snapshot.get("tasks") or []
    ]
    return out, blocks


def render_portable_html(doc: SkillMap, created_at: int | None = None) -> str:
    snapshot, blocks = _hoist_attachments(build_snapshot(doc, created_at))
    data_json = json.dumps(snapshot, ensure_ascii=False, separators=(",", ":")).replace("<", "\\u003c")
    title = _esc(f"{snapshot['projectTitle']} – {APP_NAME}")
    attachment_blocks = "\n".join(blocks)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1, viewport-fit=cover, maximum-scale=1, user-scalable=no"/>
<title>{title}</title>
<style>{STYLE}</style>
</head>
<body>
{BODY}
<script id="{DATA_ELEMENT_ID}" type="application/json">{data_json}</script>
{attachment_blocks}
<script>{build_script()}</script>
</body>
</html>
"""


def export_filename(doc: SkillMap) -> str:
    return export_basename(doc.display_title) + EXPORT_SUFFIX


def write_portable_html(doc: SkillMap, out_path: Path | str, created_at: int | None = None) -> Path:
    """
    Write the portable export. out_path may be a directory (file name derived from the
    project title, <slug>.taskmap.html) or a .html file path.
    """
    out_path = Path(out_path)
    if out_path.suffix.lower() != ".html":
        out_path = out_path / export_filename(doc)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_portable_html(doc, created_at), encoding="utf-8")
    return out_path


def parse_portable_html(text: str) -> dict[str, Any]:
    """
    Read the snapshot back out of an exported file, resolving attachment refs to data URLs.
    Raises ValueError when the data block is missing or unreadable, or a ref has no block.
    """
    m = _DATA_RE.search(text)
    if not m:
        raise ValueError(f"No {DATA_ELEMENT_ID} block found")
    try:
        data = json.loads(m.group(1))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid snapshot JSON: {e}") from e
    blocks = {ref: _unescape_script_text(body).strip() for ref, body in _ATTACHMENT_RE.findall(text)}

    def resolve(att: dict[str, Any]) -> dict[str, Any]:
        ref = att.get("ref")
        if not ref:
            return dict(att)
        if ref not in blocks:
            raise ValueError(f"Attachment block {ref} missing")
        return {"name": att.get("name") or DEFAULT_ATTACHMENT_NAME, "dataUrl": blocks[ref]}

    data["centerAttachments"] = [resolve(a) for a in data.get("centerAttachments") or []]
    data["tasks"] = [
        {**t, "attachments": [resolve(a) for a in t.get("attachments") or []]}
        for t in data.get("tasks") or []
    ]
    return data


def load_portable_html(path: Path | str) -> SkillMap:
    """Re-import an exported file; non-portable attachments are dropped."""
    return SkillMap.from_dict(parse_portable_html(Path(path).read_text(encoding="utf-8")))
