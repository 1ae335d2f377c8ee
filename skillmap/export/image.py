"""
Raster snapshot of the map (JPG / PNG / PDF) drawn with Pillow from the same layout as the
HTML export: edges, filled bubbles, wrapped titles, done badge.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

from ..layout import compute_layout, edge_color, node_color, split_title_lines
from ..layout.text import MAXLEN_CENTER, MAXLEN_ROOT_AND_CHILD
from ..tree.document import SkillMap
from ..tree.model import CENTER_ID
from .runtime import EXPORT_MIN_PADDING_PX, EXPORT_SHADOW_PAD_BOTTOM, EXPORT_SHADOW_PAD_TOP, EXPORT_SHADOW_PAD_X

logger = logging.getLogger(__name__)

_FORMATS = {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG", ".pdf": "PDF"}
_FONT_CANDIDATES = [
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc",
]
DONE_OVERLAY_ALPHA = 0.28
BADGE_COLOR = (34, 197, 94)


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    s = (color or "").lstrip("#")
    if len(s) == 3:
        s = "".join(c * 2 for c in s)
    try:
        return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)
    except ValueError:
        return (100, 116, 139)


def _lighten(rgb: tuple[int, int, int], alpha: float) -> tuple[int, int, int]:
    return tuple(int(round(c + (255 - c) * alpha)) for c in rgb)  # type: ignore[return-value]


def _load_font(size: int) -> Any:
    from PIL import ImageFont

    for try_path in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(try_path, size)
        except OSError:
            continue
    return ImageFont.load_default()


def _image_format(out_path: Path, fmt: str | None) -> str:
    if fmt:
        return fmt.upper().replace("JPG", "JPEG")
    f = _FORMATS.get(out_path.suffix.lower())
    if f is None:
        raise ValueError(f"Unsupported image format: {out_path.suffix or '(none)'}")
    return f


def render_map_image(doc: SkillMap, out_path: Path | str, *, scale: float = 1.0, fmt: str | None = None) -> Path:
    """
    Draw the map on white, cropped to the node bounds plus export padding.
    Format follows the suffix (.jpg/.jpeg quality 95, .png, .pdf) unless fmt is given.
    """
    try:
        from PIL import Image, ImageDraw
    except ImportError as e:
        raise ImportError("Pillow is required for image export. Install with: pip install Pillow") from e

    out_path = Path(out_path)
    image_format = _image_format(out_path, fmt)
    layout = compute_layout(doc.tree, doc.node_offsets)

    min_x, min_y, max_x, max_y = layout.bounds()
    min_x -= EXPORT_SHADOW_PAD_X + EXPORT_MIN_PADDING_PX
    max_x += EXPORT_SHADOW_PAD_X + EXPORT_MIN_PADDING_PX
    min_y -= EXPORT_SHADOW_PAD_TOP + EXPORT_MIN_PADDING_PX
    max_y += EXPORT_SHADOW_PAD_BOTTOM + EXPORT_MIN_PADDING_PX
    width = max(1, math.ceil((max_x - min_x) * scale))
    height = max(1, math.ceil((max_y - min_y) * scale))

    def px(x: float, y: float) -> tuple[float, float]:
        return (x - min_x) * scale, (y - min_y) * scale

    img = Image.new("RGB", (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    font = _load_font(max(8, int(14 * scale)))

    for e in layout.edges:
        draw.line(
            [px(e.x1, e.y1), px(e.x2, e.y2)],
            fill=_hex_to_rgb(edge_color(doc, e.parent_id, e.child_id)),
            width=max(1, int(round(3 * scale))),
        )

    for n in layout.nodes.values():
        cx, cy = px(n.x, n.y)
        r = n.r * scale
        fill = _hex_to_rgb(node_color(doc, n.id))
        done = doc.tree.effective_done(n.id)
        if done:
            fill = _lighten(fill, DONE_OVERLAY_ALPHA)
        draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=fill)

        if n.id == CENTER_ID:
            title, max_len = doc.display_title, MAXLEN_CENTER
        else:
            task = doc.tree.get(n.id)
            title, max_len = (task.title if task else "") or "Task", MAXLEN_ROOT_AND_CHILD
        lines = split_title_lines(title, max_len)
        heights = [draw.textbbox((0, 0), line, font=font)[3] for line in lines]
        line_h = max(heights) if heights else 0
        y = cy - line_h * len(lines) / 2
        for line in lines:
            left, _, right, _ = draw.textbbox((0, 0), line, font=font)
            draw.text((cx - (right - left) / 2, y), line, fill=(255, 255, 255), font=font)
            y += line_h

        if done:
            # badge at the top-right of the bubble
            br = 13 * scale
            bx = cx + r * math.cos(-math.pi / 4)
            by = cy + r * math.sin(-math.pi / 4)
            draw.ellipse([bx - br, by - br, bx + br, by + br], fill=BADGE_COLOR)
            draw.line(
                [(bx - br * 0.45, by), (bx - br * 0.1, by + br * 0.35), (bx + br * 0.45, by - br * 0.35)],
                fill=(255, 255, 255),
                width=max(1, int(round(2 * scale))),
            )

    out_path.parent.mkdir(parents=True, exist_ok=True)
    if image_format == "JPEG":
        img.save(out_path, "JPEG", quality=95)
    elif image_format == "PDF":
        img.save(out_path, "PDF", resolution=72.0 * scale)
    else:
        img.save(out_path, image_format)
    logger.debug("Rendered %dx%d %s", width, height, image_format)
    return out_path
