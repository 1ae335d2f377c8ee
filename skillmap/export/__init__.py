from .image import render_map_image
from .portable import (
    build_snapshot,
    export_filename,
    find_non_portable,
    load_portable_html,
    parse_portable_html,
    render_portable_html,
    write_portable_html,
)
from .xmind import build_xmind, load_xmind_parent_child_pairs, load_xmind_topic_titles

__all__ = [
    "render_map_image",
    "build_snapshot",
    "export_filename",
    "find_non_portable",
    "load_portable_html",
    "parse_portable_html",
    "render_portable_html",
    "write_portable_html",
    "build_xmind",
    "load_xmind_parent_child_pairs",
    "load_xmind_topic_titles",
]
