#!/usr/bin/env python3
"""
Root entry: load a skill map (JSON file or map store) -> attach PDFs -> portable HTML export.
Optional JPG/PDF snapshot and XMind export; --save pushes the map back to the store.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from skillmap.config import load_env, get_output_dir
from skillmap.tree import SkillMap, attach_pdf, load_map_file, read_pdf_as_data_url
from skillmap.layout import export_basename
from skillmap.export import build_xmind, render_map_image, write_portable_html
from skillmap.store import MapStoreClient, StoreError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def _parse_attach(spec: str) -> tuple[str, Path]:
    """NODE_ID=PDF_PATH -> (node id, path)."""
    node_id, sep, path = spec.partition("=")
    if not sep or not node_id.strip() or not path.strip():
        raise ValueError(f"Invalid --attach value '{spec}' (expected NODE_ID=PDF_PATH)")
    return node_id.strip(), Path(path.strip())


def _load_input(map_file: str | None, load_name: str | None, client: MapStoreClient | None) -> SkillMap | None:
    if map_file:
        path = Path(map_file)
        if not path.is_file():
            logger.error("Map file not found: %s", path)
            return None
        try:
            return load_map_file(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Could not read map file %s: %s", path, e)
            return None
    if load_name and client is not None:
        try:
            return client.load_document(load_name)
        except StoreError as e:
            logger.error("%s", e)
            return None
    logger.error("No input. Pass a MAP_FILE or --load NAME.")
    return None


def _apply_attachments(doc: SkillMap, specs: list[str]) -> bool:
    for spec in specs:
        try:
            node_id, pdf_path = _parse_attach(spec)
            name, data_url = read_pdf_as_data_url(pdf_path)
        except (ValueError, FileNotFoundError) as e:
            logger.error("%s", e)
            return False
        if not attach_pdf(doc, node_id, name, data_url):
            logger.error("Unknown node '%s' for --attach %s", node_id, pdf_path)
            return False
        logger.info("Attached %s to %s", name, node_id)
    return True


def _export(doc: SkillMap, out_dir: Path, args: argparse.Namespace) -> None:
    """Write the requested outputs; each failure is logged and does not stop the others."""
    slug = export_basename(doc.display_title)
    if not args.no_html:
        try:
            html_path = write_portable_html(doc, out_dir)
            logger.info("  HTML: %s", html_path.name)
        except OSError as e:
            logger.warning("  HTML export failed: %s", e)
    if args.image:
        try:
            render_map_image(doc, out_dir / f"{slug}.jpg")
            logger.info("  Image: %s.jpg", slug)
        except Exception as e:
            logger.warning("  Image export failed: %s", e)
    if args.pdf:
        try:
            render_map_image(doc, out_dir / f"{slug}.pdf")
            logger.info("  PDF: %s.pdf", slug)
        except Exception as e:
            logger.warning("  PDF export failed: %s", e)
    if args.xmind:
        try:
            xmind_path = build_xmind(doc, out_dir / f"{slug}.xmind")
            logger.info("  XMind: %s", xmind_path.name)
        except Exception as e:
            logger.warning("  XMind export failed: %s", e)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export a skill map to a self-contained HTML file (plus optional JPG/PDF/XMind); load/save via the map store."
    )
    parser.add_argument("map_file", metavar="MAP_FILE", nargs="?", default=None, help="Skill map JSON file")
    parser.add_argument("--load", metavar="NAME", default=None, help="Load the map NAME from the map store instead of a file")
    parser.add_argument("--save", metavar="NAME", default=None, help="After exporting, save the map to the store as NAME")
    parser.add_argument("--out", metavar="DIR", default=None, help="Output root (default: SKILLMAP_OUTPUT_DIR or ./output)")
    parser.add_argument(
        "--attach",
        metavar="NODE_ID=PDF_PATH",
        action="append",
        default=[],
        help="Embed a PDF on a task (or __CENTER__); repeatable",
    )
    parser.add_argument("--image", action="store_true", help="Also write a JPG snapshot of the map")
    parser.add_argument("--pdf", action="store_true", help="Also write a PDF snapshot of the map")
    parser.add_argument("--xmind", action="store_true", help="Also export the tree to <name>.xmind (mind map)")
    parser.add_argument("--no-html", action="store_true", help="Skip the portable HTML export")
    args = parser.parse_args(argv)

    load_env()
    t0 = time.perf_counter()
    client = MapStoreClient() if (args.load or args.save) else None
    try:
        doc = _load_input(args.map_file, args.load, client)
        if doc is None:
            return 1
        if not _apply_attachments(doc, args.attach):
            return 1

        output_root = Path(args.out) if args.out else get_output_dir()
        out_dir = output_root / export_basename(doc.display_title)
        out_dir.mkdir(parents=True, exist_ok=True)
        done, total, pct = doc.tree.progress()
        logger.info("Map: %s (%d/%d task(s) done, %d%%) -> %s", doc.display_title, done, total, pct, out_dir)

        _export(doc, out_dir, args)

        if args.save and client is not None:
            try:
                client.save_document(args.save, doc)
            except StoreError as e:
                logger.error("%s", e)
                return 1
    finally:
        if client is not None:
            client.close()

    logger.info("Done in %.2fs. Output: %s", time.perf_counter() - t0, out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
