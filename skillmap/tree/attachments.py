"""
PDF attachments as self-contained data URLs; detect non-portable references (blob:, http:, ...).
"""
from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path

PDF_DATA_URL_PREFIX = "data:application/pdf;base64,"

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")


def scheme_of(url: str) -> str:
    """URL scheme in lower case ("data", "blob", "https", ...); "" if none."""
    m = _SCHEME_RE.match(str(url or "").strip())
    return m.group(1).lower() if m else ""


def is_portable(url: str) -> bool:
    """Only base64 PDF data URLs survive export; everything else is a transient reference."""
    return str(url or "").startswith(PDF_DATA_URL_PREFIX)


def decode_data_url(url: str) -> bytes:
    """
    Decode a base64 data URL to bytes.
    Raises ValueError if the URL is not a data URL, has no payload or is not valid base64.
    """
    s = str(url or "")
    if not s.startswith("data:"):
        raise ValueError(f"Not a data URL (scheme: {scheme_of(s) or 'none'})")
    comma = s.find(",")
    if comma < 0:
        raise ValueError("Data URL has no payload")
    meta, payload = s[:comma], s[comma + 1:]
    if ";base64" not in meta.lower():
        raise ValueError("Data URL is not base64 encoded")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Could not decode attachment data: {e}") from e


def encode_pdf(data: bytes) -> str:
    return PDF_DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")


def read_pdf_as_data_url(path: Path | str) -> tuple[str, str]:
    """Read a PDF file; return (file name, portable data URL)."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Attachment not found: {p}")
    return p.name, encode_pdf(p.read_bytes())
