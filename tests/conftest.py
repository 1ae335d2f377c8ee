"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest

from skillmap.tree import SkillMap

# Smallest valid PDF-ish payload; content is never rendered in tests
PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


@pytest.fixture
def sample_doc() -> SkillMap:
    """Center + roots A (children A1, A2) and B; A1 explicitly not done, Center done."""
    return SkillMap.from_dict({
        "projectTitle": "Learn Python",
        "centerColor": "#020617",
        "centerDone": True,
        "tasks": [
            {"id": "A", "title": "Basics", "parentId": None},
            {"id": "B", "title": "Web", "parentId": None},
            {"id": "A1", "title": "Syntax", "parentId": "A", "done": False},
            {"id": "A2", "title": "Types", "parentId": "A"},
        ],
        "nodeOffset": {"A2": {"x": 12, "y": -8}},
    })


@pytest.fixture
def chain_doc() -> SkillMap:
    """A -> B (B child of A)."""
    return SkillMap.from_dict({
        "projectTitle": "Chain",
        "tasks": [
            {"id": "A", "title": "A", "parentId": None},
            {"id": "B", "title": "B", "parentId": "A"},
        ],
    })


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Avoid loading project .env in tests unless explicitly set."""
    for key in (
        "SKILLMAP_OUTPUT_DIR",
        "SKILLMAP_STORE_URL",
        "SKILLMAP_FEEDBACK_URL",
        "SKILLMAP_AUTOSAVE_SECONDS",
        "SKILLMAP_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
