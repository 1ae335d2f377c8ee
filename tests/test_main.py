"""Tests for main entry: argument handling, exports and map store round trips."""
from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import httpx
import pytest

import main as main_module
from main import _parse_attach, main
from skillmap.export import load_portable_html
from skillmap.store import MapStoreClient, empty_payload
from skillmap.tree import CENTER_ID, SkillMap, save_map_file

_ROOT = Path(__file__).resolve().parent.parent


def _run_main(args: list[str], output_dir: Path | None = None) -> subprocess.CompletedProcess:
    """Run main.py with optional SKILLMAP_OUTPUT_DIR; return CompletedProcess."""
    env = {**os.environ}
    if output_dir is not None:
        env["SKILLMAP_OUTPUT_DIR"] = str(output_dir)
    return subprocess.run(
        [sys.executable, "main.py"] + args,
        cwd=_ROOT,
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.fixture
def map_file(sample_doc: SkillMap, tmp_path: Path) -> Path:
    return save_map_file(sample_doc, tmp_path / "learn.json")


@pytest.fixture
def pdf_file(tmp_path: Path, pdf_bytes: bytes) -> Path:
    p = tmp_path / "notes.pdf"
    p.write_bytes(pdf_bytes)
    return p


def test_main_help_exits_zero() -> None:
    """python main.py --help exits with 0 and lists the export options."""
    result = _run_main(["--help"])
    assert result.returncode == 0
    for flag in ("--load", "--save", "--attach", "--image", "--pdf", "--xmind", "--no-html"):
        assert flag in result.stdout


def test_main_without_input_exits_one(tmp_path: Path) -> None:
    result = _run_main([], output_dir=tmp_path)
    assert result.returncode == 1
    assert "No input" in result.stderr


def test_main_subprocess_export(map_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = _run_main([str(map_file)], output_dir=out)
    assert result.returncode == 0, result.stderr
    assert (out / "learn-python" / "learn-python.taskmap.html").is_file()


@pytest.mark.parametrize("spec,expected", [
    ("A1=notes.pdf", ("A1", Path("notes.pdf"))),
    (" __CENTER__ = /tmp/x.pdf ", (CENTER_ID, Path("/tmp/x.pdf"))),
])
def test_parse_attach(spec: str, expected: tuple[str, Path]) -> None:
    assert _parse_attach(spec) == expected


@pytest.mark.parametrize("spec", ["notes.pdf", "=x.pdf", "A1="])
def test_parse_attach_invalid(spec: str) -> None:
    with pytest.raises(ValueError, match="NODE_ID=PDF_PATH"):
        _parse_attach(spec)


def test_export_with_attachment(map_file: Path, pdf_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    code = main([str(map_file), "--out", str(out), "--attach", f"A1={pdf_file}", "--attach", f"{CENTER_ID}={pdf_file}"])
    assert code == 0
    html_path = out / "learn-python" / "learn-python.taskmap.html"
    doc = load_portable_html(html_path)
    assert [a.name for a in doc.tree.attachments_of("A1")] == ["notes.pdf"]
    assert [a.name for a in doc.tree.attachments_of(CENTER_ID)] == ["notes.pdf"]


def test_output_dir_from_env(map_file: Path, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("SKILLMAP_OUTPUT_DIR", str(tmp_path / "env-out"))
    assert main([str(map_file)]) == 0
    assert (tmp_path / "env-out" / "learn-python" / "learn-python.taskmap.html").is_file()


def test_optional_exports(map_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    assert main([str(map_file), "--out", str(out), "--no-html", "--image", "--pdf", "--xmind"]) == 0
    names = sorted(p.name for p in (out / "learn-python").iterdir())
    assert names == ["learn-python.jpg", "learn-python.pdf", "learn-python.xmind"]


@pytest.mark.parametrize("attach", ["A1=missing.pdf", "ZZ={pdf}", "bogus"])
def test_bad_attach_exits_one(map_file: Path, pdf_file: Path, tmp_path: Path, attach: str) -> None:
    code = main([str(map_file), "--out", str(tmp_path / "out"), "--attach", attach.format(pdf=pdf_file)])
    assert code == 1
    assert not (tmp_path / "out").exists()


def test_missing_or_invalid_map_file(tmp_path: Path) -> None:
    assert main([str(tmp_path / "nope.json"), "--out", str(tmp_path)]) == 1
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert main([str(broken), "--out", str(tmp_path)]) == 1


class _Store:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.maps: dict[str, dict] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            return httpx.Response(500, json={"error": "Failed to load"})
        name = request.url.path.rsplit("/", 1)[-1]
        if request.method == "PUT":
            self.maps[name] = json.loads(request.content)
            return httpx.Response(200, json={"saved": True, "name": name})
        return httpx.Response(200, json=self.maps.get(name, empty_payload()))


@pytest.fixture
def store(monkeypatch) -> _Store:
    s = _Store()
    monkeypatch.setattr(
        main_module,
        "MapStoreClient",
        lambda: MapStoreClient("http://store.test/api", transport=httpx.MockTransport(s)),
    )
    return s


def test_save_then_load_via_store(store: _Store, map_file: Path, tmp_path: Path) -> None:
    assert main([str(map_file), "--out", str(tmp_path / "a"), "--save", "learn"]) == 0
    assert [n["id"] for n in store.maps["learn"]["nodes"]] == ["A", "B", "A1", "A2"]

    assert main(["--load", "learn", "--out", str(tmp_path / "b")]) == 0
    doc = load_portable_html(tmp_path / "b" / "learn-python" / "learn-python.taskmap.html")
    assert doc.tree.get("A1").parent_id == "A"


def test_store_failure_exits_one(store: _Store, map_file: Path, tmp_path: Path) -> None:
    store.fail = True
    assert main(["--load", "learn", "--out", str(tmp_path)]) == 1
    assert main([str(map_file), "--out", str(tmp_path), "--save", "learn"]) == 1
