"""Tests for the map store / feedback HTTP client (httpx.MockTransport, no network)."""
from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from skillmap.store import MapStoreClient, StoreError, empty_payload, from_store_payload, to_store_payload
from skillmap.tree import SkillMap

BASE = "http://store.test/api"


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> MapStoreClient:
    return MapStoreClient(BASE, transport=httpx.MockTransport(handler), **kwargs)


class FakeStore:
    """In-memory stand-in for the persistence service."""

    def __init__(self) -> None:
        self.maps: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/health":
            return httpx.Response(200, json={"ok": True})
        if path.startswith("/api/maps/"):
            name = path[len("/api/maps/"):]
            if request.method == "GET":
                return httpx.Response(200, json=self.maps.get(name, empty_payload()))
            if request.method == "PUT":
                self.maps[name] = json.loads(request.content)
                return httpx.Response(200, json={"saved": True, "name": name})
        return httpx.Response(404, json={"error": "not found"})


def test_missing_map_loads_empty_shape() -> None:
    store = FakeStore()
    with _client(store) as client:
        assert client.load_map("nothing") == {"nodes": [], "edges": [], "meta": {}}
        doc = client.load_document("nothing")
    assert len(doc.tree) == 0
    assert store.requests[0].headers["User-Agent"].startswith("skillmap/")


def test_empty_body_is_empty_shape() -> None:
    with _client(lambda r: httpx.Response(200)) as client:
        assert client.load_map("x") == empty_payload()


def test_save_then_load_document(chain_doc: SkillMap) -> None:
    store = FakeStore()
    with _client(store) as client:
        ack = client.save_document("chain", chain_doc)
        assert ack == {"saved": True, "name": "chain"}
        assert store.maps["chain"]["edges"] == [{"from": "A", "to": "B"}]
        back = client.load_document("chain")
    assert back.to_dict() == chain_doc.to_dict()


def test_map_name_is_quoted() -> None:
    store = FakeStore()
    with _client(store) as client:
        client.load_map("my map")
        client.load_map("   ")
    assert str(store.requests[0].url) == BASE + "/maps/my%20map"
    assert str(store.requests[1].url) == BASE + "/maps/default"


def test_save_none_sends_empty_payload() -> None:
    store = FakeStore()
    with _client(store) as client:
        client.save_map("blank", None)
    assert store.maps["blank"] == empty_payload()


def test_unacknowledged_save_raises() -> None:
    with _client(lambda r: httpx.Response(200, json={"saved": False})) as client:
        with pytest.raises(StoreError, match="not acknowledged"):
            client.save_map("x", empty_payload())


def test_http_error_carries_service_message() -> None:
    handler = lambda r: httpx.Response(400, json={"error": "Invalid payload"})  # noqa: E731
    with _client(handler) as client:
        with pytest.raises(StoreError, match="HTTP 400: Invalid payload"):
            client.save_map("x", {"nodes": "bad"})


def test_network_error_raises_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(StoreError, match="connection refused"):
            client.load_map("x")


def test_invalid_json_raises() -> None:
    with _client(lambda r: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(StoreError, match="invalid JSON"):
            client.health()


def test_health() -> None:
    with _client(FakeStore()) as client:
        assert client.health() == {"ok": True}


def test_store_url_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SKILLMAP_STORE_URL", "http://env.test/api/")
    client = MapStoreClient()
    try:
        assert client.base_url == "http://env.test/api"
        assert client.feedback_url == "http://env.test/api/feedback"
    finally:
        client.close()


class TestFeedback:
    def _recording(self, reply: dict[str, Any]) -> tuple[list[dict[str, Any]], MapStoreClient]:
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert str(request.url) == BASE + "/feedback"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=reply)

        return bodies, _client(handler)

    @pytest.mark.parametrize("email,message", [("", "hi"), ("a@b.c", "   "), (None, None)])
    def test_blank_fields_rejected_before_request(self, email: Any, message: Any) -> None:
        bodies, client = self._recording({"ok": True})
        with client:
            with pytest.raises(ValueError, match="Missing email or message"):
                client.send_feedback(email, message)
        assert bodies == []

    def test_sends_trimmed_fields(self) -> None:
        bodies, client = self._recording({"ok": True})
        with client:
            assert client.send_feedback(" a@b.c ", " Nice tool ", name=" Sam ") == {"ok": True}
        assert bodies == [{"email": "a@b.c", "message": "Nice tool", "name": "Sam"}]

    def test_honeypot_is_forwarded(self) -> None:
        bodies, client = self._recording({"ok": True})
        with client:
            client.send_feedback("a@b.c", "msg", hp="filled-by-bot")
        assert bodies[0]["hp"] == "filled-by-bot"

    def test_relay_refusal_raises(self) -> None:
        _, client = self._recording({"ok": False, "error": "Email send failed"})
        with client:
            with pytest.raises(StoreError, match="Email send failed"):
                client.send_feedback("a@b.c", "msg")

    def test_explicit_feedback_url(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"ok": True})

        with _client(handler, feedback_url="http://relay.test/send") as client:
            client.send_feedback("a@b.c", "msg")
        assert seen == ["http://relay.test/send"]


def test_store_payload_mapping(sample_doc: SkillMap) -> None:
    payload = to_store_payload(sample_doc)
    assert [n["id"] for n in payload["nodes"]] == ["A", "B", "A1", "A2"]
    assert payload["edges"] == [{"from": "A", "to": "A1"}, {"from": "A", "to": "A2"}]
    assert payload["meta"]["projectTitle"] == "Learn Python"
    assert "tasks" not in payload["meta"]
    assert from_store_payload(payload).to_dict() == sample_doc.to_dict()


def test_from_store_payload_uses_edges_and_labels() -> None:
    doc = from_store_payload({
        "nodes": [{"id": "r", "label": "Root"}, {"id": "c", "title": "Child"}],
        "edges": [{"from": "r", "to": "c"}, {"from": "x"}],
        "meta": {"projectTitle": "Imported"},
    })
    assert doc.title == "Imported"
    assert doc.tree.get("r").title == "Root"
    assert doc.tree.get("c").parent_id == "r"
    assert from_store_payload("garbage").to_dict() == SkillMap().to_dict()
