"""
HTTP client for the map persistence service and the feedback relay.
GET/PUT {base}/maps/{name} carry {nodes, edges, meta}; missing maps come back empty.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..config import get_feedback_url, get_http_timeout, get_store_url
from ..tree.document import SkillMap

logger = logging.getLogger(__name__)

USER_AGENT = "skillmap/0.1"


class StoreError(RuntimeError):
    """Save/load/feedback failed in transport or was refused by the service."""


def empty_payload() -> dict[str, Any]:
    return {"nodes": [], "edges": [], "meta": {}}


def _normalize_payload(raw: Any) -> dict[str, Any]:
    data = raw if isinstance(raw, dict) else {}
    return {
        "nodes": data.get("nodes") if isinstance(data.get("nodes"), list) else [],
        "edges": data.get("edges") if isinstance(data.get("edges"), list) else [],
        "meta": data.get("meta") if isinstance(data.get("meta"), dict) else {},
    }


def to_store_payload(doc: SkillMap) -> dict[str, Any]:
    """Map a document onto the service shape: nodes = tasks, edges = parent links, meta = the rest."""
    body = doc.to_dict()
    tasks = body.pop("tasks")
    edges = [{"from": t["parentId"], "to": t["id"]} for t in tasks if t.get("parentId")]
    return {"nodes": tasks, "edges": edges, "meta": body}


def from_store_payload(payload: Any) -> SkillMap:
    """Inverse of to_store_payload; nodes without parentId take their parent from edges."""
    data = _normalize_payload(payload)
    parent_of: dict[str, str] = {}
    for e in data["edges"]:
        if isinstance(e, dict) and e.get("from") is not None and e.get("to") is not None:
            parent_of.setdefault(str(e["to"]), str(e["from"]))
    tasks = []
    for n in data["nodes"]:
        if not isinstance(n, dict):
            continue
        t = dict(n)
        if "parentId" not in t:
            t["parentId"] = parent_of.get(str(t.get("id")))
        if not t.get("title") and t.get("label"):
            t["title"] = t["label"]
        tasks.append(t)
    return SkillMap.from_dict({**data["meta"], "tasks": tasks})


class MapStoreClient:
    """Synchronous client; use as a context manager or call close()."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        feedback_url: str | None = None,
    ) -> None:
        self.base_url = (base_url or get_store_url()).rstrip("/")
        if feedback_url:
            self.feedback_url = feedback_url
        elif base_url:
            self.feedback_url = self.base_url + "/feedback"
        else:
            self.feedback_url = get_feedback_url()
        self._client = httpx.Client(
            timeout=timeout or get_http_timeout(),
            transport=transport,
            headers={"User-Agent": USER_AGENT},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> MapStoreClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _map_url(self, name: str) -> str:
        return f"{self.base_url}/maps/{quote(name.strip() or 'default', safe='')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = ""
            try:
                body = e.response.json()
                if isinstance(body, dict) and body.get("error"):
                    detail = f": {body['error']}"
            except ValueError:
                pass
            raise StoreError(f"{method} {url} failed: HTTP {e.response.status_code}{detail}") from e
        except httpx.RequestError as e:
            raise StoreError(f"{method} {url} failed: {e}") from e
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"{method} {url} returned invalid JSON") from e

    def health(self) -> dict[str, Any]:
        data = self._request("GET", f"{self.base_url}/health")
        return data if isinstance(data, dict) else {}

    def load_map(self, name: str) -> dict[str, Any]:
        """Stored payload for name; a missing map is the empty shape, not an error."""
        data = _normalize_payload(self._request("GET", self._map_url(name)))
        logger.info("Loaded map %s (%d node(s))", name, len(data["nodes"]))
        return data

    def save_map(self, name: str, payload: dict[str, Any] | None) -> dict[str, Any]:
        data = self._request("PUT", self._map_url(name), json=payload if payload is not None else empty_payload())
        if not isinstance(data, dict) or data.get("saved") is not True:
            raise StoreError(f"Save of {name} not acknowledged: {data!r}")
        logger.info("Saved map %s", name)
        return data

    def load_document(self, name: str) -> SkillMap:
        return from_store_payload(self.load_map(name))

    def save_document(self, name: str, doc: SkillMap) -> dict[str, Any]:
        return self.save_map(name, to_store_payload(doc))

    def send_feedback(self, email: str, message: str, name: str | None = None, hp: str | None = None) -> dict[str, Any]:
        """
        Post feedback to the relay. Blank email or message raises ValueError before any request;
        a relay answer with ok=false raises StoreError.
        """
        email = (email or "").strip()
        message = (message or "").strip()
        if not email or not message:
            raise ValueError("Missing email or message")
        body: dict[str, Any] = {"email": email, "message": message}
        if name:
            body["name"] = name.strip()
        if hp:
            body["hp"] = hp
        data = self._request("POST", self.feedback_url, json=body)
        if not isinstance(data, dict):
            raise StoreError("Feedback relay returned no result")
        if data.get("ok") is False:
            raise StoreError(f"Feedback rejected: {data.get('error') or 'unknown error'}")
        return data
