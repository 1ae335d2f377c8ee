"""
Autosave: background thread that PUTs a snapshot every interval. Failures are logged and
retried on the next tick; manual saves may interleave (last write wins).
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from ..config import get_autosave_interval
from .client import MapStoreClient, StoreError

logger = logging.getLogger(__name__)


class Autosaver:
    def __init__(
        self,
        client: MapStoreClient,
        name: str,
        snapshot: Callable[[], dict[str, Any]],
        interval: float | None = None,
    ) -> None:
        self.client = client
        self.name = name.strip() or "default"
        self.snapshot = snapshot
        self.interval = interval if interval and interval > 0 else get_autosave_interval()
        self.status = "idle"
        self.message = ""
        self.last_error: StoreError | None = None
        self.saves = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread; no-op if already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"autosave-{self.name}", daemon=True)
        self._thread.start()
        logger.info("Autosave every %.1fs to %s", self.interval, self.name)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.interval + 2.0)
            self._thread = None

    def save_now(self, message: str = "saved") -> bool:
        """One save; True on success. Errors are recorded, never raised."""
        try:
            self.client.save_map(self.name, self.snapshot())
        except StoreError as e:
            self.status = "err"
            self.message = str(e)
            self.last_error = e
            logger.warning("Save of %s failed: %s", self.name, e)
            return False
        self.status = "ok"
        self.message = f"{message}: {self.name}"
        self.last_error = None
        self.saves += 1
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.save_now("autosaved")
