# memory_match/client.py
from __future__ import annotations

import os
from typing import Optional

import requests

DEFAULT_URL = os.environ.get("MEMORY_MATCH_URL", "http://127.0.0.1:5000")


class GameClient:
    """Thin wrapper around the table's JSON API. Non-2xx answers raise requests.HTTPError."""

    def __init__(self, base_url: str = DEFAULT_URL, session=None, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str) -> dict:
        r = self.session.get(f"{self.base_url}{path}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _post(self, path: str, payload: Optional[dict] = None) -> dict:
        r = self.session.post(f"{self.base_url}{path}", json=payload or {}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def health(self) -> bool:
        return self._get("/health").get("status") == "ok"

    def state(self) -> dict:
        return self._get("/state")["state"]

    def flip(self, row: int, col: int, round: Optional[int] = None) -> dict:
        payload = {"row": row, "col": col}
        if round is not None:
            payload["round"] = round
        return self._post("/flip", payload)

    def reset(self) -> dict:
        return self._post("/reset")["state"]
