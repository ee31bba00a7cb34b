"""
prepperstore_client.py

A tiny API client for the Prepperstore backend, mirroring what the web
frontend does: shared-password login (signed session cookie) plus the scan,
item and stock endpoints.

Environment variables expected:
- PREPPERSTORE_API_URL: e.g. "http://localhost:3000"
- PREPPERSTORE_PASSWORD: the shared password

Dependencies:
- requests (pip install requests)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PrepperstoreApiClient:
    base_url: str
    password: str
    session: requests.Session = field(default_factory=requests.Session)
    timeout: float = 30

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def login(self) -> None:
        """POST /api/login; the session cookie lands in self.session's jar."""
        resp = self.session.request(
            "POST",
            self._url("/api/login"),
            json={"password": self.password},
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise ApiError(f"Login failed ({resp.status_code}): {resp.text}", resp.status_code)

    def auth_check(self) -> bool:
        resp = self.session.request("GET", self._url("/api/auth-check"), timeout=self.timeout)
        if resp.status_code == 401:
            return False
        if resp.status_code >= 400:
            raise ApiError(f"Auth check failed ({resp.status_code}): {resp.text}", resp.status_code)
        return resp.json().get("authenticated") is True

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        resp = self.session.request(
            method,
            self._url(path),
            json=json,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )

        # Cookie missing or expired: log in once and retry.
        if resp.status_code == 401:
            self.login()
            resp = self.session.request(
                method,
                self._url(path),
                json=json,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )

        if resp.status_code >= 400:
            raise ApiError(f"{method} {path} failed ({resp.status_code}): {resp.text}", resp.status_code)
        return resp.json()

    # ----------------------------
    # Scanning
    # ----------------------------

    def scan(self, barcode: str, mode: str = "STATUS", preferred_location_id: Optional[int] = None) -> Dict[str, Any]:
        """mode is "IN" | "OUT" | "STATUS"; check the reply's status/warning fields."""
        body: Dict[str, Any] = {"barcode": barcode, "mode": mode}
        if preferred_location_id is not None:
            body["preferredLocationId"] = preferred_location_id
        return self._request("POST", "/api/scan", json=body)

    # ----------------------------
    # Items
    # ----------------------------

    def list_items(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/items")["items"]

    def create_item(self, name: str, threshold: Optional[float] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/items", json={"name": name, "threshold": threshold})

    def link_identifier(self, item_id: int, identifier: str) -> None:
        self._request("POST", "/api/item-identifiers", json={"itemId": item_id, "identifier": identifier})

    # ----------------------------
    # Stock
    # ----------------------------

    def adjust_stock(self, item_id: int, location_id: int, delta: int) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/stock/adjust",
            json={"itemId": item_id, "locationId": location_id, "delta": delta},
        )


def client_from_env() -> PrepperstoreApiClient:
    base_url = os.getenv("PREPPERSTORE_API_URL", "http://localhost:3000")
    password = os.getenv("PREPPERSTORE_PASSWORD", "")
    return PrepperstoreApiClient(base_url=base_url, password=password)


if __name__ == "__main__":
    import json
    import sys

    if len(sys.argv) < 2:
        print("usage: python prepperstore_client.py BARCODE [IN|OUT|STATUS]")
        raise SystemExit(2)

    client = client_from_env()
    client.login()
    mode = sys.argv[2] if len(sys.argv) > 2 else "STATUS"
    print(json.dumps(client.scan(sys.argv[1], mode), indent=2))
