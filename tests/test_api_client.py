# tests/test_api_client.py
from typing import Any, List

import pytest

from prepperstore_client import ApiError, PrepperstoreApiClient


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses: List[FakeResponse]):
        self.responses = list(responses)
        self.calls: List[tuple] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs.get("json")))
        return self.responses.pop(0)


def _client(*responses: FakeResponse) -> PrepperstoreApiClient:
    return PrepperstoreApiClient(
        base_url="http://api.local/",
        password="pw",
        session=FakeSession(list(responses)),
    )


def test_scan_posts_camel_case_body():
    c = _client(FakeResponse(200, {"status": "known"}))

    assert c.scan("123", "OUT", preferred_location_id=7) == {"status": "known"}
    assert c.session.calls == [
        ("POST", "http://api.local/api/scan", {"barcode": "123", "mode": "OUT", "preferredLocationId": 7})
    ]


def test_scan_without_hint_omits_it():
    c = _client(FakeResponse(200, {"status": "unknown_identifier"}))

    c.scan("123")

    assert c.session.calls[0][2] == {"barcode": "123", "mode": "STATUS"}


def test_unauthorized_triggers_one_login_and_retry():
    c = _client(
        FakeResponse(401, {"error": "unauthorized"}),
        FakeResponse(200, {"success": True}),
        FakeResponse(200, {"items": [{"id": 1, "name": "Beans", "threshold": None}]}),
    )

    assert c.list_items() == [{"id": 1, "name": "Beans", "threshold": None}]
    assert [call[1] for call in c.session.calls] == [
        "http://api.local/api/items",
        "http://api.local/api/login",
        "http://api.local/api/items",
    ]
    assert c.session.calls[1][2] == {"password": "pw"}


def test_error_status_raises_api_error():
    c = _client(FakeResponse(400, {"error": "name must be a non-empty string"}))

    with pytest.raises(ApiError) as exc:
        c.create_item("  ")
    assert exc.value.status_code == 400


def test_failed_login_raises():
    c = _client(FakeResponse(401, {"error": "invalid_credentials"}))

    with pytest.raises(ApiError):
        c.login()


def test_auth_check():
    assert _client(FakeResponse(200, {"authenticated": True})).auth_check() is True
    assert _client(FakeResponse(401, {"authenticated": False})).auth_check() is False


def test_adjust_and_link_bodies():
    c = _client(FakeResponse(200, {"item": {}, "locations": []}), FakeResponse(200, {"success": True}))

    c.adjust_stock(1, 2, -3)
    c.link_identifier(1, "4006381333931")

    assert c.session.calls[0][2] == {"itemId": 1, "locationId": 2, "delta": -3}
    assert c.session.calls[1][2] == {"itemId": 1, "identifier": "4006381333931"}
