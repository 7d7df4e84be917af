from __future__ import annotations

import pytest
import requests
from fastapi.testclient import TestClient

from myqris.api import app
from myqris.config import settings
from myqris.services import reader

HEADERS = {"X-API-Key": settings.api_key}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_metrics_exposes_counters(client):
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "myqris_http_requests_total" in response.text


def test_wrong_api_key_is_rejected(client, static_payload):
    response = client.post("/v1/qris/validate", json={"payload": static_payload}, headers={"X-API-Key": "nope"})
    assert response.status_code == 401


def test_validate(client, static_payload):
    response = client.post("/v1/qris/validate", json={"payload": static_payload}, headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["crc"] == body["expected_crc"] == static_payload[-4:]


def test_validate_reports_mismatch(client, static_payload):
    tampered = static_payload.replace("Warung", "Wareng")
    body = client.post("/v1/qris/validate", json={"payload": tampered}, headers=HEADERS).json()
    assert body["valid"] is False
    assert body["crc"] != body["expected_crc"]


def test_info(client, static_payload):
    response = client.post("/v1/qris/info", json={"payload": static_payload}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json() == {
        "id": "A01",
        "nns": "93600915",
        "nmid": "ID1020017611473",
        "merchant_name": "WARUNG MAKAN",
        "merchant_city": "Kota Surabaya",
    }


def test_info_invalid_crc(client, static_payload):
    response = client.post("/v1/qris/info", json={"payload": static_payload[:-4] + "ZZZZ"}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json() == {"code": "E422", "message": "Invalid QR code CRC16"}


def test_payment_percentage_fee(client, static_payload):
    response = client.post(
        "/v1/qris/payment",
        json={"payload": static_payload, "amount": 10000, "fee": 30, "fee_type": "percentage"},
        headers=HEADERS,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 13000
    assert body["fee"] == 3000
    assert "540513000" + "5802ID" in body["payload"]
    assert body["merchant"]["merchant_city"] == "Kota Surabaya"
    assert body["data_url"] is None


def test_payment_with_render(client, static_payload):
    response = client.post(
        "/v1/qris/payment",
        json={"payload": static_payload, "amount": 10000, "render": True},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["data_url"].startswith("data:image/png;base64,")


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": 0},
        {"amount": 10.5},
        {"fee": -1},
        {"fee": 150, "fee_type": "percentage"},
        {"fee_type": "other"},
        {"amount": True},
        {"amount": "100"},
        {"fee": True},
        {"fee": "5"},
    ],
)
def test_payment_rejects_bad_input(client, static_payload, overrides):
    request = {"payload": static_payload, "amount": 10000, **overrides}
    response = client.post("/v1/qris/payment", json=request, headers=HEADERS)
    assert response.status_code == 422
    assert "5802ID" not in response.text


def test_payment_core_rejection_uses_error_code(client, static_payload):
    response = client.post("/v1/qris/payment", json={"payload": static_payload, "amount": 0}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json() == {"code": "E422", "message": "Amount must be a positive number"}


def test_render_terminal(client, static_payload):
    response = client.post("/v1/qris/render", json={"payload": static_payload, "format": "terminal"}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["format"] == "terminal"
    assert "\n" in response.json()["content"]


def test_render_data_url(client, static_payload):
    response = client.post("/v1/qris/render", json={"payload": static_payload, "title": "kasir"}, headers=HEADERS)
    assert response.json()["content"].startswith("data:image/png;base64,")


def test_decode_requires_exactly_one_source(client):
    response = client.post("/v1/qris/decode", json={}, headers=HEADERS)
    assert response.status_code == 422


def test_decode_rejects_bad_base64(client):
    response = client.post("/v1/qris/decode", json={"image_base64": "%%%not-base64"}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json()["code"] == "E422"


def test_decode_url_failure(client, monkeypatch):
    def fake_get(url, timeout, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(reader.requests, "get", fake_get)
    response = client.post("/v1/qris/decode", json={"url": "https://example.invalid/qr.png"}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["code"] == "E400"


def test_decode_roundtrip(client, static_payload):
    pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)
    rendered = client.post("/v1/qris/render", json={"payload": static_payload}, headers=HEADERS).json()
    response = client.post("/v1/qris/decode", json={"image_base64": rendered["content"]}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json() == {"payload": static_payload, "valid": True}
