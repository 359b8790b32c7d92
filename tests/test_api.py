from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from conftest import make_offer
from offer_pricing.api import state
from offer_pricing.api.main import app
from offer_pricing.engine import PricingEngine
from offer_pricing.services.offers_service import OffersService


@pytest.fixture
def service(tmp_path, monkeypatch):
    svc = OffersService(tmp_path / "offers.csv")
    svc.create_offer(make_offer("group_discount", 400, id="pair", event_id="evt-1", group_size=2))
    svc.create_offer(make_offer("razorpay_above", 20, id="fee", event_id="evt-1"))
    svc.create_offer(make_offer("student_discount", 250, id="student", event_id="evt-1", is_active=False))
    monkeypatch.setattr(state, "_offers_service", svc)
    monkeypatch.setattr(state, "_engine", PricingEngine())
    return svc


@pytest.fixture
def client(service):
    return TestClient(app)


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_calculate_with_event_offers(client):
    resp = client.post("/calculate", json={"base_price": 500, "quantity": 2, "event_id": "evt-1"})
    assert resp.status_code == 200
    data = resp.json()

    assert Decimal(data["total_price"]) == 840
    assert Decimal(data["savings"]) == 200
    assert data["applied_offers"] == ["pair", "fee"]


def test_calculate_with_selection(client):
    resp = client.post("/calculate", json={
        "base_price": 500,
        "quantity": 2,
        "event_id": "evt-1",
        "selected_offer_ids": ["pair"],
    })
    assert Decimal(resp.json()["total_price"]) == 800


def test_calculate_with_inline_offers(client):
    resp = client.post("/calculate", json={
        "base_price": 1000,
        "quantity": 3,
        "offers": [{"offer_type": "flat_rate", "title": "Flat", "price_adjustment": 700}],
    })
    data = resp.json()

    assert resp.status_code == 200
    assert Decimal(data["total_price"]) == 2100
    assert data["applied_offers"] == ["inline-0"]


def test_calculate_with_context(client):
    resp = client.post("/calculate", json={
        "base_price": 500,
        "quantity": 1,
        "offers": [{"offer_type": "women_flash_sale", "title": "Friday", "price_adjustment": 0}],
        "context": {"is_women": True, "booking_day": "friday"},
    })
    assert Decimal(resp.json()["total_price"]) == 0


def test_calculate_rejects_invalid_inline_offer(client):
    resp = client.post("/calculate", json={
        "base_price": 500,
        "quantity": 1,
        "offers": [{"offer_type": "flat_rate", "title": "Bad", "price_adjustment": 10, "group_size": 0}],
    })
    assert resp.status_code == 400


def test_calculate_validates_quantity(client):
    resp = client.post("/calculate", json={"base_price": 500, "quantity": 0})
    assert resp.status_code == 422


def test_eligible_offers(client):
    resp = client.get("/events/evt-1/offers/eligible", params={"quantity": 1})
    assert resp.status_code == 200
    data = resp.json()

    assert [o["id"] for o in data] == ["fee"]
    assert data[0]["display_text"] == "+₹20 payment fee"


def test_list_and_get_offers(client):
    assert [o["id"] for o in client.get("/api/offers", params={"event_id": "evt-1"}).json()] == ["pair", "fee", "student"]
    assert len(client.get("/api/offers", params={"include_inactive": False}).json()) == 2

    offer = client.get("/api/offers/pair").json()
    assert offer["type_label"] == "Group Discount"
    assert offer["price_display"] == "+₹400"
    assert client.get("/api/offers/missing").status_code == 404


def test_create_offer(client, service):
    resp = client.post("/api/offers", json={
        "event_id": "evt-2",
        "offer_type": "flat_rate",
        "title": "Early bird",
        "price_adjustment": 399,
    })
    assert resp.status_code == 200
    created = resp.json()

    assert service.get_offer(created["id"]).price_adjustment == Decimal("399")


def test_create_invalid_offer(client):
    resp = client.post("/api/offers", json={
        "offer_type": "group_discount",
        "title": "Tiny group",
        "price_adjustment": 100,
        "group_size": 1,
    })
    assert resp.status_code == 400
    assert "group size" in resp.json()["detail"]["errors"][0]


def test_create_duplicate_offer(client):
    resp = client.post("/api/offers", json={
        "id": "fee",
        "offer_type": "razorpay_above",
        "title": "Fee again",
        "price_adjustment": 25,
    })
    assert resp.status_code == 400


def test_update_offer(client, service):
    resp = client.put("/api/offers/pair", json={"price_adjustment": 350})
    assert resp.status_code == 200
    assert service.get_offer("pair").price_adjustment == Decimal("350")

    assert client.put("/api/offers/missing", json={"title": "x"}).status_code == 404
    assert client.put("/api/offers/pair", json={"min_quantity": 5, "max_quantity": 2}).status_code == 400


def test_toggle_and_delete(client, service):
    resp = client.post("/api/offers/student/toggle", json={"is_active": True})
    assert resp.json()["is_active"] is True
    assert service.get_offer("student").is_active

    assert client.delete("/api/offers/student").json()["success"] is True
    assert client.delete("/api/offers/student").status_code == 404


def test_validate_endpoint(client):
    resp = client.post("/api/offers/validate", json={
        "offer_type": "flat_rate",
        "title": "Free",
        "price_adjustment": 0,
    })
    data = resp.json()
    assert data["valid"] is False
    assert data["errors"] == ["Flat rate must be a positive price"]


def test_stats_and_templates(client):
    stats = client.get("/api/offers/stats").json()
    assert stats["total"] == 3
    assert stats["active"] == 2

    templates = client.get("/api/offers/templates").json()
    assert any(t["offer_type"] == "women_flash_sale" for t in templates)


def test_system_status(client):
    data = client.get("/system/status").json()
    assert data["offers_count"] == 3
    assert data["add_person_mode"] in ("surcharge", "discount")


def test_update_rejects_offer_create_would_reject(client, service):
    resp = client.put("/api/offers/pair", json={"group_size": 1})
    assert resp.status_code == 400
    assert service.get_offer("pair").group_size == 2


def test_empty_store_file(client, tmp_path, monkeypatch):
    empty = tmp_path / "empty.csv"
    empty.write_text("")
    monkeypatch.setattr(state, "_offers_service", OffersService(empty))

    assert client.get("/system/status").json()["offers_count"] == 0
    resp = client.post("/calculate", json={"base_price": 500, "quantity": 2, "event_id": "evt-1"})
    assert Decimal(resp.json()["total_price"]) == 1000
