"""
HTTP API tests against an isolated mapping table.
"""
import pytest
from fastapi.testclient import TestClient

from responsible_tool.api import state
from responsible_tool.api.main import app
from responsible_tool.engine import CollectingSink, FixedClock, ResponsibleResolver
from responsible_tool.rules.mapping_loader import MappingStore
from responsible_tool.services.mapping_service import MappingService


@pytest.fixture
def client(mapping_csv, tmp_path, monkeypatch):
    mapping_json = tmp_path / "responsible_mapping.json"
    service = MappingService(mapping_csv, mapping_json)
    success, errors = service.compile()
    assert success, errors

    monkeypatch.setattr(state, "mapping_service", service)
    monkeypatch.setattr(state, "mapping_store", MappingStore(mapping_json))
    monkeypatch.setattr(state, "resolver", ResponsibleResolver(clock=FixedClock(6, 12, 0), sink=CollectingSink()))
    return TestClient(app)


SHOPIFY_ORDER = {
    "id": 820982911946154508,
    "tags": "vip, wholesale",
    "shipping_address": {"country_code": "DE"},
    "billing_address": {"country_code": "CY"},
    "source_name": "web",
}


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_resolve_uses_live_clock(client):
    response = client.post("/resolve", json={"order": SHOPIFY_ORDER})
    assert response.status_code == 200
    data = response.json()
    assert data["matched_by"] == "tag"
    assert data["responsible_id"] == 31
    assert data["local_time"] == "Saturday 12:00"
    assert data["warnings"] == []


def test_resolve_at_simulated_handover(client):
    response = client.post("/resolve", json={"order": SHOPIFY_ORDER, "at": {"weekday": 5, "hour": 19, "minute": 1}})
    data = response.json()
    assert data["matched_by"] == "schedule"
    assert data["responsible_id"] == 23


def test_resolve_default_reports_warning(client):
    response = client.post("/resolve", json={"order": {"id": 77}})
    data = response.json()
    assert data["matched_by"] == "default"
    assert data["warnings"] == ["Responsible resolved by default for order 77"]


def test_resolve_rejects_bad_simulated_time(client):
    response = client.post("/resolve", json={"order": {"id": 1}, "at": {"weekday": 7}})
    assert response.status_code == 422


def test_resolve_without_mapping_is_unavailable(client, tmp_path, monkeypatch):
    monkeypatch.setattr(state, "mapping_store", MappingStore(tmp_path / "missing.json"))
    response = client.post("/resolve", json={"order": {"id": 1}})
    assert response.status_code == 503


def test_status(client):
    data = client.get("/system/status").json()
    assert data["mapping_loaded"] is True
    assert data["default_configured"] is True
    assert data["mapping_counts"]["byWeekday"] == 2


def test_mapping_crud_reloads_live_config(client):
    response = client.post("/api/mapping", json={"rule_type": "source", "match_value": "web", "responsible_id": "60"})
    assert response.status_code == 200

    data = client.post("/resolve", json={"order": {"id": 1, "source_name": "web"}}).json()
    assert data["responsible_id"] == 60

    response = client.put("/api/mapping/source", params={"match_value": "web"}, json={"responsible_id": "61"})
    assert response.json()["responsible_id"] == "61"
    data = client.post("/resolve", json={"order": {"id": 1, "source_name": "web"}}).json()
    assert data["responsible_id"] == 61

    response = client.delete("/api/mapping/source", params={"match_value": "web"})
    assert response.json()["success"] is True
    data = client.post("/resolve", json={"order": {"id": 1, "source_name": "web"}}).json()
    assert data["matched_by"] == "default"


def test_mapping_create_invalid_entry(client):
    response = client.post("/api/mapping", json={"rule_type": "weekday", "match_value": "8", "responsible_id": "1"})
    assert response.status_code == 400


def test_mapping_update_invalid_entry_leaves_table_untouched(client):
    response = client.put("/api/mapping/source", params={"match_value": "pos"}, json={"responsible_id": ""})
    assert response.status_code == 400
    assert client.get("/api/mapping/source", params={"match_value": "pos"}).json()["responsible_id"] == "31"


def test_mapping_get_unknown(client):
    assert client.get("/api/mapping/tag", params={"match_value": "nope"}).status_code == 404


def test_mapping_list_and_stats(client):
    assert len(client.get("/api/mapping").json()) == 7
    assert client.get("/api/mapping/stats").json()["active"] == 6


def test_mapping_validate(client):
    data = client.post("/api/mapping/validate", json={"rule_type": "country", "match_value": "CYP", "responsible_id": "1"}).json()
    assert data["valid"] is False


@pytest.mark.parametrize("body", [{"responsible_id": None}, {"active": None}])
def test_mapping_update_rejects_null_fields(client, body):
    response = client.put("/api/mapping/source", params={"match_value": "pos"}, json=body)
    assert response.status_code == 400

    entry = client.get("/api/mapping/source", params={"match_value": "pos"}).json()
    assert entry["responsible_id"] == "31"
    assert entry["active"] is True
    data = client.post("/resolve", json={"order": {"id": 1, "source_name": "pos"}}).json()
    assert data["responsible_id"] == 31
