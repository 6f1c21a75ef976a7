"""
tests/test_routers_vendors.py — Tests for routers/vendors.py

Exercises the vendor endpoints through the TestClient: envelope shape,
camelCase bodies, 201/400/404/409 status codes and listing filters.

Called by: pytest
Depends on: routers/vendors.py, tests/conftest.py (client fixture)
"""

import time


def _register(client, **kw):
    body = {"name": "Acme Supplies", "email": "sales@acme.com", "category": ["IT Equipment"]}
    body.update(kw)
    return client.post("/api/vendors", json=body)


def test_register_returns_201_envelope(client):
    resp = _register(client, contactPerson="Jane Roe", phone="+15550100")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Vendor created successfully"
    data = body["data"]
    assert data["email"] == "sales@acme.com"
    assert data["contactPerson"] == "Jane Roe"
    assert data["isActive"] is True
    assert data["rating"] == 3


def test_register_duplicate_email_409(client):
    first = _register(client).json()["data"]
    resp = _register(client, name="Someone Else", email="  SALES@acme.com")
    assert resp.status_code == 409
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "A vendor with this email already exists"
    assert body["data"]["id"] == first["id"]


def test_register_bad_email_400(client):
    resp = _register(client, email="bad-email")
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation error"
    assert any("valid email" in e for e in body["errors"])


def test_register_long_malformed_email_400_fast(client):
    start = time.perf_counter()
    resp = _register(client, email="a" * 40 + "!")
    assert resp.status_code == 400
    assert time.perf_counter() - start < 1.0


def test_register_rating_out_of_range_400(client):
    assert _register(client, rating=6).status_code == 400


def test_get_and_missing(client, vendor):
    assert client.get(f"/api/vendors/{vendor.id}").json()["data"]["name"] == "Acme Supplies"
    resp = client.get("/api/vendors/9999")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Vendor not found"


def test_update_partial(client, vendor):
    resp = client.put(f"/api/vendors/{vendor.id}", json={"rating": 5, "notes": "Fast shipping"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["rating"] == 5
    assert data["notes"] == "Fast shipping"
    assert data["name"] == "Acme Supplies"


def test_toggle_active(client, vendor):
    resp = client.patch(f"/api/vendors/{vendor.id}/active", json={"isActive": False})
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False
    assert client.get("/api/vendors").json()["count"] == 0
    assert client.get("/api/vendors", params={"active": "false"}).json()["count"] == 1


def test_list_filters(client, make_vendor):
    make_vendor(name="Beta Soft", category=["Software"])
    make_vendor(name="Alpha Desks", category=["Furniture"], email="desks@alpha.com")
    body = client.get("/api/vendors").json()
    assert [v["name"] for v in body["data"]] == ["Alpha Desks", "Beta Soft"]
    assert body["count"] == 2
    assert [v["name"] for v in client.get("/api/vendors", params={"category": "Software"}).json()["data"]] == ["Beta Soft"]
    assert [v["name"] for v in client.get("/api/vendors", params={"search": "ALPHA.COM"}).json()["data"]] == ["Alpha Desks"]


def test_no_delete_route(client, vendor):
    assert client.delete(f"/api/vendors/{vendor.id}").status_code == 405
