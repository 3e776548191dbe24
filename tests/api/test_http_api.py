from __future__ import annotations

from datetime import timedelta

import pytest

from src.visitor_system.visitor_system.main import create_app

OFFICER = {"id": "sec-1", "name": "Officer Lee", "role": "security"}
ADMIN = {"id": "admin-1", "name": "Admin User", "role": "admin"}


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def host_id(client):
    res = client.post(
        "/api/hosts/register",
        json={"name": "John Doe", "email": "john@company.com", "department": "Engineering"},
    )
    assert res.status_code == 201
    hid = res.get_json()["data"]["id"]
    res = client.post(f"/api/hosts/{hid}/approve", json={"password": "secret123", "actor": ADMIN})
    assert res.status_code == 200
    return hid


def _check_in_payload(**overrides):
    payload = {
        "visitor": {
            "name": "Jane Visitor",
            "phone": "555-0100",
            "government_id": {"type": "passport", "number": "P100", "verified": True},
        },
        "host_name": "John Doe",
        "purpose": "Interview",
        "actor": OFFICER,
    }
    payload.update(overrides)
    return payload


def test_host_login_requires_approval(client):
    res = client.post(
        "/api/hosts/register",
        json={"name": "Maria", "email": "maria@company.com", "department": "Sales"},
    )
    hid = res.get_json()["data"]["id"]
    assert "password_hash" not in res.get_json()["data"]

    res = client.post("/api/login", json={"email": "maria@company.com", "password": "secret123"})
    assert res.status_code == 401
    assert res.get_json()["success"] is False

    client.post(f"/api/hosts/{hid}/approve", json={"password": "secret123", "actor": ADMIN})
    res = client.post("/api/login", json={"email": "maria@company.com", "password": "secret123"})
    assert res.status_code == 200
    assert res.get_json()["data"]["is_approved"] is True


def test_check_in_approve_and_badge(client, host_id):
    res = client.post("/api/check-ins", json=_check_in_payload())
    assert res.status_code == 201
    body = res.get_json()["data"]
    vid, cid = body["visitor"]["id"], body["check_in"]["id"]
    assert body["check_in"]["status"] == "pending"

    res = client.get("/api/check-ins/pending", query_string={"host_id": host_id})
    assert [e["check_in"]["id"] for e in res.get_json()["data"]] == [cid]

    res = client.post(f"/api/visitors/{vid}/check-ins/{cid}/approve", json={"actor": OFFICER})
    assert res.status_code == 200
    badge = res.get_json()["data"]["check_in"]["badge_number"]
    assert badge

    res = client.get(f"/api/visitors/{vid}/check-ins/{cid}/badge")
    assert res.get_json()["data"]["check_in"]["qr_code"] == f"QR_{badge}"

    stats = client.get("/api/admin/stats").get_json()["data"]
    assert stats["active_now"] == 1
    assert stats["pending_approval"] == 0

    res = client.post(f"/api/visitors/{vid}/check-ins/{cid}/deny", json={"reason": "late", "actor": OFFICER})
    assert res.status_code == 409


def test_domain_errors_map_to_status_codes(client, host_id):
    assert client.get("/api/visitors/missing").status_code == 404
    assert client.post("/api/check-ins", json=_check_in_payload(actor=None)).status_code == 400

    res = client.put("/api/admin/rules", json={"allow_walk_in_visitors": False, "actor": ADMIN})
    assert res.status_code == 200
    assert res.get_json()["data"]["allow_walk_in_visitors"] is False

    res = client.post("/api/check-ins", json=_check_in_payload())
    assert res.status_code == 403
    assert res.get_json()["error"] == "PolicyViolation"


def test_expired_pre_approval_returns_gone(client, container, clock, host_id):
    scheduled = clock.now() + timedelta(hours=2)
    res = client.post(
        "/api/pre-approvals",
        json={
            "visitor": {"name": "Alice Guest", "phone": "555-0300", "email": "alice@example.com"},
            "host_id": host_id,
            "scheduled_date": scheduled.isoformat(),
            "purpose": "Review",
        },
    )
    assert res.status_code == 201
    pa = res.get_json()["data"]
    assert pa["status"] == "active"

    clock.set(scheduled + timedelta(hours=25))
    res = client.get(f"/api/pre-approvals/{pa['id']}")
    assert res.get_json()["data"]["status"] == "expired"

    res = client.post(
        "/api/check-ins/pre-approved",
        json=_check_in_payload(access_code=pa["access_code"]),
    )
    assert res.status_code == 410


def test_audit_export(client, host_id):
    res = client.get("/api/admin/audit", query_string={"action": "host_approved"})
    body = res.get_json()
    assert len(body["data"]) == 1
    assert body["total"] == 2

    res = client.get("/api/admin/audit.csv")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    header = res.get_data(as_text=True).lstrip("\ufeff").splitlines()[0]
    assert header.startswith("id,timestamp,action")

    assert client.get("/api/admin/audit", query_string={"severity": "extreme"}).status_code == 400


@pytest.mark.parametrize("suffix", ["+00:00", "Z"])
def test_pre_approval_accepts_offset_timestamps(client, clock, host_id, suffix):
    scheduled = (clock.now() + timedelta(days=1)).replace(microsecond=0)
    res = client.post(
        "/api/pre-approvals",
        json={
            "visitor": {"name": "Omar Remote", "phone": "555-0700"},
            "host_id": host_id,
            "scheduled_date": scheduled.isoformat() + suffix,
            "purpose": "Kickoff",
        },
    )
    assert res.status_code == 201
    pa = res.get_json()["data"]
    assert pa["status"] == "active"
    assert "+" not in pa["scheduled_date"] and not pa["scheduled_date"].endswith("Z")

    listed = client.get("/api/pre-approvals")
    assert listed.status_code == 200
    assert [p["id"] for p in listed.get_json()["data"]] == [pa["id"]]
    assert client.get("/api/admin/stats").status_code == 200
