from datetime import timedelta
from decimal import Decimal

import pytest

from fastapi.testclient import TestClient

from textilehome.config import Settings
from textilehome.main import create_app
from textilehome.models.admin import AdminSession
from textilehome.services.admin_service import AdminExists, AdminService, utcnow

NEW_PRODUCT = {
    "name": "Waffle Weave Throw",
    "description": "Soft waffle knit for chilly evenings",
    "price": "64.5",
    "category": "bedsheets",
    "material": "Cotton",
    "imageUrl": "https://images.unsplash.com/photo-1555041469-a586c61ea9bc",
}


def test_login_returns_session_and_admin(client, db):
    AdminService(db).create_admin("admin", "admin123", "admin@textilehome.com")
    res = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert len(body["sessionId"]) == 64
    assert body["admin"]["username"] == "admin"
    assert body["admin"]["email"] == "admin@textilehome.com"
    assert body["admin"]["lastLogin"] is not None
    assert "passwordHash" not in body["admin"]


def test_login_requires_both_fields(client):
    res = client.post("/api/admin/login", json={"username": "admin"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Username and password required"


def test_login_rejects_bad_password(client, db):
    AdminService(db).create_admin("admin", "admin123")
    res = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials"
    res = client.post("/api/admin/login", json={"username": "ghost", "password": "admin123"})
    assert res.status_code == 401


def test_duplicate_admin(db):
    svc = AdminService(db)
    svc.create_admin("admin", "admin123")
    with pytest.raises(AdminExists):
        svc.create_admin("admin", "other")


def test_password_is_hashed(db):
    admin = AdminService(db).create_admin("admin", "admin123")
    assert admin.password_hash != "admin123"


def test_me(client, admin_headers):
    res = client.get("/api/admin/me", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["username"] == "admin"


def test_admin_routes_require_session(client):
    res = client.post("/api/admin/products", json=NEW_PRODUCT)
    assert res.status_code == 401
    assert res.json()["detail"] == "Admin authentication required"

    res = client.post("/api/admin/products", json=NEW_PRODUCT, headers={"admin-session": "bogus"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid admin session"


def test_logout_invalidates_session(client, admin_headers):
    assert client.post("/api/admin/logout", json={}, headers=admin_headers).json() == {"success": True}
    assert client.get("/api/admin/me", headers=admin_headers).status_code == 401


def test_expired_session_is_rejected_and_removed(client, db, admin_headers):
    sid = admin_headers["admin-session"]
    db.query(AdminSession).filter(AdminSession.id == sid).update(
        {"expires_at": utcnow() - timedelta(minutes=1)}
    )
    db.commit()

    assert client.get("/api/admin/me", headers=admin_headers).status_code == 401
    db.expire_all()
    assert db.get(AdminSession, sid) is None


def test_purge_expired_sessions(db, admin_headers):
    svc = AdminService(db)
    admin = svc.repo.get_by_username("admin")
    svc.repo.create_session("old", admin, utcnow() - timedelta(hours=1))
    db.commit()
    assert svc.purge_expired_sessions() == 1
    assert db.get(AdminSession, admin_headers["admin-session"]) is not None


def test_create_product(client, admin_headers):
    res = client.post("/api/admin/products", json=NEW_PRODUCT, headers=admin_headers)
    assert res.status_code == 201
    body = res.json()
    assert Decimal(body["price"]) == Decimal("64.50")
    assert body["inStock"] is True
    assert body["featured"] is False

    found = client.get("/api/products/search", params={"q": "waffle"}).json()
    assert [p["id"] for p in found] == [body["id"]]


def test_create_product_rejects_unknown_category(client, admin_headers):
    payload = dict(NEW_PRODUCT, category="curtains")
    res = client.post("/api/admin/products", json=payload, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid request data"


def test_create_product_strips_script_tags(client, admin_headers):
    payload = dict(NEW_PRODUCT, name="<script>alert(1)</script>Waffle Throw")
    res = client.post("/api/admin/products", json=payload, headers=admin_headers)
    assert res.status_code == 201
    assert res.json()["name"] == "Waffle Throw"


def test_update_product_changes_only_given_fields(client, admin_headers):
    res = client.put(
        "/api/admin/products/1", json={"price": "79.99", "featured": False}, headers=admin_headers
    )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["price"]) == Decimal("79.99")
    assert body["featured"] is False
    assert body["name"] == "Premium Cotton Sheets"


def test_update_missing_product(client, admin_headers):
    res = client.put("/api/admin/products/9999", json={"name": "x"}, headers=admin_headers)
    assert res.status_code == 404
    res = client.put("/api/admin/products/abc", json={"name": "x"}, headers=admin_headers)
    assert res.status_code == 400


def test_delete_product_removes_it_from_carts(client, admin_headers):
    cart = {"x-session-id": "shopper"}
    client.post("/api/cart", json={"productId": 1}, headers=cart)
    client.post("/api/cart", json={"productId": 2}, headers=cart)

    res = client.delete("/api/admin/products/1", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"success": True}

    assert client.get("/api/products/1").status_code == 404
    assert [i["productId"] for i in client.get("/api/cart", headers=cart).json()] == [2]
    assert client.delete("/api/admin/products/1", headers=admin_headers).status_code == 404


def test_full_security_status_is_unmasked(client, admin_headers):
    client.get("/api/products/9999", headers={"X-Forwarded-For": "203.0.113.7"})
    body = client.get("/api/admin/security/status", headers=admin_headers).json()
    ips = [r["ip"] for r in body["suspiciousIPs"]["recentActivity"]]
    assert "203.0.113.7" in ips


def test_product_copy_may_read_like_sql(client, admin_headers):
    payload = dict(
        NEW_PRODUCT,
        description="Made for hot sleepers or anyone who wants true year-round comfort",
    )
    res = client.post("/api/admin/products", json=payload, headers=admin_headers)
    assert res.status_code == 201
    assert res.json()["description"] == payload["description"]


def test_session_lifetime_follows_app_settings(db):
    AdminService(db).create_admin("admin", "admin123")
    c = TestClient(create_app(Settings(ADMIN_SESSION_TTL_HOURS=1)))
    c.headers.update({"Origin": "http://testserver"})
    res = c.post("/api/admin/login", json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200

    session = db.get(AdminSession, res.json()["sessionId"])
    left = session.expires_at - utcnow()
    assert timedelta(minutes=59) < left <= timedelta(hours=1)


def test_zero_hour_sessions_expire_immediately(db):
    svc = AdminService(db, session_ttl_hours=0)
    svc.create_admin("admin", "admin123")
    session = svc.login("admin", "admin123")
    assert svc.validate_session(session.id) is None
