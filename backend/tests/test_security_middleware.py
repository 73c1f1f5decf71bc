from fastapi.testclient import TestClient

from textilehome.main import app
from textilehome.repositories.cart_repo import CartRepository
from textilehome.security.middleware import SECURITY_HEADERS

CHROME = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


def test_security_headers_on_every_response(client):
    res = client.get("/api/products/featured")
    assert res.status_code == 200
    for name, value in SECURITY_HEADERS.items():
        assert res.headers[name] == value
    assert "images.unsplash.com" in res.headers["Content-Security-Policy"]

    res = client.get("/api/products/9999")
    assert res.headers["X-Frame-Options"] == "DENY"


def test_honeypot_fakes_success_and_blocks_ip(client):
    attacker = {"X-Forwarded-For": "192.0.2.50"}
    res = client.get("/wp-admin", headers=attacker)
    assert res.status_code == 200
    assert res.json() == {"status": "success", "message": "Access granted"}

    res = client.get("/api/products", headers=attacker)
    assert res.status_code == 403
    assert res.json() == {"error": "Access denied"}

    assert client.get("/api/products").status_code == 200


def test_repeated_failures_lead_to_temporary_ban(client):
    ip = {"X-Forwarded-For": "192.0.2.60"}
    for _ in range(10):
        assert client.get("/api/products/9999", headers=ip).status_code == 404

    res = client.get("/api/products", headers=ip)
    assert res.status_code == 403
    body = res.json()
    assert body["error"] == "Access temporarily denied"
    assert 0 < body["retryAfter"] <= 30 * 60


def test_sql_injection_in_query_is_rejected(client):
    res = client.get("/api/products/search", params={"q": "x' OR 1=1 --"})
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid request parameters"}


def test_sql_injection_in_body_is_rejected(client):
    res = client.post(
        "/api/admin/login",
        json={"username": "admin' OR 1=1 --", "password": "x"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid request data"}


def test_script_tags_are_stripped_from_query(client):
    res = client.get("/api/products/search", params={"q": "<script>alert(1)</script>linen"})
    assert res.status_code == 200
    assert len(res.json()) == 3


def test_state_changes_need_same_origin():
    bare = TestClient(app)
    res = bare.post("/api/cart", json={"productId": 1})
    assert res.status_code == 403
    assert res.json() == {"error": "Cross-site request blocked"}

    res = bare.post("/api/cart", json={"productId": 1}, headers={"Origin": "http://evil.example"})
    assert res.status_code == 403

    res = bare.post(
        "/api/cart", json={"productId": 1}, headers={"Referer": "http://testserver/products/1"}
    )
    assert res.status_code == 201

    res = bare.post(
        "/api/cart", json={"productId": 1}, headers={"Origin": "http://localhost:5000"}
    )
    assert res.status_code == 201

    assert bare.get("/api/products").status_code == 200


def test_json_content_type_required(client):
    res = client.post(
        "/api/cart",
        content="productId=1",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid content type"}


def test_oversized_body_is_rejected(client):
    res = client.post(
        "/api/cart",
        content=b"x" * (1024 * 1024 + 1),
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 413
    assert res.json() == {"error": "Request too large"}


def test_malformed_json_reaches_validation(client):
    res = client.post(
        "/api/cart", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid request data"


def test_scripted_user_agents_are_blocked(client):
    res = client.get("/api/products", headers={"User-Agent": "curl/8.4.0"})
    assert res.status_code == 403
    assert res.json() == {"error": "Access denied"}

    assert client.get("/api/products", headers={"User-Agent": CHROME}).status_code == 200


def test_public_status_masks_addresses(client):
    client.get("/api/products/9999", headers={"X-Forwarded-For": "203.0.113.7"})
    client.get("/wp-login.php", headers={"X-Forwarded-For": "198.51.100.23"})

    res = client.get("/api/security/status")
    assert res.status_code == 200
    body = res.json()
    assert body["blockedIPs"] == {"count": 1, "list": ["198.51.100.***"]}
    ips = [r["ip"] for r in body["suspiciousIPs"]["recentActivity"]]
    assert ips == ["203.0.113.***"]
    assert "uptime" in body


def test_unhandled_error_keeps_security_and_cors_headers(monkeypatch):
    def broken(self, session_id):
        raise RuntimeError("database went away")

    monkeypatch.setattr(CartRepository, "list_for_session", broken)
    c = TestClient(app, raise_server_exceptions=False)
    res = c.get(
        "/api/cart", headers={"x-session-id": "s", "Origin": "http://localhost:5000"}
    )
    assert res.status_code == 500
    assert res.json() == {"detail": "Internal Server Error"}
    assert res.headers["X-Frame-Options"] == "DENY"
    assert res.headers["Content-Security-Policy"] == SECURITY_HEADERS["Content-Security-Policy"]
    assert res.headers["access-control-allow-origin"] == "http://localhost:5000"
