from __future__ import annotations


def test_anonymous_calls_are_rejected(client):
    resp = client.get("/api/dashboard")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Authentication required"}


def test_login_with_wrong_password(login):
    resp = login("admin@holitime.local", "nope")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_me_and_logout(client, login):
    resp = login("Admin@Holitime.local ", "admin123")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "Admin"

    me = client.get("/api/auth/me").get_json()
    assert me["success"] is True
    assert me["user"]["email"] == "admin@holitime.local"
    assert "password_hash" not in me["user"]

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_body_must_be_an_object(client, login):
    login("admin@holitime.local", "admin123")
    resp = client.post("/api/announcements", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Request body must be a JSON object"
