"""HTTP tests for the auth and users blueprints."""

from urllib.parse import parse_qs, urlsplit

import pytest

from conftest import bearer
from models import storage
from models.session import AuthSession
from services.federation import GoogleOAuthClient

pytestmark = pytest.mark.integration


def register(client, email="a@x.com", password="pw", **extra):
    return client.post("/api/v1/auth/register", json={"email": email, "password": password, **extra})


def login(client, email="a@x.com", password="pw"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def refresh(client, session_id, token=None):
    headers = bearer(token) if token else {}
    return client.post("/api/v1/auth/refresh", json={"sessionId": session_id}, headers=headers)


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["database"] == "ok"


def test_register_login_scenario(client):
    created = register(client, name="Alice", birthday="1990-05-01")
    assert created.status_code == 201
    body = created.get_json()
    assert set(body) == {"accessToken", "refreshToken", "sessionId", "user"}
    assert body["user"] == {"name": "Alice", "email": "a@x.com", "birthday": "1990-05-01"}

    wrong = login(client, password="wrong")
    assert wrong.status_code == 401
    assert wrong.get_json()["message"] == "Email or password is wrong"

    ok = login(client)
    assert ok.status_code == 200
    logged_in = ok.get_json()
    assert logged_in["accessToken"]
    assert logged_in["sessionId"] != body["sessionId"]


def test_register_duplicate_email(client):
    register(client)
    resp = register(client, email="A@X.com", password="other")

    assert resp.status_code == 409
    assert resp.get_json() == {"error": "CONFLICT", "message": "Email in use", "status": 409}


def test_register_validation(client):
    resp = client.post("/api/v1/auth/register", json={"email": "not-an-email"})

    assert resp.status_code == 422
    body = resp.get_json()
    assert body["error"] == "VALIDATION_ERROR"
    assert "email" in body["details"]
    assert "password" in body["details"]


def test_login_unknown_email_same_message(client):
    resp = login(client, email="ghost@x.com")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Email or password is wrong"


def test_refresh_rotates_once(client):
    issued = register(client).get_json()

    first = refresh(client, issued["sessionId"], issued["refreshToken"])
    assert first.status_code == 200
    rotated = first.get_json()
    assert set(rotated) == {"accessToken", "refreshToken", "sessionId"}
    assert rotated["sessionId"] != issued["sessionId"]

    replay = refresh(client, issued["sessionId"], issued["refreshToken"])
    assert replay.status_code in (401, 404)

    again = refresh(client, rotated["sessionId"], rotated["refreshToken"])
    assert again.status_code == 200


def test_refresh_without_token(client):
    issued = register(client).get_json()

    resp = refresh(client, issued["sessionId"])
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No token provided"


def test_refresh_unknown_session(client):
    issued = register(client).get_json()

    resp = refresh(client, "no-such-session", issued["refreshToken"])
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Invalid session"


def test_refresh_with_bad_token_burns_session(client):
    issued = register(client).get_json()

    resp = refresh(client, issued["sessionId"], "tampered.token.value")
    assert resp.status_code == 401
    assert storage.get(AuthSession, issued["sessionId"]) is None

    # the legitimate pair is dead too
    resp = refresh(client, issued["sessionId"], issued["refreshToken"])
    assert resp.status_code == 404


def test_current_user_requires_live_session(client):
    issued = register(client, name="Alice").get_json()

    resp = client.get("/api/v1/users/current", headers=bearer(issued["accessToken"]))
    assert resp.status_code == 200
    assert resp.get_json()["user"]["email"] == "a@x.com"
    assert resp.get_json()["sessionId"] == issued["sessionId"]

    assert client.get("/api/v1/users/current").status_code == 401
    assert client.get("/api/v1/users/current", headers=bearer(issued["refreshToken"])).status_code == 401


def test_signout(client):
    issued = register(client).get_json()

    resp = client.post("/api/v1/auth/signout", headers=bearer(issued["accessToken"]))
    assert resp.status_code == 204
    assert resp.data == b""

    again = client.post("/api/v1/auth/signout", headers=bearer(issued["accessToken"]))
    assert again.status_code == 401
    assert client.get("/api/v1/users/current", headers=bearer(issued["accessToken"])).status_code == 401


def test_google_initiate_redirects_to_consent(client):
    resp = client.get("/api/v1/auth/google")

    assert resp.status_code == 302
    location = urlsplit(resp.headers["Location"])
    assert location.netloc == "accounts.google.com"
    query = parse_qs(location.query)
    assert query["client_id"] == ["test-client-id"]
    assert query["redirect_uri"] == ["http://auth.test/api/v1/auth/google-redirect"]


def test_google_callback_redirects_registered_user(client, monkeypatch):
    monkeypatch.setattr(GoogleOAuthClient, "fetch_email", lambda self, code: "a@x.com")
    register(client, originUrl="http://localhost:3000")

    resp = client.get("/api/v1/auth/google-redirect?code=abc")

    assert resp.status_code == 302
    location = urlsplit(resp.headers["Location"])
    assert location.netloc == "localhost:3000"
    query = parse_qs(location.query)
    assert {"accessToken", "refreshToken", "sessionId"} <= set(query)
    assert storage.get(AuthSession, query["sessionId"][0]) is not None


def test_google_callback_without_registration(client, monkeypatch):
    monkeypatch.setattr(GoogleOAuthClient, "fetch_email", lambda self, code: "a@x.com")
    register(client)
    sessions_before = storage.count(AuthSession)

    resp = client.get("/api/v1/auth/google-redirect?code=abc")

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "FORBIDDEN"
    assert storage.count(AuthSession) == sessions_before


def test_google_callback_without_code(client):
    resp = client.get("/api/v1/auth/google-redirect")
    assert resp.status_code == 400


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NOT_FOUND"


def test_auth_routes_live_under_auth_prefix(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    for path in ("register", "login", "refresh", "signout", "google", "google-redirect"):
        assert f"/api/v1/auth/{path}" in rules
    assert "/api/v1/register" not in rules


def test_google_callback_path_is_routed(app, client):
    # Google sends the browser back to BASE_URL + GOOGLE_CALLBACK_PATH
    resp = client.get(app.config["GOOGLE_CALLBACK_PATH"])
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Missing authorization code"


def test_register_keeps_avatar_url(client):
    resp = register(client, avatarUrl="https://cdn.example.com/a.png")
    assert resp.status_code == 201

    user = storage.get(AuthSession, resp.get_json()["sessionId"]).user
    assert user.avatar_url == "https://cdn.example.com/a.png"


def test_register_avatar_url_defaults_to_empty(client):
    resp = register(client)
    user = storage.get(AuthSession, resp.get_json()["sessionId"]).user
    assert user.avatar_url == ""


def test_missing_authorization_header_message(client):
    resp = client.post("/api/v1/auth/signout")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Not authorized"

    resp = client.get("/api/v1/users/current", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Not authorized"
