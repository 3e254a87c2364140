from authserver.auth.jwt_handler import create_access_token, decode_token
from authserver.auth.password import hash_password, verify_password


def _signup(client, email="Alice@Example.com ", password="secret1", full_name="Alice"):
    return client.post(
        "/auth/signup",
        json={"email": email.strip(), "password": password, "full_name": full_name},
        headers={"Origin": "http://localhost:5173"},
    )


def test_password_hashing():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)
    assert not verify_password("secret1", "")
    assert not verify_password("secret1", "not-a-bcrypt-hash")


def test_token_round_trip():
    token = create_access_token("user-1", extra_claims={"email": "a@example.com"})
    payload = decode_token(token)
    assert payload["sub"] == "user-1"
    assert payload["email"] == "a@example.com"


def test_signup_then_login_then_me(client):
    resp = _signup(client)
    assert resp.status_code == 201
    assert resp.json()["ok"] is True
    assert resp.json()["data"]["token"]

    resp = client.post("/auth/login", json={"email": "ALICE@example.com", "password": "secret1"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["profile"]["email"] == "alice@example.com"
    assert data["profile"]["full_name"] == "Alice"
    assert "password_hash" not in data["profile"]

    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert resp.status_code == 200
    assert resp.json()["data"]["user_id"] == data["profile"]["user_id"]


def test_stored_password_is_hashed(client):
    _signup(client)
    (doc,) = client.app.state.db.users.docs.values()
    assert doc["password_hash"] != "secret1"
    assert doc["email"] == "alice@example.com"


def test_duplicate_signup(client):
    assert _signup(client).status_code == 201
    resp = _signup(client, email="alice@example.com")
    assert resp.status_code == 400
    assert resp.json() == {"ok": False, "error": "Email not available"}


def test_signup_validation(client):
    resp = client.post("/auth/signup", json={"email": "not-an-email", "password": "123"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_login_with_wrong_password(client):
    _signup(client)
    resp = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong!"})
    assert resp.status_code == 401
    assert resp.json() == {"ok": False, "error": "Invalid credentials"}


def test_login_unknown_user(client):
    resp = client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret1"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid credentials"


def test_me_requires_bearer_token(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"ok": False, "error": "Missing bearer token"}


def test_me_rejects_bad_token(client):
    resp = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid or expired token"


def test_me_rejects_token_for_deleted_user(client):
    token = create_access_token("no-such-user")
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "User not found"
