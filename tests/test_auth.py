"""Tests for password hashing, sign-in and sign-up."""

from conftest import login
from bananadb.auth import NavState, hash_password, verify_password


def test_password_roundtrip():
    stored = hash_password("hunter22", iterations=1000)
    assert stored.startswith("pbkdf2_sha256$1000$")
    assert verify_password("hunter22", stored)
    assert not verify_password("hunter23", stored)
    assert not verify_password("hunter22", "garbage")


def test_nav_state_display_name(make_user):
    user = make_user(full_name="Ana Silva")
    assert NavState("projects", user).display_name == "Ana Silva"
    assert NavState("projects", None).is_admin is False


def test_login_required_redirect(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


def test_sign_up_then_sign_in(client, db):
    resp = client.post("/signup", data={"email": "new@example.com", "password": "secret123",
                                        "full_name": "New Person"})
    assert resp.status_code == 200
    assert "Registration successful! You can now sign in." in resp.text

    login(client, "new@example.com", "secret123")
    home = client.get("/")
    assert home.status_code == 200
    assert "New Person" in home.text


def test_sign_up_short_password(client):
    resp = client.post("/signup", data={"email": "new@example.com", "password": "123"})
    assert resp.status_code == 400


def test_sign_up_existing_email(client, make_user):
    make_user("taken@example.com")
    resp = client.post("/signup", data={"email": "taken@example.com", "password": "secret123"})
    assert resp.status_code == 400
    assert "already exists" in resp.text


def test_bad_credentials(client, make_user):
    make_user()
    resp = client.post("/login", data={"email": "user@example.com", "password": "wrong-password"})
    assert resp.status_code == 400
    assert "Invalid login credentials" in resp.text


def test_sign_in_records_time_and_sign_out(client, db, make_user):
    user = make_user()
    login(client)
    db.refresh(user)
    assert user.last_sign_in_at is not None

    client.post("/logout")
    assert client.get("/", follow_redirects=False).status_code == 303


def test_malformed_stored_hash_is_rejected():
    assert not verify_password("hunter22", "pbkdf2_sha256$x$salt$d")
    assert not verify_password("hunter22", "pbkdf2_sha256$0$salt$d")
    assert not verify_password("hunter22", "md5$1000$salt$d")
