"""Tests for the HTTP command layer."""

import pytest
from fastapi.testclient import TestClient

from api.routes.auth import create_access_token
from app import app
from core.database import get_db
from schemas.user import AccessLevel
from utils.user_store import SqlUserStore


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session_factory, make_user):
    """Insert users directly through the store."""
    def _seed(*users):
        db = session_factory()
        try:
            store = SqlUserStore(db)
            for user in users:
                store.insert(user)
        finally:
            db.close()

    return _seed


@pytest.fixture
def strikes_of(session_factory):
    def _strikes_of(username):
        db = session_factory()
        try:
            return SqlUserStore(db).find_by_username(username).strikes
        finally:
            db.close()

    return _strikes_of


def _login(client, username, password):
    return client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )


@pytest.fixture
def admin_headers(client, seed, make_user):
    seed(make_user("root", "rootpass", access_level=AccessLevel.ADMIN))
    token = _login(client, "root", "rootpass").json()["token"]
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_login_returns_user_without_hash_and_token(client, seed, make_user):
    seed(make_user("alice", "hunter22", strikes=2))

    response = _login(client, "alice", "hunter22")

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["username"] == "alice"
    assert body["user"]["strikes"] == 0
    assert "password_hash" not in body["user"]
    assert body["token"]


def test_bad_login_keeps_kind_and_message(client, seed, make_user, strikes_of):
    seed(make_user("alice", "hunter22"))

    response = _login(client, "alice", "nope")

    assert response.status_code == 401
    assert response.json()["detail"] == {
        "kind": "InvalidDetails",
        "message": "The username or password was incorrect.",
    }
    assert strikes_of("alice") == 1


def test_unknown_user_matches_wrong_password_response(client, seed, make_user):
    seed(make_user("alice", "hunter22"))

    unknown = _login(client, "nobody", "hunter22")
    wrong = _login(client, "alice", "nope")

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_locked_account_is_423(client, seed, make_user):
    seed(make_user("bob", "correct-horse", strikes=3))

    response = _login(client, "bob", "correct-horse")

    assert response.status_code == 423
    assert response.json()["detail"]["kind"] == "AccountLocked"


def test_register_user_then_login(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "erin", "password": "pa55word", "date_of_birth": "2008-03-01"},
    )

    assert response.status_code == 201
    assert response.json()["strikes"] == 0
    assert response.json()["access_level"] == "USER"
    assert _login(client, "erin", "pa55word").status_code == 200


def test_register_rejects_short_username(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "ab", "password": "pa55word", "date_of_birth": "2008-03-01"},
    )

    assert response.status_code == 422


def test_register_duplicate_is_409(client, seed, make_user):
    seed(make_user("erin"))

    response = client.post(
        "/api/auth/register",
        json={"username": "erin", "password": "pa55word", "date_of_birth": "2008-03-01"},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "AddUserError"


def test_register_teacher_requires_admin_token(client):
    payload = {
        "username": "mrsmith",
        "password": "pa55word",
        "date_of_birth": "1980-01-01",
        "access_level": "TEACHER",
    }

    assert client.post("/api/auth/register", json=payload).status_code == 403

    payload["admin_token"] = "test-admin-token"
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    assert response.json()["access_level"] == "TEACHER"


def test_me_returns_current_user(client, seed, make_user):
    seed(make_user("alice", "hunter22"))
    token = _login(client, "alice", "hunter22").json()["token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "alice"


def test_me_rejects_garbage_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


def test_me_with_locked_account_is_423(client, seed, make_user):
    seed(make_user("bob", "correct-horse", strikes=3))
    token = create_access_token({"sub": "bob", "access_level": "USER"})

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 423
    assert response.json()["detail"]["kind"] == "AccountLocked"


def test_me_with_deleted_account_is_401(client):
    token = create_access_token({"sub": "ghost", "access_level": "USER"})

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == {
        "kind": "InvalidDetails",
        "message": "User not found.",
    }


def test_admin_routes_reject_non_admins(client, seed, make_user):
    seed(make_user("alice", "hunter22"))
    token = _login(client, "alice", "hunter22").json()["token"]

    response = client.get(
        "/api/admin/users", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403


def test_admin_lists_users(client, admin_headers, seed, make_user):
    seed(make_user("alice"), make_user("bob", strikes=3))

    response = client.get("/api/admin/users", headers=admin_headers)

    assert response.status_code == 200
    users = {u["username"]: u for u in response.json()["users"]}
    assert set(users) == {"alice", "bob", "root"}
    assert users["bob"]["strikes"] == 3
    assert all("password_hash" not in u for u in users.values())


def test_admin_adds_user(client, admin_headers):
    response = client.post(
        "/api/admin/users",
        headers=admin_headers,
        json={
            "username": "frank",
            "password": "pa55word",
            "date_of_birth": "2007-07-07",
            "access_level": "ADMIN",
        },
    )

    assert response.status_code == 201
    assert _login(client, "frank", "pa55word").json()["user"]["access_level"] == "ADMIN"


def test_admin_unlocks_user(client, admin_headers, seed, make_user, strikes_of):
    seed(make_user("bob", "correct-horse", strikes=3))

    response = client.post("/api/admin/users/bob/unlock", headers=admin_headers)

    assert response.status_code == 200
    assert strikes_of("bob") == 0
    assert _login(client, "bob", "correct-horse").status_code == 200


def test_admin_unlock_missing_user_is_404(client, admin_headers):
    response = client.post("/api/admin/users/carol/unlock", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "InvalidDetails"


def test_admin_deletes_user(client, admin_headers, seed, make_user):
    seed(make_user("carol"))

    response = client.delete("/api/admin/users/carol", headers=admin_headers)

    assert response.status_code == 200
    assert _login(client, "carol", "hunter22").status_code == 401


def test_admin_delete_missing_user_is_404(client, admin_headers):
    response = client.delete("/api/admin/users/carol", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == {
        "kind": "InvalidDetails",
        "message": "Could not find user.",
    }
