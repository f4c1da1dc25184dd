import asyncio

import pytest

from conftest import PASSWORD, auth, login, register
from jobboard.database import ensure_indexes
from jobboard.errors import ConflictError
from jobboard.routes.auth import insert_user


def test_register_returns_token_and_user(client):
    user = register(client, "employer", name="Ravi Kapoor", company_name="Golden Traders")
    assert user["token"]
    assert user["role"] == "employer"
    assert user["company_name"] == "Golden Traders"
    assert "password" not in user


def test_register_rejects_duplicate_email(client, seeker):
    response = client.post("/auth/register", json={
        "name": "Someone Else",
        "email": seeker["email"],
        "phone": "7000000001",
        "password": PASSWORD,
    })
    assert response.status_code == 409


def test_unique_email_index_turns_racing_register_into_conflict(db):
    asyncio.run(ensure_indexes(db))
    asyncio.run(db.users.insert_one({"email": "race@example.com", "phone": "7000000002"}))

    with pytest.raises(ConflictError) as exc:
        asyncio.run(insert_user(db, {"email": "race@example.com", "phone": "7000000003"}))
    assert exc.value.status_code == 409
    assert asyncio.run(db.users.count_documents({})) == 1


def test_register_rejects_bad_phone(client):
    response = client.post("/auth/register", json={
        "name": "Bad Phone",
        "email": "bad@example.com",
        "phone": "12345",
        "password": PASSWORD,
    })
    assert response.status_code == 422


def test_admin_cannot_self_register(client):
    response = client.post("/auth/register", json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "phone": "8000000001",
        "password": PASSWORD,
        "role": "admin",
    })
    assert response.status_code == 422


def test_login_and_me(client, seeker):
    logged_in = login(client, seeker["email"])
    me = client.get("/auth/me", headers=auth(logged_in))
    assert me.status_code == 200
    assert me.json()["email"] == seeker["email"]
    assert me.json()["last_login"] is not None


def test_login_wrong_password(client, seeker):
    response = client.post("/auth/login", json={"email": seeker["email"], "password": "nope123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_update_profile(client, seeker):
    response = client.put(
        "/auth/profile",
        json={"skills": ["Tally", "GST"], "current_location": "Ranjit Avenue"},
        headers=auth(seeker),
    )
    assert response.status_code == 200
    assert response.json()["skills"] == ["Tally", "GST"]


def test_change_password(client, seeker):
    response = client.put(
        "/auth/password",
        json={"current_password": PASSWORD, "new_password": "newsecret1"},
        headers=auth(seeker),
    )
    assert response.status_code == 200
    assert login(client, seeker["email"], "newsecret1")["id"] == seeker["id"]


def test_change_password_checks_current(client, seeker):
    response = client.put(
        "/auth/password",
        json={"current_password": "wrong-one", "new_password": "newsecret1"},
        headers=auth(seeker),
    )
    assert response.status_code == 401


def test_deactivated_user_is_locked_out(client, admin, seeker):
    client.put(f"/admin/users/{seeker['id']}", json={"is_active": False}, headers=auth(admin))

    assert client.get("/auth/me", headers=auth(seeker)).status_code == 401
    response = client.post("/auth/login", json={"email": seeker["email"], "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is deactivated"
