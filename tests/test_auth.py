"""
Authentication flow tests: register, login, refresh rotation, logout.
"""

import pytest

from helpers import API, PASSWORD, auth, register, unique_email


@pytest.mark.asyncio
async def test_register_returns_tokens_and_cookie(client):
    email = unique_email("reg1")
    resp = await client.post(f"{API}/auth/register", json={
        "email": email,
        "password": PASSWORD,
        "display_name": "Rosa",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert resp.cookies.get("comanda_session") == body["access_token"]
    client.cookies.clear()

    me = await client.get(f"{API}/auth/me", headers=auth(body["access_token"]))
    assert me.json()["email"] == email
    assert me.json()["is_admin"] is False


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client):
    email = unique_email("reg2")
    await register(client, email)
    resp = await client.post(f"{API}/auth/register", json={
        "email": email.upper(),
        "password": PASSWORD,
        "display_name": "Someone Else",
    })
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_weak_password_rejected(client):
    resp = await client.post(f"{API}/auth/register", json={
        "email": unique_email("reg3"),
        "password": "onlyletters",
        "display_name": "Weak",
    })
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_wrong_password(client):
    email = unique_email("log1")
    await register(client, email)
    resp = await client.post(f"{API}/auth/login", json={"email": email, "password": "wrongpass1"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_refresh_token_rotates(client):
    email = unique_email("ref1")
    login = await client.post(f"{API}/auth/register", json={
        "email": email, "password": PASSWORD, "display_name": "Rotator",
    })
    client.cookies.clear()
    old_refresh = login.json()["refresh_token"]

    resp = await client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert resp.status_code == 200
    assert resp.json()["refresh_token"] != old_refresh

    reused = await client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert reused.status_code == 401
    assert reused.json()["detail"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_access_token_is_not_a_refresh_token(client):
    token = await register(client, unique_email("ref2"))
    resp = await client.post(f"{API}/auth/refresh", json={"refresh_token": token})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_drops_refresh_token(client):
    tokens = (await client.post(f"{API}/auth/register", json={
        "email": unique_email("out1"), "password": PASSWORD, "display_name": "Leaver",
    })).json()
    client.cookies.clear()

    resp = await client.post(
        f"{API}/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=auth(tokens["access_token"]),
    )
    assert resp.status_code == 200

    resp = await client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_flag_on_me(client):
    token = await register(client, "admin@comanda.io")
    me = await client.get(f"{API}/auth/me", headers=auth(token))
    assert me.json()["is_admin"] is True


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
