"""
Shared request helpers for the API tests.

Every helper authenticates with an explicit Bearer header; the session
cookie set by register/login is dropped so tests never depend on it by
accident.
"""

import uuid

import httpx

API = "/api/v1"
PASSWORD = "password123"


def unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def unique_slug(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:6]}"


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(
    client: httpx.AsyncClient, email: str, display_name: str = "Test User"
) -> str:
    resp = await client.post(f"{API}/auth/register", json={
        "email": email,
        "password": PASSWORD,
        "display_name": display_name,
    })
    assert resp.status_code == 201, f"Register failed: {resp.text}"
    client.cookies.clear()
    return resp.json()["access_token"]


async def login(client: httpx.AsyncClient, email: str) -> str:
    resp = await client.post(f"{API}/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    client.cookies.clear()
    return resp.json()["access_token"]


async def create_org(
    client: httpx.AsyncClient, token: str, slug: str, name: str = "Test Restaurant"
) -> dict:
    resp = await client.post(
        f"{API}/organizations",
        json={"name": name, "slug": slug},
        headers=auth(token),
    )
    assert resp.status_code == 201, f"Create org failed: {resp.text}"
    return resp.json()


async def set_plan(client: httpx.AsyncClient, token: str, slug: str, plan: str) -> dict:
    resp = await client.patch(
        f"{API}/organizations/{slug}/plan", json={"plan": plan}, headers=auth(token)
    )
    assert resp.status_code == 200, f"Plan change failed: {resp.text}"
    return resp.json()


async def owner_with_org(
    client: httpx.AsyncClient, prefix: str, plan: str = "FREE"
) -> tuple[str, str]:
    """Register an owner and create a restaurant. Returns (token, slug)."""
    token = await register(client, unique_email(prefix), display_name=f"{prefix} owner")
    slug = unique_slug(prefix)
    await create_org(client, token, slug)
    if plan != "FREE":
        await set_plan(client, token, slug, plan)
    return token, slug


async def invite(
    client: httpx.AsyncClient, token: str, slug: str, email: str, role: str = "waiter"
) -> httpx.Response:
    return await client.post(
        f"{API}/organizations/{slug}/invite",
        json={"email": email, "role": role},
        headers=auth(token),
    )


async def add_staff(
    client: httpx.AsyncClient, owner_token: str, slug: str, role: str, prefix: str = "staff"
) -> str:
    """Invite a fresh user with ``role`` and accept. Returns the staff token."""
    email = unique_email(prefix)
    staff_token = await register(client, email)
    resp = await invite(client, owner_token, slug, email, role)
    assert resp.status_code == 201, f"Invite failed: {resp.text}"
    accept = await client.post(
        f"{API}/auth/invitations/{resp.json()['token']}/accept", headers=auth(staff_token)
    )
    assert accept.status_code == 200, f"Accept failed: {accept.text}"
    return staff_token


async def create_category(
    client: httpx.AsyncClient, token: str, slug: str, name: str = "Mains"
) -> dict:
    resp = await client.post(
        f"{API}/organizations/{slug}/categories", json={"name": name}, headers=auth(token)
    )
    assert resp.status_code == 201, f"Create category failed: {resp.text}"
    return resp.json()


async def create_item(
    client: httpx.AsyncClient,
    token: str,
    slug: str,
    category_id: str,
    name: str = "Lomo Saltado",
    price_cents: int = 2500,
) -> dict:
    resp = await client.post(
        f"{API}/organizations/{slug}/menu-items",
        json={"category_id": category_id, "name": name, "price_cents": price_cents},
        headers=auth(token),
    )
    assert resp.status_code == 201, f"Create item failed: {resp.text}"
    return resp.json()


async def create_table(client: httpx.AsyncClient, token: str, slug: str, number: int = 1) -> dict:
    resp = await client.post(
        f"{API}/organizations/{slug}/tables", json={"number": number}, headers=auth(token)
    )
    assert resp.status_code == 201, f"Create table failed: {resp.text}"
    return resp.json()


async def place_order(
    client: httpx.AsyncClient, qr_token: str, items: list[tuple[str, int]]
) -> httpx.Response:
    return await client.post(
        f"{API}/table/{qr_token}/orders",
        json={"items": [{"menu_item_id": item_id, "quantity": qty} for item_id, qty in items]},
    )


async def advance(
    client: httpx.AsyncClient, token: str, slug: str, order_id: str, *statuses: str
) -> dict:
    """Walk an order through ``statuses`` in order."""
    body: dict = {}
    for order_status in statuses:
        resp = await client.patch(
            f"{API}/organizations/{slug}/orders/{order_id}",
            json={"status": order_status},
            headers=auth(token),
        )
        assert resp.status_code == 200, f"Status {order_status} failed: {resp.text}"
        body = resp.json()
    return body
