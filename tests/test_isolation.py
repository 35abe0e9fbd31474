"""
Cross-tenant isolation and security tests.

Verifies that:
- Users cannot access resources from other restaurants
- Role enforcement works correctly within a restaurant
- Invitation tokens cannot be reused or stolen
- Token security is enforced (bearer header, cookie, logout)
- Removed members lose access immediately
"""

import uuid

import pytest

from helpers import (
    API,
    add_staff,
    auth,
    create_category,
    create_item,
    create_table,
    invite,
    owner_with_org,
    place_order,
    register,
    unique_email,
)


# ---------------------------------------------------------------------------
# 1. Basic Cross-Org Isolation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cannot_access_other_org(client):
    token_a, _ = await owner_with_org(client, "iso1a")
    _, slug_b = await owner_with_org(client, "iso1b")

    resp = await client.get(f"{API}/organizations/{slug_b}", headers=auth(token_a))
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_A_MEMBER"


@pytest.mark.asyncio
async def test_cannot_list_other_org_members(client):
    token_a, _ = await owner_with_org(client, "iso2a")
    _, slug_b = await owner_with_org(client, "iso2b")

    resp = await client.get(f"{API}/organizations/{slug_b}/members", headers=auth(token_a))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_unknown_org_returns_404(client):
    token, _ = await owner_with_org(client, "iso3")
    resp = await client.get(f"{API}/organizations/no-such-place", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "ORG_NOT_FOUND"


@pytest.mark.asyncio
async def test_unauthenticated_request_rejected(client):
    resp = await client.get(f"{API}/organizations/any-org")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "MISSING_TOKEN"


# ---------------------------------------------------------------------------
# 2. Resource Isolation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_foreign_menu_item_looks_missing(client):
    token_a, slug_a = await owner_with_org(client, "res1a")
    token_b, slug_b = await owner_with_org(client, "res1b")
    category_b = await create_category(client, token_b, slug_b)
    item_b = await create_item(client, token_b, slug_b, category_b["id"])

    # Owner A addresses B's item through A's own restaurant
    resp = await client.put(
        f"{API}/organizations/{slug_a}/menu-items/{item_b['id']}",
        json={"name": "Hacked"},
        headers=auth(token_a),
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_cannot_order_foreign_items_through_own_table(client):
    token_a, slug_a = await owner_with_org(client, "res2a")
    token_b, slug_b = await owner_with_org(client, "res2b")
    table_a = await create_table(client, token_a, slug_a)
    category_b = await create_category(client, token_b, slug_b)
    item_b = await create_item(client, token_b, slug_b, category_b["id"])

    resp = await place_order(client, table_a["qr_token"], [(item_b["id"], 1)])
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "ITEMS_UNAVAILABLE"


@pytest.mark.asyncio
async def test_orders_listing_is_scoped(client):
    token_a, slug_a = await owner_with_org(client, "res3a")
    token_b, slug_b = await owner_with_org(client, "res3b")
    table_b = await create_table(client, token_b, slug_b)
    category_b = await create_category(client, token_b, slug_b)
    item_b = await create_item(client, token_b, slug_b, category_b["id"])
    assert (await place_order(client, table_b["qr_token"], [(item_b["id"], 1)])).status_code == 201

    resp = await client.get(f"{API}/organizations/{slug_a}/orders", headers=auth(token_a))
    assert resp.status_code == 200
    assert resp.json()["orders"] == []
    assert resp.json()["metrics"]["total"] == 0


# ---------------------------------------------------------------------------
# 3. Role Enforcement Within Own Org
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_waiter_cannot_edit_menu(client):
    owner_token, slug = await owner_with_org(client, "role1", plan="PREMIUM")
    waiter_token = await add_staff(client, owner_token, slug, "waiter")

    resp = await client.post(
        f"{API}/organizations/{slug}/categories", json={"name": "Drinks"}, headers=auth(waiter_token)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_waiter_can_view_menu_and_tables(client):
    owner_token, slug = await owner_with_org(client, "role2", plan="PREMIUM")
    waiter_token = await add_staff(client, owner_token, slug, "waiter")

    resp = await client.get(f"{API}/organizations/{slug}/categories", headers=auth(waiter_token))
    assert resp.status_code == 200
    resp = await client.get(f"{API}/organizations/{slug}/tables", headers=auth(waiter_token))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_kitchen_cannot_see_tables_or_take_payments(client):
    owner_token, slug = await owner_with_org(client, "role3", plan="PREMIUM")
    kitchen_token = await add_staff(client, owner_token, slug, "kitchen")

    resp = await client.get(f"{API}/organizations/{slug}/tables", headers=auth(kitchen_token))
    assert resp.status_code == 403
    resp = await client.post(
        f"{API}/organizations/{slug}/orders/{uuid.uuid4()}/pay", json={}, headers=auth(kitchen_token)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_waiter_cannot_invite_others(client):
    owner_token, slug = await owner_with_org(client, "role4", plan="PREMIUM")
    waiter_token = await add_staff(client, owner_token, slug, "waiter")

    resp = await invite(client, waiter_token, slug, unique_email("role4x"))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_manager_cannot_change_plan_or_profile(client):
    owner_token, slug = await owner_with_org(client, "role5", plan="PREMIUM")
    manager_token = await add_staff(client, owner_token, slug, "manager")

    resp = await client.patch(
        f"{API}/organizations/{slug}/plan", json={"plan": "FREE"}, headers=auth(manager_token)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_OWNER"

    resp = await client.get(f"{API}/organizations/{slug}/profile", headers=auth(manager_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_manager_can_invite(client):
    owner_token, slug = await owner_with_org(client, "role6", plan="PREMIUM")
    manager_token = await add_staff(client, owner_token, slug, "manager")

    resp = await invite(client, manager_token, slug, unique_email("role6x"), "cashier")
    assert resp.status_code == 201


# ---------------------------------------------------------------------------
# 4. Invitation Isolation & Token Security
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_invitation_token_cannot_be_reused(client):
    owner_token, slug = await owner_with_org(client, "inv1", plan="PREMIUM")
    email = unique_email("inv1m")
    member_token = await register(client, email)
    token = (await invite(client, owner_token, slug, email)).json()["token"]

    first = await client.post(f"{API}/auth/invitations/{token}/accept", headers=auth(member_token))
    assert first.status_code == 200
    second = await client.post(f"{API}/auth/invitations/{token}/accept", headers=auth(member_token))
    assert second.status_code == 410
    assert second.json()["detail"]["code"] == "INVITE_USED"


@pytest.mark.asyncio
async def test_fake_invitation_token_rejected(client):
    token = await register(client, unique_email("inv2"))
    resp = await client.post(f"{API}/auth/invitations/not-a-token/accept", headers=auth(token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_cannot_revoke_other_org_invitation(client):
    owner_a, slug_a = await owner_with_org(client, "inv3a", plan="PREMIUM")
    owner_b, slug_b = await owner_with_org(client, "inv3b")
    invitation_id = (await invite(client, owner_a, slug_a, unique_email("inv3m"))).json()["id"]

    # B's own restaurant does not see A's invitation
    resp = await client.delete(
        f"{API}/organizations/{slug_b}/invitations/{invitation_id}", headers=auth(owner_b)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "INVITE_NOT_FOUND"

    resp = await client.delete(
        f"{API}/organizations/{slug_a}/invitations/{invitation_id}", headers=auth(owner_b)
    )
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# 5. Token Security
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_malformed_token_rejected(client):
    resp = await client.get(f"{API}/auth/me", headers=auth("not.a.jwt"))
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_missing_bearer_prefix_rejected(client):
    token = await register(client, unique_email("tok1"))
    resp = await client.get(f"{API}/auth/me", headers={"Authorization": token})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_session_cookie_authenticates(client):
    email = unique_email("tok2")
    await register(client, email)
    resp = await client.post(f"{API}/auth/login", json={"email": email, "password": "password123"})
    assert resp.status_code == 200

    cookie = resp.cookies.get("comanda_session")
    assert cookie == resp.json()["access_token"]
    me = await client.get(f"{API}/auth/me", cookies={"comanda_session": cookie})
    assert me.status_code == 200
    assert me.json()["email"] == email


@pytest.mark.asyncio
async def test_logout_revokes_access_token(client):
    token = await register(client, unique_email("tok3"))

    resp = await client.post(f"{API}/auth/logout", json={}, headers=auth(token))
    assert resp.status_code == 200

    resp = await client.get(f"{API}/auth/me", headers=auth(token))
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "TOKEN_REVOKED"


# ---------------------------------------------------------------------------
# 6. Member Removal Loses Access
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_removed_member_loses_access(client):
    owner_token, slug = await owner_with_org(client, "rm1", plan="PREMIUM")
    waiter_token = await add_staff(client, owner_token, slug, "waiter")

    members = (await client.get(f"{API}/organizations/{slug}/members", headers=auth(owner_token))).json()
    waiter = next(m for m in members["members"] if m["role"] == "waiter")

    resp = await client.delete(
        f"{API}/organizations/{slug}/members/{waiter['user_id']}", headers=auth(owner_token)
    )
    assert resp.status_code == 200

    resp = await client.get(f"{API}/organizations/{slug}", headers=auth(waiter_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_owner_cannot_be_removed_or_demoted(client):
    owner_token, slug = await owner_with_org(client, "rm2", plan="PREMIUM")
    manager_token = await add_staff(client, owner_token, slug, "manager")
    me = (await client.get(f"{API}/auth/me", headers=auth(owner_token))).json()

    resp = await client.delete(
        f"{API}/organizations/{slug}/members/{me['id']}", headers=auth(manager_token)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "CANNOT_REMOVE_OWNER"

    resp = await client.patch(
        f"{API}/organizations/{slug}/members/{me['id']}",
        json={"role": "waiter"},
        headers=auth(manager_token),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "CANNOT_CHANGE_OWNER"


@pytest.mark.asyncio
async def test_manager_cannot_change_own_role(client):
    owner_token, slug = await owner_with_org(client, "rm3", plan="PREMIUM")
    manager_token = await add_staff(client, owner_token, slug, "manager")
    me = (await client.get(f"{API}/auth/me", headers=auth(manager_token))).json()

    resp = await client.patch(
        f"{API}/organizations/{slug}/members/{me['id']}",
        json={"role": "cashier"},
        headers=auth(manager_token),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "CANNOT_CHANGE_SELF"
