"""
Plan catalog, limit enforcement and expiry tests.
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from comanda.core.plans import (
    PlanTier,
    add_months,
    check_numeric_limit,
    enforce_feature,
    is_plan_expired,
    normalize_plan,
    plan_allows,
)
from comanda.models.organization import Organization
from helpers import (
    API,
    auth,
    create_category,
    create_item,
    create_org,
    create_table,
    owner_with_org,
    register,
    unique_email,
    unique_slug,
)


# ---------------------------------------------------------------------------
# 1. Catalog helpers
# ---------------------------------------------------------------------------

def test_unknown_plan_falls_back_to_free():
    assert normalize_plan(None) == PlanTier.FREE
    assert normalize_plan("ENTERPRISE") == PlanTier.FREE
    assert normalize_plan("PREMIUM") == PlanTier.PREMIUM


def test_numeric_limits():
    assert check_numeric_limit("FREE", "tables", 2).allowed is True
    assert check_numeric_limit("FREE", "tables", 3) == (False, 3)
    assert check_numeric_limit("PREMIUM", "tables", 10_000) == (True, None)
    assert check_numeric_limit("PREMIUM", "staff_seats", 10).allowed is False


def test_feature_flags():
    assert plan_allows(PlanTier.PREMIUM, "allow_pos") is True
    assert plan_allows(PlanTier.FREE, "allow_pos") is False

    with pytest.raises(HTTPException) as exc_info:
        enforce_feature(PlanTier.FREE, "allow_reports_advanced", "nope")
    assert exc_info.value.status_code == 402
    assert exc_info.value.detail["feature"] == "allow_reports_advanced"


def test_add_months_clamps_day():
    assert add_months(datetime(2025, 1, 31, tzinfo=UTC), 1) == datetime(2025, 2, 28, tzinfo=UTC)
    assert add_months(datetime(2024, 1, 31, tzinfo=UTC), 1) == datetime(2024, 2, 29, tzinfo=UTC)
    assert add_months(datetime(2025, 11, 15, tzinfo=UTC), 3) == datetime(2026, 2, 15, tzinfo=UTC)


def test_plan_expiry_only_applies_to_premium():
    past = datetime.now(UTC) - timedelta(days=1)
    assert is_plan_expired("PREMIUM", past) is True
    assert is_plan_expired("PREMIUM", None) is False
    assert is_plan_expired("FREE", past) is False


@pytest.mark.asyncio
async def test_list_plans_is_public(client):
    resp = await client.get(f"{API}/plans")
    assert resp.status_code == 200
    plans = {p["id"]: p for p in resp.json()}
    assert set(plans) == {"FREE", "PREMIUM"}
    assert plans["FREE"]["limits"]["tables"] == 3
    assert plans["PREMIUM"]["limits"]["menu_items"] is None
    assert plans["PREMIUM"]["limits"]["allow_pos"] is True


# ---------------------------------------------------------------------------
# 2. Free plan limits
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_free_plan_category_limit(client):
    token, slug = await owner_with_org(client, "lim1")
    for name in ("Starters", "Mains", "Desserts"):
        await create_category(client, token, slug, name)

    resp = await client.post(
        f"{API}/organizations/{slug}/categories", json={"name": "Drinks"}, headers=auth(token)
    )
    assert resp.status_code == 402
    detail = resp.json()["detail"]
    assert detail["code"] == "PLAN_LIMIT_REACHED"
    assert detail["resource"] == "categories"
    assert detail["limit"] == 3


@pytest.mark.asyncio
async def test_free_plan_table_limit(client):
    token, slug = await owner_with_org(client, "lim2")
    for number in (1, 2, 3):
        await create_table(client, token, slug, number)

    resp = await client.post(
        f"{API}/organizations/{slug}/tables", json={"number": 4}, headers=auth(token)
    )
    assert resp.status_code == 402
    assert resp.json()["detail"]["resource"] == "tables"


@pytest.mark.asyncio
async def test_free_plan_menu_item_limit(client):
    token, slug = await owner_with_org(client, "lim3")
    category = await create_category(client, token, slug)
    for i in range(10):
        await create_item(client, token, slug, category["id"], name=f"Dish {i}")

    resp = await client.post(
        f"{API}/organizations/{slug}/menu-items",
        json={"category_id": category["id"], "name": "One too many", "price_cents": 100},
        headers=auth(token),
    )
    assert resp.status_code == 402
    assert resp.json()["detail"]["resource"] == "menu_items"


@pytest.mark.asyncio
async def test_free_owner_limited_to_one_restaurant(client):
    token, _ = await owner_with_org(client, "lim4")

    resp = await client.post(
        f"{API}/organizations", json={"name": "Second", "slug": unique_slug("lim4b")}, headers=auth(token)
    )
    assert resp.status_code == 402
    assert resp.json()["detail"]["resource"] == "restaurants"


@pytest.mark.asyncio
async def test_premium_owner_can_open_more_restaurants(client):
    token, _ = await owner_with_org(client, "lim5", plan="PREMIUM")
    second = await create_org(client, token, unique_slug("lim5b"), name="Second")
    assert second["plan"] == "FREE"


@pytest.mark.asyncio
async def test_premium_lifts_category_limit(client):
    token, slug = await owner_with_org(client, "lim6", plan="PREMIUM")
    for i in range(5):
        await create_category(client, token, slug, f"Section {i}")

    resp = await client.get(f"{API}/organizations/{slug}/categories", headers=auth(token))
    assert len(resp.json()["categories"]) == 5


# ---------------------------------------------------------------------------
# 3. Plan changes & expiry
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_owner_switches_plan(client):
    token, slug = await owner_with_org(client, "pl1")

    resp = await client.patch(
        f"{API}/organizations/{slug}/plan", json={"plan": "PREMIUM"}, headers=auth(token)
    )
    assert resp.status_code == 200
    assert resp.json()["plan"] == "PREMIUM"
    assert resp.json()["plan_updated_at"] is not None


@pytest.mark.asyncio
async def test_unknown_plan_rejected(client):
    token, slug = await owner_with_org(client, "pl2")
    resp = await client.patch(
        f"{API}/organizations/{slug}/plan", json={"plan": "GOLD"}, headers=auth(token)
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_expired_premium_is_downgraded_on_access(client, session_factory):
    token, slug = await owner_with_org(client, "pl3", plan="PREMIUM")

    async with session_factory() as session:
        org = (await session.execute(select(Organization).where(Organization.slug == slug))).scalar_one()
        org.plan_expires_at = datetime.now(UTC) - timedelta(hours=1)
        await session.commit()

    resp = await client.get(f"{API}/organizations/{slug}", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["plan"] == "FREE"
    assert resp.json()["plan_expires_at"] is None

    resp = await client.get(f"{API}/organizations/{slug}/branding", headers=auth(token))
    assert resp.status_code == 200
    resp = await client.put(
        f"{API}/organizations/{slug}/branding",
        json={"brand_color": "#112233", "accent_color": "#445566"},
        headers=auth(token),
    )
    assert resp.status_code == 402


# ---------------------------------------------------------------------------
# 4. Admin premium trials
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_grants_premium_trial(client):
    admin_token = await register(client, "admin@comanda.io")
    owner_email = unique_email("trial1")
    owner_token = await register(client, owner_email)
    slug = unique_slug("trial1")
    await create_org(client, owner_token, slug)

    resp = await client.post(
        f"{API}/admin/premium-trials",
        json={"email": owner_email, "months": 2},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [o["slug"] for o in body["organizations"]] == [slug]
    assert body["organizations"][0]["plan"] == "PREMIUM"
    assert body["organizations"][0]["plan_expires_at"] is not None


@pytest.mark.asyncio
async def test_non_admin_cannot_grant_trials(client):
    token, _ = await owner_with_org(client, "trial2")
    resp = await client.post(
        f"{API}/admin/premium-trials", json={"email": "someone@example.com"}, headers=auth(token)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_ADMIN"


@pytest.mark.asyncio
async def test_trial_for_unknown_or_orgless_user(client):
    admin_token = await register(client, "admin@comanda.io")

    resp = await client.post(
        f"{API}/admin/premium-trials", json={"email": unique_email("ghost")}, headers=auth(admin_token)
    )
    assert resp.status_code == 404

    orgless = unique_email("orgless")
    await register(client, orgless)
    resp = await client.post(
        f"{API}/admin/premium-trials", json={"email": orgless}, headers=auth(admin_token)
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "NO_ORGANIZATIONS"
