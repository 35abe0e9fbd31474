"""
Restaurant settings tests: organization details, profile, opening hours,
branding, menu management, tables and the public menu page.
"""

import pytest

from helpers import (
    API,
    add_staff,
    auth,
    create_category,
    create_item,
    create_org,
    create_table,
    owner_with_org,
    place_order,
    register,
    unique_email,
    unique_slug,
)

WEEK = [
    {"day_of_week": day, "is_open": True, "open_time": "12:00", "close_time": "22:00"}
    for day in range(6)
] + [{"day_of_week": 6, "is_open": False}]


# ---------------------------------------------------------------------------
# 1. Organization
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_slug_derived_from_name(client):
    token = await register(client, unique_email("org1"))
    resp = await client.post(
        f"{API}/organizations", json={"name": "La Picantería Zoe"}, headers=auth(token)
    )
    assert resp.status_code == 201
    assert resp.json()["slug"].startswith("la-picanteria-zoe")
    assert resp.json()["plan"] == "FREE"


@pytest.mark.asyncio
async def test_duplicate_slug_rejected(client):
    _, slug = await owner_with_org(client, "org2")
    other = await register(client, unique_email("org2b"))

    resp = await client.post(
        f"{API}/organizations", json={"name": "Copycat", "slug": slug}, headers=auth(other)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "SLUG_TAKEN"


@pytest.mark.asyncio
async def test_invalid_slug_rejected(client):
    token = await register(client, unique_email("org3"))
    resp = await client.post(
        f"{API}/organizations", json={"name": "Bad", "slug": "-Bad Slug-"}, headers=auth(token)
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_owner_renames_organization(client):
    token, slug = await owner_with_org(client, "org4")
    new_slug = unique_slug("org4new")

    resp = await client.patch(
        f"{API}/organizations/{slug}", json={"name": "Renamed", "slug": new_slug}, headers=auth(token)
    )
    assert resp.status_code == 200
    assert resp.json()["slug"] == new_slug

    assert (await client.get(f"{API}/organizations/{new_slug}", headers=auth(token))).status_code == 200
    assert (await client.get(f"{API}/organizations/{slug}", headers=auth(token))).status_code == 404


@pytest.mark.asyncio
async def test_manager_cannot_change_settings(client):
    token, slug = await owner_with_org(client, "org5", plan="PREMIUM")
    manager_token = await add_staff(client, token, slug, "manager")

    resp = await client.patch(
        f"{API}/organizations/{slug}", json={"name": "Mine now"}, headers=auth(manager_token)
    )
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# 2. Profile & opening hours
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_profile_update_and_hours(client):
    token, slug = await owner_with_org(client, "prof1")

    resp = await client.patch(
        f"{API}/organizations/{slug}/profile",
        json={
            "phone": "+51 999 888 777",
            "address": "Av. Larco 123, Miraflores",
            "description": "  ",
            "opening_hours": WEEK,
        },
        headers=auth(token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["phone"] == "+51 999 888 777"
    assert body["description"] is None
    assert len(body["opening_hours"]) == 7
    assert body["opening_hours"][6] == {
        "day_of_week": 6, "is_open": False, "open_time": None, "close_time": None,
    }

    # Hours are replaced wholesale; other fields are untouched
    resp = await client.patch(
        f"{API}/organizations/{slug}/profile",
        json={"opening_hours": WEEK[:1]},
        headers=auth(token),
    )
    assert [h["day_of_week"] for h in resp.json()["opening_hours"]] == [0]
    assert resp.json()["address"] == "Av. Larco 123, Miraflores"


@pytest.mark.parametrize(
    "hours",
    [
        [{"day_of_week": 1, "is_open": True}],
        [{"day_of_week": 7, "is_open": False}],
        [{"day_of_week": 1, "is_open": True, "open_time": "25:00", "close_time": "22:00"}],
        [{"day_of_week": 2, "is_open": False}, {"day_of_week": 2, "is_open": False}],
    ],
)
@pytest.mark.asyncio
async def test_invalid_opening_hours(client, hours):
    token, slug = await owner_with_org(client, "prof2")
    resp = await client.patch(
        f"{API}/organizations/{slug}/profile", json={"opening_hours": hours}, headers=auth(token)
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_whatsapp_ordering_rules(client):
    free_token, free_slug = await owner_with_org(client, "wa1")
    resp = await client.patch(
        f"{API}/organizations/{free_slug}/profile",
        json={"whatsapp_number": "+51999888777", "whatsapp_ordering_enabled": True},
        headers=auth(free_token),
    )
    assert resp.status_code == 402

    token, slug = await owner_with_org(client, "wa2", plan="PREMIUM")
    resp = await client.patch(
        f"{API}/organizations/{slug}/profile",
        json={"whatsapp_ordering_enabled": True},
        headers=auth(token),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "WHATSAPP_NUMBER_REQUIRED"

    resp = await client.patch(
        f"{API}/organizations/{slug}/profile",
        json={"whatsapp_number": "+51999888777", "whatsapp_ordering_enabled": True},
        headers=auth(token),
    )
    assert resp.json()["whatsapp_ordering_enabled"] is True

    # Clearing the number switches ordering off
    resp = await client.patch(
        f"{API}/organizations/{slug}/profile", json={"whatsapp_number": ""}, headers=auth(token)
    )
    assert resp.json()["whatsapp_number"] is None
    assert resp.json()["whatsapp_ordering_enabled"] is False


# ---------------------------------------------------------------------------
# 3. Branding
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_branding_defaults_and_free_plan(client):
    token, slug = await owner_with_org(client, "br1")

    resp = await client.get(f"{API}/organizations/{slug}/branding", headers=auth(token))
    assert resp.json() == {
        "brand_color": "#146E37", "accent_color": "#F9FAFB", "logo_url": None, "is_default": True,
    }

    resp = await client.put(
        f"{API}/organizations/{slug}/branding",
        json={"brand_color": "#000000", "accent_color": "#ffffff"},
        headers=auth(token),
    )
    assert resp.status_code == 402
    assert resp.json()["detail"]["feature"] == "allow_branding"


@pytest.mark.asyncio
async def test_premium_branding_round_trip(client):
    token, slug = await owner_with_org(client, "br2", plan="PREMIUM")

    resp = await client.put(
        f"{API}/organizations/{slug}/branding",
        json={"brand_color": "#aa0011", "accent_color": "#ffffff", "logo_url": "https://cdn.example.com/l.png"},
        headers=auth(token),
    )
    assert resp.status_code == 200
    assert resp.json()["brand_color"] == "#AA0011"
    assert resp.json()["is_default"] is False

    resp = await client.delete(f"{API}/organizations/{slug}/branding", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["is_default"] is True
    assert resp.json()["brand_color"] == "#146E37"


@pytest.mark.asyncio
async def test_invalid_colour_rejected(client):
    token, slug = await owner_with_org(client, "br3", plan="PREMIUM")
    resp = await client.put(
        f"{API}/organizations/{slug}/branding",
        json={"brand_color": "red", "accent_color": "#ffffff"},
        headers=auth(token),
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# 4. Menu management
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_category_names_unique_per_restaurant(client):
    token, slug = await owner_with_org(client, "mn1")
    await create_category(client, token, slug, "Drinks")

    resp = await client.post(
        f"{API}/organizations/{slug}/categories", json={"name": "Drinks"}, headers=auth(token)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CATEGORY_EXISTS"


@pytest.mark.asyncio
async def test_category_rename_by_case(client):
    token, slug = await owner_with_org(client, "mn6")
    pizza = await create_category(client, token, slug, "pizza")
    pasta = await create_category(client, token, slug, "Pasta")

    resp = await client.put(
        f"{API}/organizations/{slug}/categories/{pizza['id']}", json={"name": "Pizza"}, headers=auth(token)
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Pizza"

    resp = await client.put(
        f"{API}/organizations/{slug}/categories/{pasta['id']}", json={"name": "PIZZA"}, headers=auth(token)
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CATEGORY_EXISTS"


@pytest.mark.asyncio
async def test_category_with_items_cannot_be_deleted(client):
    token, slug = await owner_with_org(client, "mn2")
    category = await create_category(client, token, slug)
    item = await create_item(client, token, slug, category["id"])

    resp = await client.delete(f"{API}/organizations/{slug}/categories/{category['id']}", headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "CATEGORY_NOT_EMPTY"

    resp = await client.delete(f"{API}/organizations/{slug}/menu-items/{item['id']}", headers=auth(token))
    assert resp.status_code == 200
    resp = await client.delete(f"{API}/organizations/{slug}/categories/{category['id']}", headers=auth(token))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_ordered_item_cannot_be_deleted(client):
    token, slug = await owner_with_org(client, "mn3")
    table = await create_table(client, token, slug)
    category = await create_category(client, token, slug)
    item = await create_item(client, token, slug, category["id"])
    await place_order(client, table["qr_token"], [(item["id"], 1)])

    resp = await client.delete(f"{API}/organizations/{slug}/menu-items/{item['id']}", headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "ITEM_IN_USE"


@pytest.mark.asyncio
async def test_menu_item_filters(client):
    token, slug = await owner_with_org(client, "mn4")
    drinks = await create_category(client, token, slug, "Drinks")
    mains = await create_category(client, token, slug, "Mains")
    await create_item(client, token, slug, drinks["id"], name="Chicha")
    hidden = await create_item(client, token, slug, mains["id"], name="Seco")
    await client.put(
        f"{API}/organizations/{slug}/menu-items/{hidden['id']}", json={"active": False}, headers=auth(token)
    )

    resp = await client.get(
        f"{API}/organizations/{slug}/menu-items", params={"category_id": drinks["id"]}, headers=auth(token)
    )
    assert [i["name"] for i in resp.json()["items"]] == ["Chicha"]

    resp = await client.get(
        f"{API}/organizations/{slug}/menu-items", params={"active_only": True}, headers=auth(token)
    )
    assert [i["name"] for i in resp.json()["items"]] == ["Chicha"]


# ---------------------------------------------------------------------------
# 5. Public menu page
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_public_menu_hidden_on_free_plan(client):
    _, slug = await owner_with_org(client, "pub1")
    resp = await client.get(f"{API}/public/restaurants/{slug}/menu")
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "PUBLIC_MENU_DISABLED"


@pytest.mark.asyncio
async def test_public_menu_on_premium(client):
    token, slug = await owner_with_org(client, "pub2", plan="PREMIUM")
    category = await create_category(client, token, slug, "Mains")
    await create_category(client, token, slug, "Empty")
    await create_item(client, token, slug, category["id"], name="Ají de Gallina")
    await client.patch(
        f"{API}/organizations/{slug}/profile", json={"opening_hours": WEEK}, headers=auth(token)
    )

    resp = await client.get(f"{API}/public/restaurants/{slug}/menu")
    assert resp.status_code == 200
    body = resp.json()
    assert body["restaurant"]["slug"] == slug
    assert len(body["opening_hours"]) == 7
    assert [c["name"] for c in body["categories"]] == ["Mains"]
    assert body["categories"][0]["items"][0]["name"] == "Ají de Gallina"


@pytest.mark.asyncio
async def test_public_menu_unknown_restaurant(client):
    resp = await client.get(f"{API}/public/restaurants/nowhere-{unique_slug('x')}/menu")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_second_restaurant_gets_its_own_menu(client):
    token, _ = await owner_with_org(client, "pub3", plan="PREMIUM")
    second = await create_org(client, token, unique_slug("pub3b"), name="Sucursal")
    resp = await client.get(f"{API}/organizations/{second['slug']}/categories", headers=auth(token))
    assert resp.json()["total"] == 0


# ---------------------------------------------------------------------------
# 6. Tables
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_table_numbers_unique(client):
    token, slug = await owner_with_org(client, "tb1")
    table = await create_table(client, token, slug, 4)
    assert table["qr_url"].endswith(f"/table/{table['qr_token']}")

    resp = await client.post(f"{API}/organizations/{slug}/tables", json={"number": 4}, headers=auth(token))
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "TABLE_EXISTS"


@pytest.mark.asyncio
async def test_qr_regeneration_requires_premium(client):
    token, slug = await owner_with_org(client, "tb2")
    table = await create_table(client, token, slug)
    resp = await client.post(
        f"{API}/organizations/{slug}/tables/{table['id']}/regenerate-qr", headers=auth(token)
    )
    assert resp.status_code == 402


@pytest.mark.asyncio
async def test_floor_plan_layout(client):
    token, slug = await owner_with_org(client, "tb3", plan="PREMIUM")
    waiter_token = await add_staff(client, token, slug, "waiter")
    first = await create_table(client, token, slug, 1)
    second = await create_table(client, token, slug, 2)

    resp = await client.patch(
        f"{API}/organizations/{slug}/tables/layout",
        json={"tables": [
            {"id": first["id"], "position_x": 10, "position_y": 20, "width": 80, "height": 80, "shape": "round"},
            {"id": second["id"], "position_x": 120, "position_y": 20, "width": 160, "height": 80,
             "shape": "rectangle", "rotation": 90},
        ]},
        headers=auth(waiter_token),
    )
    assert resp.status_code == 200
    by_number = {t["number"]: t for t in resp.json()["tables"]}
    assert by_number[1]["shape"] == "round"
    assert by_number[2]["rotation"] == 90


@pytest.mark.asyncio
async def test_layout_rejects_foreign_tables(client):
    token_a, slug_a = await owner_with_org(client, "tb4a")
    token_b, slug_b = await owner_with_org(client, "tb4b")
    foreign = await create_table(client, token_b, slug_b)

    resp = await client.patch(
        f"{API}/organizations/{slug_a}/tables/layout",
        json={"tables": [{"id": foreign["id"], "position_x": 0, "position_y": 0, "width": 50, "height": 50}]},
        headers=auth(token_a),
    )
    assert resp.status_code == 404
