from conftest import auth


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_caller_must_be_identified(client, world):
    assert (await client.get("/cart/")).status_code == 401
    assert (await client.get("/cart/", headers={"X-User-Id": "9999"})).status_code == 401


async def test_checkout_flow(client, world):
    customer = auth(world.alice)

    response = await client.post("/cart/items", json={"product_id": world.a, "quantity": 2}, headers=customer)
    assert response.status_code == 201
    await client.post("/cart/items", json={"product_id": world.b}, headers=customer)

    cart = (await client.get("/cart/", headers=customer)).json()
    assert cart["restaurant_ids"] == [world.x]
    assert cart["subtotal"] == "25.00"
    assert cart["total"] == "30.00"

    body = {"delivery_address": "Main st 1", "contact_number": "555-0100", "payment_method": "card"}
    headers = {**customer, "Idempotency-Key": "checkout-1"}
    created = await client.post("/orders/", json=body, headers=headers)
    assert created.status_code == 201
    order = created.json()
    assert order["status"] == "pending"
    assert order["total_price"] == "30.00"
    assert order["count_items"] == 3

    replay = await client.post("/orders/", json=body, headers=headers)
    assert replay.json()["id"] == order["id"]

    assert (await client.get("/cart/", headers=customer)).json()["items"] == []

    listing = (await client.get("/owner/orders", headers=auth(world.owner_x))).json()
    assert listing["counts"]["pending"] == 1
    assert listing["orders"][0]["allowed_transitions"] == ["cancelled", "confirmed"]

    confirmed = await client.post(
        f"/owner/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth(world.owner_x)
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    seen = (await client.get(f"/orders/{order['id']}", headers=customer)).json()
    assert seen["status"] == "confirmed"
    assert seen["allowed_transitions"] == []


async def test_illegal_transition_response(client, world):
    customer = auth(world.alice)
    await client.post("/cart/items", json={"product_id": world.a}, headers=customer)
    order = (
        await client.post("/orders/", json={"delivery_address": "A", "contact_number": "1"}, headers=customer)
    ).json()

    response = await client.post(
        f"/admin/orders/{order['id']}/status", json={"status": "delivered"}, headers=auth(world.admin)
    )
    assert response.status_code == 409
    assert response.json()["error"] == "illegal_transition"

    forbidden = await client.post(
        f"/owner/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth(world.owner_y)
    )
    assert forbidden.status_code == 403


async def test_multi_restaurant_cart_response(client, world):
    customer = auth(world.alice)
    await client.post("/cart/items", json={"product_id": world.a}, headers=customer)
    await client.post("/cart/items", json={"product_id": world.c}, headers=customer)

    response = await client.post(
        "/orders/", json={"delivery_address": "A", "contact_number": "1"}, headers=customer
    )
    assert response.status_code == 409
    assert response.json()["error"] == "multi_restaurant_cart"
    assert response.json()["restaurant_ids"] == sorted([world.x, world.y])


async def test_empty_cart_response(client, world):
    response = await client.post(
        "/orders/", json={"delivery_address": "A", "contact_number": "1"}, headers=auth(world.alice)
    )
    assert response.status_code == 409
    assert response.json()["error"] == "empty_cart"


async def test_foreign_order_is_not_found(client, world):
    await client.post("/cart/items", json={"product_id": world.a}, headers=auth(world.alice))
    order = (
        await client.post(
            "/orders/", json={"delivery_address": "A", "contact_number": "1"}, headers=auth(world.alice)
        )
    ).json()

    response = await client.get(f"/orders/{order['id']}", headers=auth(world.bob))
    assert response.status_code == 404


async def test_catalog_menu(client, world):
    restaurants = (await client.get("/restaurants/")).json()
    assert {r["id"] for r in restaurants} == {world.x, world.y}

    menu = (await client.get(f"/restaurants/{world.x}/menu", params={"category": "drinks"})).json()
    assert menu["categories"] == ["drinks", "pizza"]
    assert [p["id"] for p in menu["products"]] == [world.b]

    assert (await client.get(f"/restaurants/{world.z}/menu")).status_code == 404


async def test_admin_endpoints_require_admin(client, world):
    assert (await client.get("/admin/stats", headers=auth(world.alice))).status_code == 403

    stats = (await client.get("/admin/stats", headers=auth(world.admin))).json()
    assert stats["pending_restaurants"] == 1

    approved = await client.post(f"/admin/restaurants/{world.z}/approve", headers=auth(world.admin))
    assert approved.json()["approved"] is True
    assert approved.json()["owner_email"] == "z@example.com"


async def test_profile(client, world):
    response = await client.patch("/users/me", json={"full_name": "Bobby"}, headers=auth(world.bob))
    assert response.status_code == 200
    assert response.json()["full_name"] == "Bobby"

    me = (await client.get("/users/me", headers=auth(world.bob))).json()
    assert me["role"] == "customer"


async def test_metrics_exposed(client, world):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "storefront_checkout_total" in response.text


async def test_deleting_missing_restaurant_uses_error_shape(client, world):
    assert (await client.delete(f"/admin/restaurants/{world.y}", headers=auth(world.admin))).status_code == 204

    response = await client.delete(f"/admin/restaurants/{world.y}", headers=auth(world.admin))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_unknown_status_uses_invalid_input_shape(client, world):
    await client.post("/cart/items", json={"product_id": world.a}, headers=auth(world.alice))
    order = (
        await client.post(
            "/orders/", json={"delivery_address": "A", "contact_number": "1"}, headers=auth(world.alice)
        )
    ).json()

    response = await client.post(
        f"/owner/orders/{order['id']}/status", json={"status": "shipped"}, headers=auth(world.owner_x)
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["errors"][0]["loc"][-1] == "status"


async def test_malformed_cart_body_uses_invalid_input_shape(client, world):
    response = await client.post("/cart/items", json={"quantity": 0}, headers=auth(world.alice))
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_input"
