from decimal import Decimal

import pytest

from food_storefront.crud import cart as cart_crud
from food_storefront.exceptions import Forbidden, InvalidInput, NotFound, ProductUnavailable


async def test_add_item_creates_line(db, world):
    line = await cart_crud.add_item(db, world.alice, world.a, 2)

    assert line.product_id == world.a
    assert line.quantity == 2
    assert line.product.name == "Margherita"


async def test_add_same_product_increments_quantity(db, world):
    first = await cart_crud.add_item(db, world.alice, world.a, 2)
    second = await cart_crud.add_item(db, world.alice, world.a, 3)

    assert second.id == first.id
    assert second.quantity == 5
    assert len(await cart_crud.get_cart(db, world.alice.id)) == 1


async def test_add_item_rejects_non_positive_quantity(db, world):
    with pytest.raises(InvalidInput):
        await cart_crud.add_item(db, world.alice, world.a, 0)
    assert await cart_crud.get_cart(db, world.alice.id) == []


async def test_add_unknown_product(db, world):
    with pytest.raises(NotFound):
        await cart_crud.add_item(db, world.alice, 9999)


@pytest.mark.parametrize("product", ["d", "e"])
async def test_add_unavailable_or_unapproved_product(db, world, product):
    with pytest.raises(ProductUnavailable):
        await cart_crud.add_item(db, world.alice, getattr(world, product))


async def test_only_customers_have_carts(db, world):
    with pytest.raises(Forbidden):
        await cart_crud.add_item(db, world.owner_x, world.a)


async def test_cart_may_span_restaurants(db, world):
    await cart_crud.add_item(db, world.alice, world.a)
    await cart_crud.add_item(db, world.alice, world.c)

    assert await cart_crud.restaurants_represented(db, world.alice.id) == {world.x, world.y}


async def test_subtotal(db, world):
    await cart_crud.add_item(db, world.alice, world.a, 2)
    await cart_crud.add_item(db, world.alice, world.b, 1)

    assert await cart_crud.compute_subtotal(db, world.alice.id) == Decimal("25.00")
    assert await cart_crud.compute_subtotal(db, world.bob.id) == Decimal("0.00")


async def test_set_quantity(db, world):
    line = await cart_crud.add_item(db, world.alice, world.a, 1)

    updated = await cart_crud.set_quantity(db, world.alice, line.id, 4)
    assert updated.quantity == 4


async def test_set_quantity_below_one_is_ignored(db, world):
    line = await cart_crud.add_item(db, world.alice, world.a, 3)

    same = await cart_crud.set_quantity(db, world.alice, line.id, 0)
    assert same.quantity == 3


async def test_cannot_touch_foreign_line(db, world):
    line = await cart_crud.add_item(db, world.alice, world.a, 1)

    with pytest.raises(NotFound):
        await cart_crud.set_quantity(db, world.bob, line.id, 5)

    await cart_crud.remove_item(db, world.bob, line.id)
    assert len(await cart_crud.get_cart(db, world.alice.id)) == 1


async def test_remove_item_is_idempotent(db, world):
    line = await cart_crud.add_item(db, world.alice, world.a, 1)

    await cart_crud.remove_item(db, world.alice, line.id)
    await cart_crud.remove_item(db, world.alice, line.id)

    assert await cart_crud.get_cart(db, world.alice.id) == []


async def test_clear_cart(db, world):
    await cart_crud.add_item(db, world.alice, world.a)
    await cart_crud.add_item(db, world.alice, world.c)
    await cart_crud.add_item(db, world.bob, world.b)

    await cart_crud.clear_cart(db, world.alice)
    await cart_crud.clear_cart(db, world.alice)

    assert await cart_crud.get_cart(db, world.alice.id) == []
    assert len(await cart_crud.get_cart(db, world.bob.id)) == 1
