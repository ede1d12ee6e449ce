import itertools

import pytest
from sqlalchemy import update

from food_storefront.crud import order_status
from food_storefront.crud.checkout import place_order
from food_storefront.crud.order import get_order_by_id
from food_storefront.crud.order_status import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    allowed_transitions,
    check_transition,
    is_legal,
    transition,
)
from food_storefront.exceptions import Forbidden, IllegalTransition, InvalidInput, NotFound
from food_storefront.models import Order, OrderStatusEnum

S = OrderStatusEnum

LEGAL = {
    (S.pending, S.confirmed),
    (S.pending, S.cancelled),
    (S.confirmed, S.preparing),
    (S.confirmed, S.cancelled),
    (S.preparing, S.delivered),
}


@pytest.fixture
def order_factory(db, world, fill_cart):
    async def _make(status=S.pending, customer=None):
        customer = customer or world.alice
        await fill_cart(customer, (world.a, 1))
        order = await place_order(db, customer, "Main st 1", "555-0100")
        if status != S.pending:
            path = {
                S.confirmed: [S.confirmed],
                S.preparing: [S.confirmed, S.preparing],
                S.delivered: [S.confirmed, S.preparing, S.delivered],
                S.cancelled: [S.cancelled],
            }[status]
            for step in path:
                order = await transition(db, world.owner_x, order.id, step)
        return order

    return _make


def test_table_covers_every_status():
    assert set(TRANSITIONS) == set(OrderStatusEnum)
    assert TERMINAL_STATUSES == {S.delivered, S.cancelled}


@pytest.mark.parametrize("current, target", list(itertools.product(S, S)))
def test_is_legal_matches_table(current, target):
    assert is_legal(current, target) == ((current, target) in LEGAL)


def test_check_transition_raises_with_both_states():
    with pytest.raises(IllegalTransition) as exc_info:
        check_transition(S.delivered, S.pending)
    assert exc_info.value.current == "delivered"
    assert exc_info.value.target == "pending"


def test_allowed_transitions_accepts_raw_values():
    assert allowed_transitions("confirmed") == {S.preparing, S.cancelled}


async def test_happy_path_to_delivered(db, world, order_factory):
    order = await order_factory()

    for target in (S.confirmed, S.preparing, S.delivered):
        order = await transition(db, world.owner_x, order.id, target)
        assert order.status == target


async def test_admin_may_transition(db, world, order_factory):
    order = await order_factory()

    order = await transition(db, world.admin, order.id, "cancelled")
    assert order.status == S.cancelled


@pytest.mark.parametrize(
    "current, target",
    [
        (S.pending, S.preparing),
        (S.pending, S.delivered),
        (S.confirmed, S.pending),
        (S.confirmed, S.delivered),
        (S.preparing, S.cancelled),
        (S.preparing, S.pending),
        (S.delivered, S.cancelled),
        (S.cancelled, S.confirmed),
    ],
)
async def test_illegal_transition_leaves_status(db, world, order_factory, current, target):
    order = await order_factory(current)
    order_id = order.id

    with pytest.raises(IllegalTransition):
        await transition(db, world.owner_x, order_id, target)

    assert (await get_order_by_id(db, order_id)).status == current


async def test_repeating_current_status_is_a_no_op(db, world, order_factory):
    order = await order_factory(S.confirmed)
    before = order.updated_at

    again = await transition(db, world.owner_x, order.id, S.confirmed)

    assert again.status == S.confirmed
    assert again.updated_at == before


async def test_terminal_status_repeat_is_a_no_op(db, world, order_factory):
    order = await order_factory(S.delivered)

    again = await transition(db, world.owner_x, order.id, S.delivered)
    assert again.status == S.delivered


async def test_owner_of_other_restaurant_is_forbidden(db, world, order_factory):
    order = await order_factory()
    order_id = order.id

    with pytest.raises(Forbidden):
        await transition(db, world.owner_y, order_id, S.confirmed)
    assert (await get_order_by_id(db, order_id)).status == S.pending


async def test_customer_cannot_change_status(db, world, order_factory):
    order = await order_factory()

    with pytest.raises(Forbidden):
        await transition(db, world.alice, order.id, S.cancelled)


async def test_authorization_is_checked_before_the_edge(db, world, order_factory):
    order = await order_factory(S.delivered)

    with pytest.raises(Forbidden):
        await transition(db, world.owner_y, order.id, S.pending)


async def test_unknown_order(db, world):
    with pytest.raises(NotFound):
        await transition(db, world.admin, 4242, S.confirmed)


async def test_unknown_status_value(db, world, order_factory):
    order = await order_factory()

    with pytest.raises(InvalidInput):
        await transition(db, world.owner_x, order.id, "shipped")


@pytest.fixture
def concurrent_change(monkeypatch, session_factory):
    """
    Пока transition держит прочитанный заказ, другой вызывающий
    в своей сессии успевает перевести его в другой статус.
    """

    def _install(new_status):
        real_get = order_status.get_order_by_id
        calls = []

        async def stale_then_fresh(session, order_id):
            order = await real_get(session, order_id)
            if not calls:
                calls.append(order_id)
                async with session_factory() as other:
                    await other.execute(update(Order).where(Order.id == order_id).values(status=new_status))
                    await other.commit()
            return order

        monkeypatch.setattr(order_status, "get_order_by_id", stale_then_fresh)

    return _install


async def test_concurrent_transition_to_same_target_succeeds(db, world, order_factory, concurrent_change):
    order = await order_factory()
    order_id = order.id
    concurrent_change(S.confirmed)

    result = await transition(db, world.owner_x, order_id, S.confirmed)

    assert result.status == S.confirmed
    assert (await get_order_by_id(db, order_id)).status == S.confirmed


async def test_concurrent_transition_to_other_status_fails(db, world, order_factory, concurrent_change):
    order = await order_factory()
    order_id = order.id
    concurrent_change(S.cancelled)

    with pytest.raises(IllegalTransition) as exc_info:
        await transition(db, world.owner_x, order_id, S.confirmed)

    assert exc_info.value.current == "cancelled"
    assert exc_info.value.target == "confirmed"
    assert (await get_order_by_id(db, order_id)).status == S.cancelled
