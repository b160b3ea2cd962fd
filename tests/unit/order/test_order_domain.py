from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from qrdine.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderLineId,
    RestaurantId,
    SessionToken,
    TableUsername,
)
from qrdine.domain.common.money import Money
from qrdine.domain.order.entities import (
    Order,
    OrderAction,
    OrderLine,
    OrderPhase,
    OrderState,
    OrderTransitionError,
    create_active_order,
)

NOW = datetime(2026, 10, 1, 18, 0, tzinfo=timezone.utc)


def _line(item: str, cents: int, quantity: int) -> OrderLine:
    price = Money(amount_cents=cents, currency="EUR")
    return OrderLine(
        line_id=OrderLineId(f"orl_{item}"),
        item_id=MenuItemId(item),
        name=item,
        quantity=quantity,
        unit_price=price,
        line_total=price.times(quantity),
    )


def _order() -> Order:
    return create_active_order(
        order_id=OrderId("ord_1"),
        restaurant_id=RestaurantId("bistro"),
        table=TableUsername("T1"),
        table_name="Window",
        session_id=SessionToken("S1"),
        customer_id=None,
        lines=[_line("itm_burger", 1000, 2), _line("itm_fries", 500, 1)],
        now=NOW,
    )


def test_new_order_is_an_active_request_with_summed_total() -> None:
    order = _order()

    assert order.state == OrderState.ACTIVE
    assert order.phase == OrderPhase.REQUEST
    assert order.total == Money(amount_cents=2500, currency="EUR")
    assert all(not line.admin_approved for line in order.lines)
    assert order.version == 1


def test_line_total_must_match_quantity() -> None:
    with pytest.raises(ValueError):
        OrderLine(
            line_id=OrderLineId("orl_1"),
            item_id=MenuItemId("itm_burger"),
            name="Burger",
            quantity=2,
            unit_price=Money(amount_cents=1000, currency="EUR"),
            line_total=Money(amount_cents=1000, currency="EUR"),
        )


def test_empty_order_is_rejected() -> None:
    with pytest.raises(ValueError):
        create_active_order(
            order_id=OrderId("ord_1"),
            restaurant_id=RestaurantId("bistro"),
            table=TableUsername("T1"),
            table_name="Window",
            session_id=SessionToken("S1"),
            customer_id=None,
            lines=[],
            now=NOW,
        )


def test_accept_moves_request_into_kitchen() -> None:
    accepted = _order().apply(OrderAction.ACCEPT, NOW + timedelta(minutes=1))

    assert accepted.state == OrderState.ACTIVE
    assert accepted.phase == OrderPhase.IN_KITCHEN
    assert all(line.admin_approved for line in accepted.lines)
    assert accepted.updated_at == NOW + timedelta(minutes=1)


def test_accept_is_idempotent_once_in_kitchen() -> None:
    accepted = _order().accept(NOW)

    assert accepted.accept(NOW + timedelta(minutes=5)) is accepted


def test_complete_works_from_either_active_phase() -> None:
    assert _order().apply(OrderAction.COMPLETE, NOW).state == OrderState.COMPLETE
    accepted = _order().accept(NOW)
    completed = accepted.apply(OrderAction.COMPLETE, NOW)
    assert completed.state == OrderState.COMPLETE
    assert completed.phase == OrderPhase.CLOSED


def test_reject_only_applies_to_requests() -> None:
    assert _order().apply(OrderAction.REJECT, NOW).state == OrderState.REJECT

    with pytest.raises(OrderTransitionError):
        _order().accept(NOW).apply(OrderAction.REJECT, NOW)


def test_reject_on_active_only_applies_in_kitchen() -> None:
    rejected = _order().accept(NOW).apply(OrderAction.REJECT_ON_ACTIVE, NOW)
    assert rejected.state == OrderState.REJECT

    with pytest.raises(OrderTransitionError):
        _order().apply(OrderAction.REJECT_ON_ACTIVE, NOW)


@pytest.mark.parametrize("action", list(OrderAction))
def test_terminal_orders_refuse_every_action(action: OrderAction) -> None:
    completed = _order().apply(OrderAction.COMPLETE, NOW)

    with pytest.raises(OrderTransitionError):
        completed.apply(action, NOW)


def test_cancel_only_before_acceptance() -> None:
    assert _order().cancel(NOW).state == OrderState.CANCEL

    with pytest.raises(OrderTransitionError):
        _order().accept(NOW).cancel(NOW)
