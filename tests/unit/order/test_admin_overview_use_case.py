from __future__ import annotations

import pytest

from qrdine.application.auth import AuthenticationRequiredError
from qrdine.application.dto.requests import PlaceOrderLineRequest, PlaceOrderRequest
from qrdine.application.use_cases.admin_overview import DEFAULT_POLL_INTERVAL_SECONDS, AdminOverview
from qrdine.application.use_cases.order_action import ApplyOrderAction
from qrdine.application.use_cases.place_order import PlaceOrder
from qrdine.application.use_cases.staff_calls import CallStaff
from qrdine.domain.common.ids import OrderId, RestaurantId, TableUsername
from qrdine.domain.order.entities import OrderAction

RESTAURANT = RestaurantId("bistro")


def test_overview_splits_requests_from_kitchen_orders(
    restaurant_repo, menu_repo, table_repo, order_repo, staff_call_repo, make_table, clock, admin
) -> None:
    make_table("T1", occupant="S1")
    place = PlaceOrder(restaurant_repo, menu_repo, table_repo, order_repo, clock)
    request = PlaceOrderRequest(
        table="T1",
        sessionId="S1",
        products=[PlaceOrderLineRequest(itemId="itm_fries", quantity=1)],
    )
    first = place.execute(None, RESTAURANT, request)
    clock.advance(minutes=1)
    second = place.execute(None, RESTAURANT, request)
    clock.advance(minutes=1)
    done = place.execute(None, RESTAURANT, request)
    actions = ApplyOrderAction(order_repo, clock)
    actions.execute(admin, RESTAURANT, OrderId(first.orderId), OrderAction.ACCEPT)
    actions.execute(admin, RESTAURANT, OrderId(done.orderId), OrderAction.COMPLETE)
    CallStaff(table_repo, staff_call_repo, clock).execute(
        None, RESTAURANT, TableUsername("T1"), "Bill"
    )

    response = AdminOverview(order_repo, staff_call_repo).execute(admin, RESTAURANT)

    assert [order.orderId for order in response.orderRequests] == [second.orderId]
    assert [order.orderId for order in response.activeOrders] == [first.orderId]
    assert len(response.activeStaffCalls) == 1
    assert response.pollIntervalSeconds == DEFAULT_POLL_INTERVAL_SECONDS


def test_overview_requires_principal(order_repo, staff_call_repo) -> None:
    with pytest.raises(AuthenticationRequiredError):
        AdminOverview(order_repo, staff_call_repo).execute(None, RESTAURANT)
