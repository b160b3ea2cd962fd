from __future__ import annotations

import logging
from uuid import uuid4

from qrdine.application.auth import Principal, Role
from qrdine.application.dto.requests import PlaceOrderRequest
from qrdine.application.dto.responses import OrderResponse
from qrdine.application.errors import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.metrics.table_lifecycle import record_order_placed
from qrdine.application.ports.repositories import (
    MenuRepository,
    OrderRepository,
    RestaurantRepository,
    TableRepository,
)
from qrdine.application.use_cases.claim_table import TableInUseError, TableNotFoundError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import OrderId, OrderLineId, RestaurantId, SessionToken, TableUsername
from qrdine.domain.order.entities import OrderLine, create_active_order

logger = logging.getLogger(__name__)


class RestaurantNotFoundError(NotFoundError):
    pass


class CustomerLoginRequiredError(UnauthorizedError):
    pass


class TableNotActiveError(InvalidStateError):
    pass


class MenuItemUnavailableError(ValidationError):
    pass


class InvalidOrderRequestError(ValidationError):
    pass


class PlaceOrder:
    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        menu_repository: MenuRepository,
        table_repository: TableRepository,
        order_repository: OrderRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._restaurant_repository = restaurant_repository
        self._menu_repository = menu_repository
        self._table_repository = table_repository
        self._order_repository = order_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        request_dto: PlaceOrderRequest,
    ) -> OrderResponse:
        if not request_dto.table or not request_dto.session_id:
            raise InvalidOrderRequestError("table and sessionId are required")
        if not request_dto.products:
            raise InvalidOrderRequestError("at least one product is required")

        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(f"restaurant {restaurant_id} not found")
        if restaurant.require_customer_login and (
            principal is None or principal.role != Role.CUSTOMER
        ):
            raise CustomerLoginRequiredError("customer login is required to order here")

        table_username = TableUsername(request_dto.table)
        session_id = SessionToken(request_dto.session_id)
        table = self._table_repository.get_by_username(restaurant_id, table_username)
        if table is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table={table_username}"
            )
        if not table.is_active:
            raise TableNotActiveError(f"table {table_username} is not active")
        if not table.is_held_by(session_id):
            raise TableInUseError("Table is already in use by another person.")

        menu = self._menu_repository.get_menu_by_restaurant_id(restaurant_id)
        order_lines: list[OrderLine] = []
        for product in request_dto.products:
            if product.quantity < 1:
                raise InvalidOrderRequestError("quantity must be >= 1")
            menu_item = menu.find(product.item_id) if menu is not None else None
            if menu_item is None:
                raise MenuItemUnavailableError(f"menu item {product.item_id} does not exist")
            if not menu_item.is_available:
                raise MenuItemUnavailableError(f"menu item {product.item_id} is unavailable")

            order_lines.append(
                OrderLine(
                    line_id=OrderLineId(f"orl_{uuid4().hex[:12]}"),
                    item_id=menu_item.item_id,
                    name=menu_item.name,
                    quantity=product.quantity,
                    unit_price=menu_item.price_money,
                    line_total=menu_item.price_money.times(product.quantity),
                )
            )

        currencies = {line.unit_price.currency for line in order_lines}
        if len(currencies) > 1:
            raise InvalidOrderRequestError("all ordered items must share one currency")

        order = create_active_order(
            order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
            restaurant_id=restaurant_id,
            table=table.username,
            table_name=table.name,
            session_id=session_id,
            customer_id=principal.customer_id if principal is not None else None,
            lines=order_lines,
            now=self._clock(),
        )
        self._order_repository.add(order)
        record_order_placed(str(restaurant_id))
        logger.info(
            "order_placed",
            extra={
                "restaurant_id": str(restaurant_id),
                "table": str(table.username),
                "session_id": str(session_id),
                "order_id": str(order.order_id),
            },
        )
        return to_order_response(order)
