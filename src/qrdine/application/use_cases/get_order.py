from __future__ import annotations

from qrdine.application.dto.responses import OrderResponse
from qrdine.application.errors import NotFoundError
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.ports.repositories import OrderRepository
from qrdine.domain.common.ids import OrderId


class OrderNotFoundError(NotFoundError):
    pass


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return to_order_response(order)
