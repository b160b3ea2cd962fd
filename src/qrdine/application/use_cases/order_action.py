from __future__ import annotations

import logging

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import OrderResponse
from qrdine.application.errors import ConflictError, ForbiddenError, InvalidStateError
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.metrics.table_lifecycle import record_order_transition
from qrdine.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from qrdine.application.use_cases.get_order import OrderNotFoundError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import OrderId, RestaurantId, SessionToken
from qrdine.domain.order.entities import Order, OrderAction, OrderTransitionError

logger = logging.getLogger(__name__)


class InvalidOrderTransitionError(InvalidStateError):
    pass


class OrderConflictError(ConflictError):
    pass


class OrderOwnershipError(ForbiddenError):
    pass


def _persist_transition(
    order_repository: OrderRepository,
    original: Order,
    updated: Order,
    action: str,
) -> Order:
    try:
        return order_repository.update_with_version(updated, expected_version=original.version)
    except OptimisticConcurrencyError:
        current = order_repository.get(original.order_id)
        if current is None:
            raise OrderNotFoundError(f"order {original.order_id} not found")
        if current.state.is_terminal:
            raise InvalidOrderTransitionError(
                f"cannot {action} order from state={current.state.value}"
            )
        raise OrderConflictError(f"order {original.order_id} was modified concurrently")


class ApplyOrderAction:
    def __init__(self, order_repository: OrderRepository, clock: Clock = utcnow) -> None:
        self._order_repository = order_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        order_id: OrderId,
        action: OrderAction,
    ) -> OrderResponse:
        require_admin(principal, restaurant_id)
        order = self._order_repository.get(order_id)
        if order is None or order.restaurant_id != restaurant_id:
            raise OrderNotFoundError(f"order {order_id} not found")

        try:
            updated = order.apply(action, self._clock())
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(str(exc)) from exc

        if updated is order:
            return to_order_response(order)

        persisted = _persist_transition(self._order_repository, order, updated, action.value)
        record_order_transition(action.value, persisted.state)
        logger.info(
            "order_action_applied",
            extra={
                "restaurant_id": str(restaurant_id),
                "order_id": str(order_id),
                "action": action.value,
                "outcome": persisted.phase.value,
            },
        )
        return to_order_response(persisted)


class CancelOrder:
    """Let the session that placed an order withdraw it before the kitchen accepts it."""

    def __init__(self, order_repository: OrderRepository, clock: Clock = utcnow) -> None:
        self._order_repository = order_repository
        self._clock = clock

    def execute(self, order_id: OrderId, session_id: SessionToken) -> OrderResponse:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        if order.session_id != session_id:
            raise OrderOwnershipError("only the ordering session may cancel this order")

        try:
            updated = order.cancel(self._clock())
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(str(exc)) from exc

        persisted = _persist_transition(self._order_repository, order, updated, "cancel")
        record_order_transition("cancel", persisted.state)
        logger.info(
            "order_cancelled",
            extra={
                "restaurant_id": str(order.restaurant_id),
                "order_id": str(order_id),
                "session_id": str(session_id),
            },
        )
        return to_order_response(persisted)
