from __future__ import annotations

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import AdminOverviewResponse
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.mappers.staff_call_mapper import to_staff_call_response
from qrdine.application.ports.repositories import OrderRepository, StaffCallRepository
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import RestaurantId
from qrdine.domain.order.entities import OrderPhase, OrderState
from qrdine.domain.staff_call.entities import StaffCallStatus

DEFAULT_POLL_INTERVAL_SECONDS = 5


class AdminOverview:
    """Everything the admin dashboard re-fetches on each poll tick."""

    def __init__(
        self,
        order_repository: OrderRepository,
        staff_call_repository: StaffCallRepository,
        poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._order_repository = order_repository
        self._staff_call_repository = staff_call_repository
        self._poll_interval_seconds = poll_interval_seconds

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
    ) -> AdminOverviewResponse:
        require_admin(principal, restaurant_id)
        active = self._order_repository.list_for_restaurant(restaurant_id, state=OrderState.ACTIVE)
        active.sort(key=lambda order: ensure_utc(order.updated_at), reverse=True)
        calls = self._staff_call_repository.list_for_restaurant(
            restaurant_id, status=StaffCallStatus.ACTIVE
        )
        calls.sort(key=lambda call: ensure_utc(call.created_at), reverse=True)

        return AdminOverviewResponse(
            orderRequests=[
                to_order_response(order) for order in active if order.phase == OrderPhase.REQUEST
            ],
            activeOrders=[
                to_order_response(order)
                for order in active
                if order.phase == OrderPhase.IN_KITCHEN
            ],
            activeStaffCalls=[to_staff_call_response(call) for call in calls],
            pollIntervalSeconds=self._poll_interval_seconds,
        )
