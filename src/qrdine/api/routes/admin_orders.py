from __future__ import annotations

import os

from fastapi import APIRouter, Depends, Request

from qrdine.api.dependencies import admin_restaurant_id, current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.requests import OrderActionRequest
from qrdine.application.dto.responses import AdminOverviewResponse, OrderResponse
from qrdine.application.use_cases.admin_overview import DEFAULT_POLL_INTERVAL_SECONDS, AdminOverview
from qrdine.application.use_cases.order_action import ApplyOrderAction
from qrdine.domain.common.ids import OrderId, RestaurantId
from qrdine.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrdine.infrastructure.db.repositories.staff_call_repo import SqlAlchemyStaffCallRepository

router = APIRouter(prefix="/v1/admin/orders")


def _poll_interval_seconds() -> int:
    return int(os.getenv("ADMIN_POLL_INTERVAL_SECONDS", str(DEFAULT_POLL_INTERVAL_SECONDS)))


@router.get("", response_model=AdminOverviewResponse)
def admin_overview(
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> AdminOverviewResponse:
    engine = engine_from(request)
    use_case = AdminOverview(
        order_repository=SqlAlchemyOrderRepository(engine),
        staff_call_repository=SqlAlchemyStaffCallRepository(engine),
        poll_interval_seconds=_poll_interval_seconds(),
    )
    return use_case.execute(principal=principal, restaurant_id=restaurant_id)


@router.post("/{order_id}/actions", response_model=OrderResponse)
def apply_order_action(
    order_id: str,
    request_dto: OrderActionRequest,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> OrderResponse:
    use_case = ApplyOrderAction(order_repository=SqlAlchemyOrderRepository(engine_from(request)))
    return use_case.execute(
        principal=principal,
        restaurant_id=restaurant_id,
        order_id=OrderId(order_id),
        action=request_dto.action,
    )
