from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from qrdine.api.dependencies import current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.requests import CancelOrderRequest, PlaceOrderRequest
from qrdine.application.dto.responses import OrderResponse
from qrdine.application.use_cases.get_order import GetOrder
from qrdine.application.use_cases.order_action import CancelOrder
from qrdine.application.use_cases.place_order import PlaceOrder
from qrdine.domain.common.ids import OrderId, RestaurantId, SessionToken
from qrdine.infrastructure.db.repositories.menu_repo import (
    SqlAlchemyMenuRepository,
    SqlAlchemyRestaurantRepository,
)
from qrdine.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrdine.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository

router = APIRouter()


def _place_order_use_case(request: Request) -> PlaceOrder:
    engine = engine_from(request)
    return PlaceOrder(
        restaurant_repository=SqlAlchemyRestaurantRepository(engine),
        menu_repository=SqlAlchemyMenuRepository(engine),
        table_repository=SqlAlchemyTableRepository(engine),
        order_repository=SqlAlchemyOrderRepository(engine),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    restaurant_id: str,
    request_dto: PlaceOrderRequest,
    request: Request,
    principal: Principal | None = Depends(current_principal),
) -> OrderResponse:
    return _place_order_use_case(request).execute(
        principal=principal,
        restaurant_id=RestaurantId(restaurant_id),
        request_dto=request_dto,
    )


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, request: Request) -> OrderResponse:
    use_case = GetOrder(order_repository=SqlAlchemyOrderRepository(engine_from(request)))
    return use_case.execute(order_id=OrderId(order_id))


@router.post("/v1/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: str, request_dto: CancelOrderRequest, request: Request) -> OrderResponse:
    use_case = CancelOrder(order_repository=SqlAlchemyOrderRepository(engine_from(request)))
    return use_case.execute(
        order_id=OrderId(order_id),
        session_id=SessionToken(request_dto.session_id),
    )
