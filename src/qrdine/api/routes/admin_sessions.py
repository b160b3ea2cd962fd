from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from qrdine.api.dependencies import admin_restaurant_id, current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.responses import SessionHistoryResponse
from qrdine.application.use_cases.session_history import SessionHistory
from qrdine.domain.common.ids import RestaurantId
from qrdine.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrdine.infrastructure.db.repositories.review_repo import SqlAlchemyReviewRepository
from qrdine.infrastructure.db.repositories.staff_call_repo import SqlAlchemyStaffCallRepository
from qrdine.infrastructure.db.repositories.table_session_repo import (
    SqlAlchemyTableSessionRepository,
)

router = APIRouter()


@router.get("/v1/admin/sessions", response_model=SessionHistoryResponse)
def session_history(
    request: Request,
    on_date: date | None = Query(default=None, alias="date"),
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> SessionHistoryResponse:
    engine = engine_from(request)
    use_case = SessionHistory(
        session_repository=SqlAlchemyTableSessionRepository(engine),
        order_repository=SqlAlchemyOrderRepository(engine),
        staff_call_repository=SqlAlchemyStaffCallRepository(engine),
        review_repository=SqlAlchemyReviewRepository(engine),
    )
    return use_case.execute(principal=principal, restaurant_id=restaurant_id, on_date=on_date)
