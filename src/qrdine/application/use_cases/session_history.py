from __future__ import annotations

from datetime import date

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import (
    OrderCardResponse,
    SessionHistoryItemResponse,
    SessionHistoryResponse,
)
from qrdine.application.mappers.order_mapper import to_order_response
from qrdine.application.mappers.review_mapper import to_review_response
from qrdine.application.mappers.staff_call_mapper import to_staff_call_response
from qrdine.application.ports.repositories import (
    OrderRepository,
    ReviewRepository,
    StaffCallRepository,
    TableSessionRepository,
)
from qrdine.application.projections.session_cards import SessionView, build_session_views
from qrdine.domain.common.ids import RestaurantId


class SessionHistory:
    def __init__(
        self,
        session_repository: TableSessionRepository,
        order_repository: OrderRepository,
        staff_call_repository: StaffCallRepository,
        review_repository: ReviewRepository,
    ) -> None:
        self._session_repository = session_repository
        self._order_repository = order_repository
        self._staff_call_repository = staff_call_repository
        self._review_repository = review_repository

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        on_date: date | None = None,
    ) -> SessionHistoryResponse:
        require_admin(principal, restaurant_id)
        views = build_session_views(
            sessions=self._session_repository.list_for_restaurant(restaurant_id),
            orders=self._order_repository.list_for_restaurant(restaurant_id),
            staff_calls=self._staff_call_repository.list_for_restaurant(restaurant_id),
            reviews=self._review_repository.list_for_restaurant(restaurant_id),
            on_date=on_date,
        )
        return SessionHistoryResponse(sessions=[_to_item(view) for view in views])


def _to_item(view: SessionView) -> SessionHistoryItemResponse:
    session = view.session
    return SessionHistoryItemResponse(
        sessionId=str(session.session_id),
        restaurantId=str(session.restaurant_id),
        table=str(session.table),
        tableName=session.table_name,
        startTime=session.start_time,
        endTime=session.end_time,
        durationMinutes=session.duration_minutes,
        isOpen=session.is_open,
        orders=[to_order_response(order) for order in view.orders],
        staffCalls=[to_staff_call_response(call) for call in view.staff_calls],
        reviews=[to_review_response(review) for review in view.reviews],
        cards=[
            OrderCardResponse(
                order=to_order_response(card.order) if card.order is not None else None,
                index=card.index,
                time=card.time,
                staffCalls=[to_staff_call_response(call) for call in card.staff_calls],
                reviews=[to_review_response(review) for review in card.reviews],
            )
            for card in view.cards
        ],
    )
