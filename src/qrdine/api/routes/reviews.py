from __future__ import annotations

from fastapi import APIRouter, Request, status

from qrdine.api.dependencies import engine_from
from qrdine.application.dto.requests import SubmitReviewRequest
from qrdine.application.dto.responses import ReviewResponse
from qrdine.application.use_cases.reviews import SubmitReview
from qrdine.domain.common.ids import RestaurantId, SessionToken
from qrdine.infrastructure.db.repositories.menu_repo import SqlAlchemyRestaurantRepository
from qrdine.infrastructure.db.repositories.review_repo import SqlAlchemyReviewRepository

router = APIRouter()


@router.post(
    "/v1/restaurants/{restaurant_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_review(
    restaurant_id: str,
    request_dto: SubmitReviewRequest,
    request: Request,
) -> ReviewResponse:
    engine = engine_from(request)
    use_case = SubmitReview(
        restaurant_repository=SqlAlchemyRestaurantRepository(engine),
        review_repository=SqlAlchemyReviewRepository(engine),
    )
    return use_case.execute(
        restaurant_id=RestaurantId(restaurant_id),
        rating=request_dto.rating,
        comment=request_dto.comment,
        session_id=SessionToken(request_dto.session_id) if request_dto.session_id else None,
    )
