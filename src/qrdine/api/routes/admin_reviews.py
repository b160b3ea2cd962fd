from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from qrdine.api.dependencies import admin_restaurant_id, current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.responses import ReviewListResponse
from qrdine.application.use_cases.reviews import DeleteReview, ListReviews
from qrdine.domain.common.ids import RestaurantId, ReviewId
from qrdine.infrastructure.db.repositories.review_repo import SqlAlchemyReviewRepository

router = APIRouter(prefix="/v1/admin/reviews")


@router.get("", response_model=ReviewListResponse)
def list_reviews(
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> ReviewListResponse:
    use_case = ListReviews(review_repository=SqlAlchemyReviewRepository(engine_from(request)))
    return use_case.execute(principal=principal, restaurant_id=restaurant_id)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> Response:
    use_case = DeleteReview(review_repository=SqlAlchemyReviewRepository(engine_from(request)))
    use_case.execute(
        principal=principal,
        restaurant_id=restaurant_id,
        review_id=ReviewId(review_id),
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
