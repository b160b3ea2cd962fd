from __future__ import annotations

from uuid import uuid4

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import ReviewListResponse, ReviewResponse
from qrdine.application.errors import NotFoundError, ValidationError
from qrdine.application.mappers.review_mapper import to_review_response, to_review_stats_response
from qrdine.application.ports.repositories import ReviewRepository, RestaurantRepository
from qrdine.application.use_cases.place_order import RestaurantNotFoundError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import RestaurantId, ReviewId, SessionToken
from qrdine.domain.review.entities import MAX_RATING, MIN_RATING, Review, rating_stats


class InvalidReviewError(ValidationError):
    pass


class ReviewNotFoundError(NotFoundError):
    pass


class SubmitReview:
    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        review_repository: ReviewRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._restaurant_repository = restaurant_repository
        self._review_repository = review_repository
        self._clock = clock

    def execute(
        self,
        restaurant_id: RestaurantId | None,
        rating: int | None,
        comment: str | None = None,
        session_id: SessionToken | None = None,
    ) -> ReviewResponse:
        if not restaurant_id:
            raise InvalidReviewError("restaurant is required")
        if (
            rating is None
            or isinstance(rating, bool)
            or not isinstance(rating, int)
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            raise InvalidReviewError(
                f"rating must be an integer between {MIN_RATING} and {MAX_RATING}"
            )
        if self._restaurant_repository.get(restaurant_id) is None:
            raise RestaurantNotFoundError(f"restaurant {restaurant_id} not found")

        cleaned = comment.strip() if comment else None
        review = Review(
            review_id=ReviewId(f"rev_{uuid4().hex[:12]}"),
            restaurant_id=restaurant_id,
            rating=rating,
            comment=cleaned or None,
            session_id=session_id or None,
            created_at=self._clock(),
        )
        self._review_repository.add(review)
        return to_review_response(review)


class ListReviews:
    def __init__(self, review_repository: ReviewRepository) -> None:
        self._review_repository = review_repository

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
    ) -> ReviewListResponse:
        require_admin(principal, restaurant_id)
        reviews = self._review_repository.list_for_restaurant(restaurant_id)
        reviews.sort(key=lambda review: review.created_at, reverse=True)
        return ReviewListResponse(
            reviews=[to_review_response(review) for review in reviews],
            stats=to_review_stats_response(rating_stats(reviews)),
        )


class DeleteReview:
    def __init__(self, review_repository: ReviewRepository) -> None:
        self._review_repository = review_repository

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        review_id: ReviewId,
    ) -> None:
        require_admin(principal, restaurant_id)
        review = self._review_repository.get(review_id)
        if review is None or review.restaurant_id != restaurant_id:
            raise ReviewNotFoundError(f"review {review_id} not found")
        if not self._review_repository.delete(review_id):
            raise ReviewNotFoundError(f"review {review_id} not found")
