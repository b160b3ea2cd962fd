from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from qrdine.domain.common.ids import RestaurantId, ReviewId, SessionToken

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class Review:
    review_id: ReviewId
    restaurant_id: RestaurantId
    rating: int
    comment: str | None
    session_id: SessionToken | None
    created_at: datetime

    def __post_init__(self) -> None:
        if isinstance(self.rating, bool) or not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}")


@dataclass(frozen=True)
class RatingStats:
    total_reviews: int
    average_rating: float
    distribution: dict[int, int]


def rating_stats(reviews: list[Review]) -> RatingStats:
    distribution = {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}
    for review in reviews:
        distribution[review.rating] += 1

    total = len(reviews)
    average = sum(review.rating for review in reviews) / total if total else 0.0
    return RatingStats(
        total_reviews=total,
        average_rating=round(average, 1),
        distribution=distribution,
    )
