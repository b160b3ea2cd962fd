from __future__ import annotations

from qrdine.application.dto.responses import (
    RatingBucketResponse,
    ReviewResponse,
    ReviewStatsResponse,
)
from qrdine.domain.review.entities import RatingStats, Review


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        reviewId=str(review.review_id),
        restaurantId=str(review.restaurant_id),
        rating=review.rating,
        comment=review.comment,
        sessionId=review.session_id,
        createdAt=review.created_at,
    )


def to_review_stats_response(stats: RatingStats) -> ReviewStatsResponse:
    return ReviewStatsResponse(
        totalReviews=stats.total_reviews,
        averageRating=stats.average_rating,
        ratingDistribution=[
            RatingBucketResponse(star=star, count=count)
            for star, count in sorted(stats.distribution.items())
        ],
    )
