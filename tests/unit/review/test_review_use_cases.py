from __future__ import annotations

import pytest

from qrdine.application.auth import AdminAccessRequiredError
from qrdine.application.use_cases.place_order import RestaurantNotFoundError
from qrdine.application.use_cases.reviews import (
    DeleteReview,
    InvalidReviewError,
    ListReviews,
    ReviewNotFoundError,
    SubmitReview,
)
from qrdine.domain.common.ids import RestaurantId, ReviewId, SessionToken

RESTAURANT = RestaurantId("bistro")


@pytest.fixture
def submit(restaurant_repo, review_repo, clock) -> SubmitReview:
    return SubmitReview(restaurant_repo, review_repo, clock)


def test_submit_review_trims_comment(submit, review_repo) -> None:
    response = submit.execute(RESTAURANT, 5, "  Lovely  ", SessionToken("S1"))

    assert response.rating == 5
    assert response.comment == "Lovely"
    assert response.sessionId == "S1"
    assert ReviewId(response.reviewId) in review_repo.reviews


def test_blank_comment_is_stored_as_none(submit) -> None:
    assert submit.execute(RESTAURANT, 3, "   ").comment is None


@pytest.mark.parametrize("rating", [None, 0, 6, True, 4.5])
def test_submit_rejects_invalid_rating(submit, rating) -> None:
    with pytest.raises(InvalidReviewError):
        submit.execute(RESTAURANT, rating)


def test_submit_requires_restaurant(submit) -> None:
    with pytest.raises(InvalidReviewError):
        submit.execute(None, 4)


def test_submit_unknown_restaurant(submit) -> None:
    with pytest.raises(RestaurantNotFoundError):
        submit.execute(RestaurantId("ghost"), 4)


def test_list_reviews_newest_first_with_stats(submit, review_repo, clock, admin) -> None:
    submit.execute(RESTAURANT, 5)
    clock.advance(minutes=1)
    submit.execute(RESTAURANT, 4)
    clock.advance(minutes=1)
    submit.execute(RESTAURANT, 4)
    clock.advance(minutes=1)
    submit.execute(RESTAURANT, 2)

    response = ListReviews(review_repo).execute(admin, RESTAURANT)

    assert [review.rating for review in response.reviews] == [2, 4, 4, 5]
    assert response.stats.totalReviews == 4
    assert response.stats.averageRating == 3.8
    assert [bucket.count for bucket in response.stats.ratingDistribution] == [0, 1, 0, 2, 1]


def test_list_reviews_requires_admin(review_repo, customer) -> None:
    with pytest.raises(AdminAccessRequiredError):
        ListReviews(review_repo).execute(customer, RESTAURANT)


def test_delete_review(submit, review_repo, admin) -> None:
    review_id = ReviewId(submit.execute(RESTAURANT, 1).reviewId)

    DeleteReview(review_repo).execute(admin, RESTAURANT, review_id)

    assert review_repo.get(review_id) is None
    with pytest.raises(ReviewNotFoundError):
        DeleteReview(review_repo).execute(admin, RESTAURANT, review_id)
