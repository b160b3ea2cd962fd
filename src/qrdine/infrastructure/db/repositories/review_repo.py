from __future__ import annotations

from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import Session

from qrdine.application.ports.repositories import ReviewRepository
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import RestaurantId, ReviewId, SessionToken
from qrdine.domain.review.entities import Review
from qrdine.infrastructure.db.models.review import ReviewModel


class SqlAlchemyReviewRepository(ReviewRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, review: Review) -> None:
        model = ReviewModel(
            id=str(review.review_id),
            restaurant_id=str(review.restaurant_id),
            rating=review.rating,
            comment=review.comment,
            session_id=review.session_id,
            created_at=review.created_at,
        )
        with Session(self._engine) as session:
            session.add(model)
            session.commit()

    def get(self, review_id: ReviewId) -> Review | None:
        with Session(self._engine) as session:
            model = session.get(ReviewModel, str(review_id))
        if model is None:
            return None
        return self._to_domain(model)

    def delete(self, review_id: ReviewId) -> bool:
        with Session(self._engine) as session:
            result = session.execute(delete(ReviewModel).where(ReviewModel.id == str(review_id)))
            session.commit()
        return result.rowcount == 1

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Review]:
        statement = (
            select(ReviewModel)
            .where(ReviewModel.restaurant_id == str(restaurant_id))
            .order_by(ReviewModel.created_at.desc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_domain(self, model: ReviewModel) -> Review:
        return Review(
            review_id=ReviewId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            rating=model.rating,
            comment=model.comment,
            session_id=SessionToken(model.session_id) if model.session_id else None,
            created_at=ensure_utc(model.created_at),
        )
