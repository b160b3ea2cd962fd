from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from qrdine.application.ports.repositories import TableSessionRepository
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableSessionId, TableUsername
from qrdine.domain.table.entities import TableSession
from qrdine.infrastructure.db.models.table import TableSessionModel


class SqlAlchemyTableSessionRepository(TableSessionRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_open(
        self,
        restaurant_id: RestaurantId,
        table: TableUsername,
        session_id: SessionToken,
    ) -> TableSession | None:
        statement = (
            select(TableSessionModel)
            .where(
                TableSessionModel.restaurant_id == str(restaurant_id),
                TableSessionModel.table_username == str(table),
                TableSessionModel.session_id == str(session_id),
                TableSessionModel.end_time.is_(None),
            )
            .order_by(TableSessionModel.start_time.desc())
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[TableSession]:
        statement = (
            select(TableSessionModel)
            .where(TableSessionModel.restaurant_id == str(restaurant_id))
            .order_by(TableSessionModel.updated_at.desc())
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_domain(self, model: TableSessionModel) -> TableSession:
        return TableSession(
            session_pk=TableSessionId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table=TableUsername(model.table_username),
            table_name=model.table_name,
            session_id=SessionToken(model.session_id),
            start_time=ensure_utc(model.start_time),
            end_time=ensure_utc(model.end_time) if model.end_time is not None else None,
            duration_minutes=model.duration_minutes,
            updated_at=ensure_utc(model.updated_at),
        )
