from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qrdine.application.ports.repositories import (
    DuplicateTableUsernameError,
    OpenSessionExistsError,
    TableRepository,
)
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableId, TableUsername
from qrdine.domain.table.entities import Table, TableSession
from qrdine.infrastructure.db.models.table import TableModel, TableSessionModel


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None:
        statement = select(TableModel).where(
            TableModel.id == str(table_id),
            TableModel.restaurant_id == str(restaurant_id),
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def get_by_username(
        self,
        restaurant_id: RestaurantId,
        username: TableUsername,
    ) -> Table | None:
        statement = select(TableModel).where(
            TableModel.restaurant_id == str(restaurant_id),
            TableModel.username == str(username),
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Table]:
        statement = (
            select(TableModel)
            .where(TableModel.restaurant_id == str(restaurant_id))
            .order_by(TableModel.name, TableModel.username)
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def add(self, table: Table) -> None:
        model = TableModel(
            id=str(table.table_id),
            restaurant_id=str(table.restaurant_id),
            username=str(table.username),
            name=table.name,
            is_active=table.is_active,
            active_session_id=table.active_session_id,
            created_at=table.created_at,
            updated_at=table.created_at,
        )
        with Session(self._engine) as session:
            session.add(model)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateTableUsernameError(
                    f"table username {table.username} already exists"
                ) from exc

    def delete(self, restaurant_id: RestaurantId, table_id: TableId) -> bool:
        statement = delete(TableModel).where(
            TableModel.id == str(table_id),
            TableModel.restaurant_id == str(restaurant_id),
            TableModel.active_session_id.is_(None),
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount == 1

    def activate(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None:
        statement = (
            update(TableModel)
            .where(
                TableModel.id == str(table_id),
                TableModel.restaurant_id == str(restaurant_id),
            )
            .values(is_active=True, updated_at=_now())
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                return None
            session.commit()
        return self.get(restaurant_id, table_id)

    def claim(self, table: Table, session: TableSession) -> bool:
        statement = (
            update(TableModel)
            .where(
                TableModel.id == str(table.table_id),
                TableModel.restaurant_id == str(table.restaurant_id),
                TableModel.is_active.is_(True),
                TableModel.active_session_id.is_(None),
            )
            .values(active_session_id=str(session.session_id), updated_at=session.start_time)
        )
        with Session(self._engine) as db_session:
            result = db_session.execute(statement)
            if result.rowcount != 1:
                db_session.rollback()
                return False
            db_session.add(_session_to_model(session))
            try:
                db_session.commit()
            except IntegrityError as exc:
                db_session.rollback()
                raise OpenSessionExistsError(
                    f"table {table.username} already has an open session"
                ) from exc
        return True

    def deactivate(
        self,
        table: Table,
        expected_session_id: SessionToken | None,
        closed_session: TableSession | None,
    ) -> bool:
        if expected_session_id is None:
            occupant_guard = TableModel.active_session_id.is_(None)
        else:
            occupant_guard = TableModel.active_session_id == str(expected_session_id)
        statement = (
            update(TableModel)
            .where(
                TableModel.id == str(table.table_id),
                TableModel.restaurant_id == str(table.restaurant_id),
                occupant_guard,
            )
            .values(is_active=False, active_session_id=None, updated_at=_now())
        )
        with Session(self._engine) as db_session:
            result = db_session.execute(statement)
            if result.rowcount != 1:
                db_session.rollback()
                return False
            if closed_session is not None:
                _store_closed_session(db_session, closed_session)
            db_session.commit()
        return True

    def _to_domain(self, model: TableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            username=TableUsername(model.username),
            name=model.name,
            is_active=model.is_active,
            active_session_id=(
                SessionToken(model.active_session_id) if model.active_session_id else None
            ),
            created_at=ensure_utc(model.created_at),
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _session_to_model(session: TableSession) -> TableSessionModel:
    return TableSessionModel(
        id=str(session.session_pk),
        restaurant_id=str(session.restaurant_id),
        table_username=str(session.table),
        table_name=session.table_name,
        session_id=str(session.session_id),
        start_time=session.start_time,
        end_time=session.end_time,
        duration_minutes=session.duration_minutes,
        updated_at=session.updated_at,
    )


def _store_closed_session(db_session: Session, closed_session: TableSession) -> None:
    # only an open row is closed; a session someone else already closed keeps its times
    db_session.execute(
        update(TableSessionModel)
        .where(
            TableSessionModel.id == str(closed_session.session_pk),
            TableSessionModel.end_time.is_(None),
        )
        .values(
            end_time=closed_session.end_time,
            duration_minutes=closed_session.duration_minutes,
            updated_at=closed_session.updated_at,
        )
    )
