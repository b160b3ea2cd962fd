from __future__ import annotations

from datetime import datetime

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from qrdine.application.ports.repositories import StaffCallRepository
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import RestaurantId, SessionToken, StaffCallId, TableUsername
from qrdine.domain.staff_call.entities import StaffCall, StaffCallStatus
from qrdine.infrastructure.db.models.staff_call import StaffCallModel


class SqlAlchemyStaffCallRepository(StaffCallRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, call: StaffCall) -> None:
        model = StaffCallModel(
            id=str(call.call_id),
            restaurant_id=str(call.restaurant_id),
            table_username=str(call.table),
            table_name=call.table_name,
            session_id=call.session_id,
            customer_id=call.customer_id,
            reason=call.reason,
            status=call.status.value,
            created_at=call.created_at,
            updated_at=call.updated_at,
        )
        with Session(self._engine) as session:
            session.add(model)
            session.commit()

    def get(self, call_id: StaffCallId) -> StaffCall | None:
        with Session(self._engine) as session:
            model = session.get(StaffCallModel, str(call_id))
        if model is None:
            return None
        return self._to_domain(model)

    def mark_resolved(self, call_id: StaffCallId, now: datetime) -> bool:
        statement = (
            update(StaffCallModel)
            .where(
                StaffCallModel.id == str(call_id),
                StaffCallModel.status == StaffCallStatus.ACTIVE.value,
            )
            .values(status=StaffCallStatus.RESOLVED.value, updated_at=now)
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount == 1

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int:
        statement = select(func.count(StaffCallModel.id)).where(
            StaffCallModel.restaurant_id == str(restaurant_id),
            StaffCallModel.session_id == str(session_id),
            StaffCallModel.status == StaffCallStatus.ACTIVE.value,
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: StaffCallStatus | None = None,
    ) -> list[StaffCall]:
        statement = select(StaffCallModel).where(
            StaffCallModel.restaurant_id == str(restaurant_id)
        )
        if status is not None:
            statement = statement.where(StaffCallModel.status == status.value)
        statement = statement.order_by(StaffCallModel.created_at, StaffCallModel.id)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_domain(self, model: StaffCallModel) -> StaffCall:
        return StaffCall(
            call_id=StaffCallId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table=TableUsername(model.table_username),
            table_name=model.table_name,
            session_id=SessionToken(model.session_id) if model.session_id else None,
            customer_id=model.customer_id,
            reason=model.reason,
            status=StaffCallStatus(model.status),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )
