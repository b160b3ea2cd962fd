from __future__ import annotations

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session, selectinload

from qrdine.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderLineId,
    RestaurantId,
    SessionToken,
    TableUsername,
)
from qrdine.domain.common.money import Money
from qrdine.domain.order.entities import Order, OrderLine, OrderState
from qrdine.infrastructure.db.models.order import OrderLineModel, OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, order: Order) -> None:
        order_model = self._to_model(order)
        with Session(self._engine) as session:
            session.add(order_model)
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def update_with_version(self, order: Order, expected_version: int) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
            )
            .values(
                state=order.state.value,
                updated_at=order.updated_at,
                version=OrderModel.version + 1,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
            for line in order.lines:
                session.execute(
                    update(OrderLineModel)
                    .where(OrderLineModel.id == str(line.line_id))
                    .values(admin_approved=line.admin_approved)
                )
            session.commit()

        updated = self.get(order.order_id)
        if updated is None:
            raise RuntimeError(f"order {order.order_id} not found after update")
        return updated

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int:
        statement = select(func.count(OrderModel.id)).where(
            OrderModel.restaurant_id == str(restaurant_id),
            OrderModel.session_id == str(session_id),
            OrderModel.state == OrderState.ACTIVE.value,
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        state: OrderState | None = None,
    ) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.restaurant_id == str(restaurant_id))
        )
        if state is not None:
            statement = statement.where(OrderModel.state == state.value)
        statement = statement.order_by(OrderModel.created_at, OrderModel.id)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            restaurant_id=str(order.restaurant_id),
            table_username=str(order.table),
            table_name=order.table_name,
            session_id=str(order.session_id),
            customer_id=order.customer_id,
            state=order.state.value,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
            version=order.version,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        order_model.lines = [
            OrderLineModel(
                id=str(line.line_id),
                order_id=str(order.order_id),
                position=position,
                item_id=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unit_price_cents=line.unit_price.amount_cents,
                currency=line.unit_price.currency,
                line_total_cents=line.line_total.amount_cents,
                admin_approved=line.admin_approved,
            )
            for position, line in enumerate(order.lines)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        lines = [
            OrderLine(
                line_id=OrderLineId(line.id),
                item_id=MenuItemId(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unit_price=Money(amount_cents=line.unit_price_cents, currency=line.currency),
                line_total=Money(amount_cents=line.line_total_cents, currency=line.currency),
                admin_approved=line.admin_approved,
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            table=TableUsername(model.table_username),
            table_name=model.table_name,
            session_id=SessionToken(model.session_id),
            customer_id=model.customer_id,
            state=OrderState(model.state),
            lines=lines,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
            version=model.version,
        )
