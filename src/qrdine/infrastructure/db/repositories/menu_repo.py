from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from qrdine.application.ports.repositories import MenuRepository, RestaurantRepository
from qrdine.domain.common.ids import MenuItemId, RestaurantId
from qrdine.domain.common.money import Money
from qrdine.domain.menu.entities import Menu, MenuItem, Restaurant
from qrdine.infrastructure.db.models.menu import RestaurantModel


class SqlAlchemyRestaurantRepository(RestaurantRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        with Session(self._engine) as session:
            model = session.get(RestaurantModel, str(restaurant_id))
        if model is None:
            return None
        return Restaurant(
            restaurant_id=RestaurantId(model.id),
            name=model.name,
            require_customer_login=model.require_customer_login,
        )


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None:
        statement = (
            select(RestaurantModel)
            .options(selectinload(RestaurantModel.items))
            .where(RestaurantModel.id == str(restaurant_id))
        )

        with Session(self._engine) as session:
            restaurant_model = session.execute(statement).scalar_one_or_none()
            if restaurant_model is None:
                return None
            items = [
                MenuItem(
                    item_id=MenuItemId(item.id),
                    name=item.name,
                    description=item.description,
                    price_money=Money(amount_cents=item.price_cents, currency=item.currency),
                    is_available=item.is_available,
                    category=item.category,
                )
                for item in restaurant_model.items
            ]

        return Menu(restaurant_id=RestaurantId(restaurant_model.id), items=items)
