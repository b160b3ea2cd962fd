from __future__ import annotations

from qrdine.application.dto.responses import MenuItemResponse, MenuResponse, MoneyResponse
from qrdine.domain.common.money import Money
from qrdine.domain.menu.entities import Menu


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=money.amount_cents, currency=money.currency)


def to_menu_response(menu: Menu) -> MenuResponse:
    items = [
        MenuItemResponse(
            itemId=str(item.item_id),
            name=item.name,
            description=item.description,
            priceMoney=to_money_response(item.price_money),
            isAvailable=item.is_available,
            category=item.category,
        )
        for item in menu.items
    ]
    return MenuResponse(
        restaurantId=str(menu.restaurant_id),
        categories=menu.categories,
        items=items,
    )
