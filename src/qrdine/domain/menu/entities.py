from __future__ import annotations

from dataclasses import dataclass, field

from qrdine.domain.common.ids import MenuItemId, RestaurantId
from qrdine.domain.common.money import Money


@dataclass(frozen=True)
class Restaurant:
    restaurant_id: RestaurantId
    name: str
    require_customer_login: bool = False


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    description: str | None
    price_money: Money
    is_available: bool
    category: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")


@dataclass(frozen=True)
class Menu:
    restaurant_id: RestaurantId
    items: list[MenuItem] = field(default_factory=list)

    @property
    def categories(self) -> list[str]:
        seen: list[str] = []
        for item in self.items:
            if item.category and item.category not in seen:
                seen.append(item.category)
        return seen

    def find(self, item_id: str) -> MenuItem | None:
        for item in self.items:
            if str(item.item_id) == item_id:
                return item
        return None
