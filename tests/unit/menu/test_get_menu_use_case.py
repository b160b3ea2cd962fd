from __future__ import annotations

import pytest

from qrdine.application.use_cases.get_menu import GetMenu, MenuNotFoundError, menu_cache_key
from qrdine.domain.common.ids import RestaurantId

RESTAURANT = RestaurantId("bistro")


class FakeCache:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.values[key] = value
        self.ttls[key] = ttl_seconds


class BrokenCache:
    def get(self, key: str) -> str | None:
        raise ConnectionError("redis down")

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise ConnectionError("redis down")


def test_get_menu_maps_items_and_categories(menu_repo) -> None:
    response = GetMenu(menu_repo, cache=None).execute(RESTAURANT)

    assert response.restaurantId == "bistro"
    assert response.categories == ["Mains", "Sides", "Starters"]
    assert [item.itemId for item in response.items] == ["itm_burger", "itm_fries", "itm_soup"]
    assert response.items[0].priceMoney.amountCents == 1000
    assert response.items[2].isAvailable is False


def test_get_menu_uses_cache_after_first_read(menu_repo) -> None:
    cache = FakeCache()
    use_case = GetMenu(menu_repo, cache=cache, ttl_seconds=60)

    first = use_case.execute(RESTAURANT)
    second = use_case.execute(RESTAURANT)

    assert first == second
    assert menu_repo.calls == 1
    assert cache.ttls[menu_cache_key(RESTAURANT)] == 60


def test_corrupt_cache_entry_falls_back_to_repository(menu_repo) -> None:
    cache = FakeCache()
    cache.values[menu_cache_key(RESTAURANT)] = "{not json"

    response = GetMenu(menu_repo, cache=cache).execute(RESTAURANT)

    assert response.restaurantId == "bistro"
    assert menu_repo.calls == 1


def test_cache_outage_does_not_fail_menu_reads(menu_repo) -> None:
    response = GetMenu(menu_repo, cache=BrokenCache()).execute(RESTAURANT)

    assert len(response.items) == 3


def test_unknown_restaurant_menu(menu_repo) -> None:
    with pytest.raises(MenuNotFoundError):
        GetMenu(menu_repo, cache=None).execute(RestaurantId("ghost"))
