from __future__ import annotations

from pydantic import ValidationError

from qrdine.application.dto.responses import MenuResponse
from qrdine.application.errors import NotFoundError
from qrdine.application.mappers.menu_mapper import to_menu_response
from qrdine.application.ports.cache import CacheStore
from qrdine.application.ports.repositories import MenuRepository
from qrdine.domain.common.ids import RestaurantId


class MenuNotFoundError(NotFoundError):
    pass


def menu_cache_key(restaurant_id: RestaurantId) -> str:
    return f"menu:{restaurant_id}"


class GetMenu:
    def __init__(
        self,
        repository: MenuRepository,
        cache: CacheStore | None,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception:
            return None

    def _cache_set(self, key: str, value: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            return

    def execute(self, restaurant_id: RestaurantId) -> MenuResponse:
        key = menu_cache_key(restaurant_id)
        payload = self._cache_get(key)
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except ValidationError:
                pass

        menu = self._repository.get_menu_by_restaurant_id(restaurant_id)
        if menu is None:
            raise MenuNotFoundError(f"menu not found for restaurant_id={restaurant_id}")

        response = to_menu_response(menu)
        self._cache_set(key, response.model_dump_json())
        return response
