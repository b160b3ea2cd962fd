from __future__ import annotations

import hashlib
import os

from fastapi import APIRouter, Header, Request, Response

from qrdine.api.dependencies import cache_from, engine_from
from qrdine.application.dto.responses import MenuResponse
from qrdine.application.use_cases.get_menu import GetMenu
from qrdine.domain.common.ids import RestaurantId
from qrdine.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter()


def _get_menu_use_case(request: Request) -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(engine_from(request)),
        cache=cache_from(request),
        ttl_seconds=int(os.getenv("MENU_CACHE_TTL_SECONDS", "300")),
    )


@router.get("/v1/restaurants/{restaurant_id}/menu", response_model=MenuResponse)
def get_menu(
    restaurant_id: str,
    request: Request,
    response: Response,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = _get_menu_use_case(request).execute(RestaurantId(restaurant_id))

    digest = hashlib.sha256(payload.model_dump_json().encode("utf-8")).hexdigest()[:16]
    etag = f'"menu-{digest}"'
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload
